import pytest

from netfuncs.catalog import ConfigurationError, load_catalog
from netfuncs.nf_type import NFType

SCHEMA = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="network-functions">
    <xs:complexType>
      <xs:sequence>
        <xs:element name="network-function" minOccurs="0" maxOccurs="unbounded">
          <xs:complexType>
            <xs:sequence>
              <xs:element name="implementation" maxOccurs="unbounded">
                <xs:complexType>
                  <xs:attribute name="type" type="xs:string" use="required"/>
                  <xs:attribute name="uri" type="xs:string" use="required"/>
                  <xs:attribute name="cores" type="xs:string"/>
                  <xs:attribute name="location" type="xs:string"/>
                </xs:complexType>
              </xs:element>
            </xs:sequence>
            <xs:attribute name="name" type="xs:string" use="required"/>
          </xs:complexType>
        </xs:element>
      </xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""

GOOD = """<?xml version="1.0"?>
<network-functions>
  <!-- a comment -->
  <network-function name="firewall">
    <implementation type="docker" uri="registry/firewall"/>
    <implementation type="dpdk" uri="/opt/fw" cores="2" location="local"/>
  </network-function>
  <network-function name="nat">
    <implementation type="kvm" uri="images/nat.qcow2"/>
  </network-function>
</network-functions>
"""


@pytest.fixture
def schema(tmp_path):
    path = tmp_path / "schema.xsd"
    path.write_text(SCHEMA)
    return path


def write(tmp_path, text, name="config.xml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_loads_functions_in_order(tmp_path, schema):
    catalog = load_catalog(write(tmp_path, GOOD), schema)
    assert [nf.name for nf in catalog] == ["firewall", "nat"]


def test_loads_implementations(tmp_path, schema):
    firewall, nat = load_catalog(write(tmp_path, GOOD), schema)
    docker, dpdk = firewall.implementations
    assert docker.type is NFType.DOCKER
    assert docker.uri == "registry/firewall"
    assert docker.cores == ""
    assert dpdk.type is NFType.DPDK
    assert (dpdk.cores, dpdk.location) == ("2", "local")
    assert [impl.type for impl in nat.implementations] == [NFType.KVM]


def test_dpdk_json_has_cores_and_location(tmp_path, schema):
    firewall, _ = load_catalog(write(tmp_path, GOOD), schema)
    assert firewall.to_json()["implementations"][1] == {
        "uri": "/opt/fw",
        "type": "dpdk",
        "cores": "2",
        "location": "local",
    }


def test_dpdk_without_cores_is_rejected(tmp_path, schema):
    text = GOOD.replace(' cores="2"', "")
    with pytest.raises(ConfigurationError, match="is not valid"):
        load_catalog(write(tmp_path, text), schema)


def test_docker_with_location_is_rejected(tmp_path, schema):
    text = GOOD.replace(
        'uri="registry/firewall"', 'uri="registry/firewall" location="local"'
    )
    with pytest.raises(ConfigurationError, match="is not valid"):
        load_catalog(write(tmp_path, text), schema)


def test_schema_violation_is_rejected(tmp_path, schema):
    text = GOOD.replace(' name="nat"', "")
    with pytest.raises(ConfigurationError, match="is not valid"):
        load_catalog(write(tmp_path, text), schema)


def test_malformed_file_is_rejected(tmp_path, schema):
    with pytest.raises(ConfigurationError, match="parsing failed"):
        load_catalog(write(tmp_path, "<network-functions>"), schema)


def test_missing_file_is_rejected(tmp_path, schema):
    with pytest.raises(ConfigurationError, match="parsing failed"):
        load_catalog(tmp_path / "absent.xml", schema)


def test_missing_schema_is_rejected(tmp_path):
    with pytest.raises(ConfigurationError, match="schema cannot be loaded"):
        load_catalog(write(tmp_path, GOOD), tmp_path / "absent.xsd")


def test_invalid_schema_is_rejected(tmp_path):
    bad_schema = write(tmp_path, "<not-a-schema/>", "bad.xsd")
    with pytest.raises(ConfigurationError, match="schema is not valid"):
        load_catalog(write(tmp_path, GOOD), bad_schema)


def test_empty_catalog(tmp_path, schema):
    text = "<network-functions/>"
    assert load_catalog(write(tmp_path, text), schema) == []