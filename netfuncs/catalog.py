"""Loading the catalogue of network functions from an XML description."""

from __future__ import annotations

from collections.abc import Iterator
from os import PathLike

from lxml import etree

from .implementation import Implementation
from .logger import Level, log
from .nf import NetworkFunction
from .nf_type import NFType

MODULE_NAME = "name-resolver"

NETWORK_FUNCTIONS_XSD = "./config/network-functions.xsd"

NETWORK_FUNCTION_ELEMENT = "network-function"
IMPLEMENTATION_ELEMENT = "implementation"
NAME_ATTRIBUTE = "name"
TYPE_ATTRIBUTE = "type"
URI_ATTRIBUTE = "uri"
CORES_ATTRIBUTE = "cores"
LOCATION_ATTRIBUTE = "location"


class ConfigurationError(Exception):
    """The schema or the description of the network functions is unusable."""


def _error(message: str) -> ConfigurationError:
    log(Level.ERROR, MODULE_NAME, message)
    return ConfigurationError(message)


def _children(element: etree._Element, name: str) -> Iterator[etree._Element]:
    for child in element:
        if isinstance(child.tag, str) and etree.QName(child).localname == name:
            yield child


def _type_of(text: str) -> NFType:
    if text == NFType.DPDK.value:
        return NFType.DPDK
    if text == NFType.DOCKER.value:
        return NFType.DOCKER
    return NFType.KVM


def _read_implementation(element: etree._Element, path: str) -> Implementation:
    type_text = element.get(TYPE_ATTRIBUTE)
    uri = element.get(URI_ATTRIBUTE)
    cores = element.get(CORES_ATTRIBUTE)
    location = element.get(LOCATION_ATTRIBUTE)

    if type_text is None or uri is None:
        raise _error(f"Configuration file '{path}' is not valid")

    if type_text == NFType.DPDK.value:
        if cores is None or location is None:
            raise _error(f"Configuration file '{path}' is not valid")
    elif cores is not None or location is not None:
        raise _error(f"Configuration file '{path}' is not valid")

    log(Level.DEBUG, MODULE_NAME, f"\ttype: {type_text} - URI: {uri}")
    if cores is not None:
        log(Level.DEBUG, MODULE_NAME, f"\t\tcores: {cores}")

    return Implementation(_type_of(type_text), uri, cores or "", location or "")


def _read_function(element: etree._Element, path: str) -> NetworkFunction:
    name = element.get(NAME_ATTRIBUTE)
    if name is None:
        raise _error(f"Configuration file '{path}' is not valid")
    log(Level.DEBUG, MODULE_NAME, f"Network function: {name}")

    function = NetworkFunction(name)
    for child in _children(element, IMPLEMENTATION_ELEMENT):
        function.add_implementation(_read_implementation(child, path))
    return function


def load_catalog(
    path: str | PathLike, schema_path: str | PathLike = NETWORK_FUNCTIONS_XSD
) -> list[NetworkFunction]:
    """Read and validate the XML file describing the network functions.

    Returns the functions in document order; raises ConfigurationError when
    the schema or the file cannot be loaded or the file is not valid.
    """
    path = str(path)
    log(Level.DEBUG_INFO, MODULE_NAME, f"Reading configuration file: {path}")

    try:
        schema_doc = etree.parse(str(schema_path), etree.XMLParser(no_network=True))
    except (OSError, etree.XMLSyntaxError) as exc:
        raise _error("The schema cannot be loaded or is not well-formed.") from exc

    try:
        schema = etree.XMLSchema(schema_doc)
    except etree.XMLSchemaParseError as exc:
        raise _error("The XML schema is not valid.") from exc

    try:
        document = etree.parse(path)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise _error(f"XML file '{path}' parsing failed.") from exc

    if not schema.validate(document):
        raise _error(f"Configuration file '{path}' is not valid")

    root = document.getroot()
    return [
        _read_function(element, path)
        for element in _children(root, NETWORK_FUNCTION_ELEMENT)
    ]