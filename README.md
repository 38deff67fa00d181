# netfuncs

Tools for describing, locating and running network functions (NFs):

- a **name resolver**: an HTTP service that publishes, for every network
  function, the implementations it is available in (DPDK process, Docker
  container or KVM virtual machine);
- **compute controller** helpers that ask the resolver for a function's
  description, pick an implementation for each function, hand out CPU
  cores to DPDK functions and start and stop functions through helper
  scripts;
- **packet-processing building blocks**: a port-to-port bridge that
  rewrites the destination MAC address, a DPI filter that drops HTTP
  traffic containing forbidden words, and the command-line options such
  network functions take.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running the name resolver

```
netfuncs-resolver --f ./config/example.xml
```

The command must be run as root; otherwise it logs an error and exits
with status 1. `--f` is mandatory and names the XML file describing the
network functions; `--h` prints the help text. The file is validated
against the XML schema at `./config/network-functions.xsd` (relative to
the working directory), and the service then answers on port 2828 until
a line is read from standard input.

A configuration file lists `network-function` elements, each with a
`name` attribute and `implementation` children:

```xml
<network-functions>
  <network-function name="firewall">
    <implementation type="docker" uri="example/firewall"/>
    <implementation type="dpdk" uri="/opt/nf/firewall" cores="1" location="local"/>
  </network-function>
</network-functions>
```

Implementations of type `dpdk` must carry both `cores` and `location`;
the other types must carry neither. A schema that cannot be loaded, a
file that cannot be parsed, does not match the schema or breaks this
rule makes `load_catalog` raise `ConfigurationError`.

Two resources are served, both answering only `GET`:

- `/nfs` returns every network function as
  `{"network-functions": [...]}`;
- `/nfs/<name>` returns one function, e.g.
  `{"name": "firewall", "implementations": [{"uri": "example/firewall", "type": "docker"}]}`.
  DPDK implementations also carry `cores` and `location`.

An unknown function name answers 405, a path outside `/nfs` or with too
many segments 404, a request without a `Host` header 400, and any method
other than `GET` 501. Successful answers are indented JSON with
`Content-Type: application/json` and `Cache-Control: no-cache`.

## Using the library

### Catalogue and resolver

```python
from netfuncs.catalog import load_catalog
from netfuncs.resolver_server import handle_request, make_server

catalog = load_catalog("config/example.xml", "config/network-functions.xsd")
response = handle_request(catalog, "GET", "/nfs/firewall", {"Host": "localhost"})
print(response.status, response.body)

server = make_server(catalog, "127.0.0.1", 2828)  # not started yet
```

`load_catalog` returns `NetworkFunction` objects (`netfuncs.nf`) in
document order; each holds `Implementation` objects
(`netfuncs.implementation`) whose `type` is an `NFType`
(`netfuncs.nf_type`: `DPDK`, `DOCKER`, `KVM`). `NFType.parse("docker")`
raises `ValueError` for an unknown name, and `is_valid` tells whether a
name is known.

### Fetching descriptions

`netfuncs.description.fetch_description(name, host, port)` sends a
`GET /nfs/<name>` to a resolver (by default `localhost:2828`) and returns
a `NetworkFunction`. It raises `UnknownFunctionError` when the resolver
answers 405 and `DescriptionError` for any other failure.
`parse_answer(answer, name)` checks and decodes the JSON answer alone,
and `split_http_response(data)` returns the status code and body of a
raw HTTP response.

### Managing functions

`netfuncs.nfs_manager.NFsManager` keeps the functions attached to one
LSI:

- `add(nf)` or `retrieve_description(name)` register functions;
- `select_implementations()` picks Docker (only with
  `enable_docker=True` and when the Docker check script reports it
  running), then DPDK, then KVM (only with `enable_kvm=True` and when the
  KVM check script reports it running), and returns whether every
  function got one;
- `get_nf_type(name)` returns the selected type;
- `start_nf(name, number_of_ports, ipv4_requirements, eth_requirements)`
  and `stop_nf(name)` run the start and stop scripts; `stop_all()`
  returns the outcome per name;
- `info_lines()` describes each function's name, type and status.

Scripts are run with `subprocess` unless a `runner` callable is given.
A script's exit status of 0 is taken as failure and any other status as
success. `start_nf` raises `KeyError` for an unknown function.

`CoreAllocator.set_core_mask(mask)` records the available cores and
`allocate(cores_required)` returns a mask of that many cores, handed out
round robin. `convert_netmask("255.255.255.0")` returns `24`.

### Packet processing

- `netfuncs.bridge`: `Port` (with `receive(limit)` and `send(packets)`
  over in-memory queues, `send` respecting an optional `capacity`),
  `rewrite_destination_mac(packet)` and `forward_round(ports,
  packet_filter)`, which moves each port's packets to the next port and
  returns a `RoundResult` with counts of packets received, sent,
  filtered and lost to overflow.
- `netfuncs.packet_filter.DPIFilter(patterns)`: `should_drop(packet)`
  tells whether an Ethernet/IPv4/TCP frame to port 80 carries a payload
  matching one of the case-insensitive patterns (by default `porn` and
  `sex`). A `DPIFilter` can be passed to `forward_round` as the
  `packet_filter`; it inspects only packets from the first port.
- `netfuncs.nf_options`: `parse_nf_arguments(argv, exact_ports,
  require_semaphore)` parses `--p`, `--s`, `--l` and `--h` into
  `NFOptions`, raising `OptionsError`; `open_log(name)` returns standard
  output, standard error or a new file; `usage(name, exact_ports)`
  returns the help text.
- `netfuncs.logger`: `log`, `format_line`, `set_threshold` and the
  `Level` enumeration behind the single-line log output.

## What this package does not do

- It ships no XML schema for the configuration file and none of the
  start, stop or check scripts `NFsManager` runs; they must be provided
  at the paths the code expects.
- The bridge and DPI filter work on in-memory queues of byte strings.
  There is no command that attaches them to real network interfaces or
  shared packet rings, and no network function executable is installed.