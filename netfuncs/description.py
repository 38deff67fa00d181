"""Fetching and parsing network function descriptions from the name resolver."""

from __future__ import annotations

import json
import socket
from typing import Any

from .implementation import Implementation
from .logger import Level, log
from .nf import NetworkFunction
from .nf_type import NFType, is_valid

MODULE_NAME = "orchestrator"

DATABASE_ADDRESS = "localhost"
DATABASE_PORT = 2828
DATABASE_BASE_URL = "/nfs/"

CODE_POSITION = 9
CODE_METHOD_NOT_ALLOWED = "405"
CODE_OK = "200"

_HEADER_END = b"\r\n\r\n"
_RECEIVE_SIZE = 4096


class DescriptionError(Exception):
    """The description of a network function cannot be obtained or is invalid."""


class UnknownFunctionError(DescriptionError):
    """The name resolver does not know the requested network function."""


class _Object(list):
    """A JSON object kept as its ordered list of (key, value) pairs."""


def _warn(message: str) -> DescriptionError:
    log(Level.WARNING, MODULE_NAME, message)
    return DescriptionError(message)


def _syntax_error() -> DescriptionError:
    return _warn("The content does not respect the JSON syntax")


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise _syntax_error()
    return value


def _parse_implementation(pairs: Any) -> Implementation:
    if not isinstance(pairs, _Object):
        raise _syntax_error()

    fields: dict[str, str] = {}
    for key, value in pairs:
        if key == "type":
            type_text = _string(value)
            if not is_valid(type_text):
                raise _warn(f'Invalid implementation type "{type_text}"')
            fields["type"] = type_text
        elif key in ("uri", "cores", "location"):
            fields[key] = _string(value)
        else:
            raise _warn(f'Invalid key "{key}" within an implementation')

    if "uri" not in fields or "type" not in fields:
        raise _warn(
            'Key "uri", key "type", or both are not found into an implementation description'
        )

    type_text = fields["type"]
    has_cores = "cores" in fields
    has_location = "location" in fields
    if type_text == NFType.DPDK.value:
        if not has_cores or not has_location:
            raise _warn(
                f'Description of a NF of type "{type_text}" received without the '
                '"cores" attribute, "location" attribute, or both'
            )
    elif has_cores or has_location:
        raise _warn(
            f'Description of a NF of type "{type_text}" received with a wrong '
            'attribute ("cores", "location", or both)'
        )

    return Implementation(
        NFType.parse(type_text),
        fields["uri"],
        fields.get("cores", ""),
        fields.get("location", ""),
    )


def parse_answer(answer: str, nf_name: str) -> NetworkFunction:
    """Build the network function described by the JSON ``answer``.

    Raises DescriptionError when the answer is not valid JSON, describes
    another function, or does not follow the expected structure.
    """
    try:
        document = json.loads(answer, object_pairs_hook=_Object)
    except ValueError:
        raise _syntax_error() from None
    if not isinstance(document, _Object):
        raise _syntax_error()

    name: str | None = None
    implementations: list[Implementation] | None = None

    for key, value in document:
        if key == "name":
            name = _string(value)
            if name != nf_name:
                raise _warn(f'Required NF "{nf_name}", received info for NF "{name}"')
        elif key == "implementations":
            if not isinstance(value, list) or isinstance(value, _Object):
                raise _syntax_error()
            if not value:
                raise _warn('Key "implementations" without descriptions')
            implementations = [_parse_implementation(item) for item in value]
        else:
            raise _warn(f'Invalid key "{key}"')

    if name is None or implementations is None:
        raise _warn(
            'Key "name", or key "implementations", or both not found in the answer'
        )

    function = NetworkFunction(name)
    for implementation in implementations:
        function.add_implementation(implementation)
    return function


def split_http_response(data: bytes) -> tuple[str, str]:
    """Return the three-character status code and the body of an HTTP response.

    The body is empty when the end of the headers cannot be found.
    """
    code = data[CODE_POSITION:CODE_POSITION + 3].decode("ascii", errors="replace")
    separator = data.find(_HEADER_END)
    body = b"" if separator < 0 else data[separator + len(_HEADER_END):]
    return code, body.decode("utf-8", errors="replace")


def _request(nf_name: str, host: str, port: int) -> bytes:
    return (
        f"GET {DATABASE_BASE_URL}{nf_name} HTTP/1.1\r\n"
        f"Host: {host}:{port}\r\n"
        "Connection: close\r\n"
        "Accept: */*\r\n\r\n"
    ).encode("utf-8")


def _exchange(request: bytes, host: str, port: int) -> bytes:
    chunks: list[bytes] = []
    with socket.create_connection((host, port)) as connection:
        connection.sendall(request)
        while chunk := connection.recv(_RECEIVE_SIZE):
            chunks.append(chunk)
    return b"".join(chunks)


def fetch_description(
    nf_name: str, host: str = DATABASE_ADDRESS, port: int = DATABASE_PORT
) -> NetworkFunction:
    """Ask the name resolver for the description of ``nf_name``.

    Raises UnknownFunctionError when the resolver does not know the function
    and DescriptionError for any other failure.
    """
    log(Level.DEBUG_INFO, MODULE_NAME, f'Considering the NF "{nf_name}"')

    try:
        data = _exchange(_request(nf_name, host, port), host, port)
    except OSError as exc:
        log(Level.ERROR, MODULE_NAME, f"Cannot contact the name resolver: {exc}")
        raise DescriptionError(f"Cannot contact the name resolver: {exc}") from exc

    log(Level.DEBUG_INFO, MODULE_NAME, "Data received: ")
    log(Level.DEBUG_INFO, MODULE_NAME, data.decode("utf-8", errors="replace"))

    code, body = split_http_response(data)
    if code == CODE_METHOD_NOT_ALLOWED:
        raise UnknownFunctionError(f'Unknown NF "{nf_name}"')
    if code != CODE_OK:
        raise DescriptionError(f"The name resolver answered with code {code!r}")

    return parse_answer(body, nf_name)