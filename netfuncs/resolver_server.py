"""HTTP interface answering queries about the known network functions."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .catalog import MODULE_NAME
from .logger import Level, log
from .nf import NetworkFunction

REST_PORT = 2828
BASE_URL = "nfs"
JSON_CONTENT_TYPE = "application/json"
NO_CACHE = "no-cache"


@dataclass(frozen=True)
class Response:
    """Status, body and headers of an answer."""

    status: HTTPStatus
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def _has_host(headers: Mapping[str, str]) -> bool:
    return any(key.lower() == "host" for key in headers)


def handle_request(
    catalog: Iterable[NetworkFunction],
    method: str,
    url: str,
    headers: Mapping[str, str],
) -> Response:
    """Answer a request for ``/nfs`` or ``/nfs/<name>``."""
    log(Level.DEBUG_INFO, MODULE_NAME, f"New {method} request for {url}")
    for key, value in headers.items():
        log(Level.DEBUG, MODULE_NAME, f"{key}: {value}")

    if method != "GET":
        log(Level.DEBUG_INFO, MODULE_NAME, f'Method "{method}" not implemented')
        return Response(HTTPStatus.NOT_IMPLEMENTED)

    path = url.split("?", 1)[0]
    segments = [segment for segment in path.split("/") if segment]

    if segments and segments[0] != BASE_URL:
        log(Level.DEBUG_INFO, MODULE_NAME, f'Resource "{url}" does not exist')
        return Response(HTTPStatus.NOT_FOUND)

    if not segments or len(segments) > 2:
        log(Level.DEBUG_INFO, MODULE_NAME, f'Malformed URL "{url}"')
        return Response(HTTPStatus.NOT_FOUND)

    if not _has_host(headers):
        log(Level.DEBUG_INFO, MODULE_NAME, '"Host" header not present in the request')
        return Response(HTTPStatus.BAD_REQUEST)

    try:
        if len(segments) == 1:
            log(Level.DEBUG_INFO, MODULE_NAME, "Required all the resources")
            document = {"network-functions": [nf.to_json() for nf in catalog]}
        else:
            name = segments[1]
            log(Level.DEBUG_INFO, MODULE_NAME, f"Required resource: {name}")
            match = next((nf for nf in catalog if nf.name == name), None)
            if match is None:
                log(
                    Level.WARNING,
                    MODULE_NAME,
                    f"Method GET is not supported for resource '{name}'",
                )
                return Response(HTTPStatus.METHOD_NOT_ALLOWED)
            document = match.to_json()
        body = json.dumps(document, indent=4).encode("utf-8")
    except Exception:
        log(Level.ERROR, MODULE_NAME, "An error occurred while retrieving the json!")
        return Response(HTTPStatus.INTERNAL_SERVER_ERROR)

    return Response(
        HTTPStatus.OK,
        body,
        {"Content-Type": JSON_CONTENT_TYPE, "Cache-Control": NO_CACHE},
    )


def make_server(
    catalog: Iterable[NetworkFunction], host: str = "", port: int = REST_PORT
) -> ThreadingHTTPServer:
    """Create (but do not start) an HTTP server answering from ``catalog``."""
    functions = list(catalog)

    class _Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def _answer(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            if length:
                self.rfile.read(length)
            response = handle_request(
                functions, self.command, self.path, dict(self.headers.items())
            )
            self.send_response(response.status)
            for key, value in response.headers.items():
                self.send_header(key, value)
            self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(response.body)

        do_GET = do_HEAD = do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = _answer

        def log_message(self, format: str, *args: object) -> None:
            log(Level.DEBUG, MODULE_NAME, format % args)

    return ThreadingHTTPServer((host, port), _Handler)