"""Command that serves the catalogue of network functions over HTTP."""

from __future__ import annotations

import getopt
import os
import sys
import threading
from collections.abc import Sequence

from .catalog import MODULE_NAME, ConfigurationError, load_catalog
from .logger import Level, log
from .resolver_server import REST_PORT, make_server

USAGE = """Usage:
  sudo ./name-resolver --f file_name

Parameters:
  --f file_name
        Name of the xml file describing the possible implementations for the network
        functions.

Options:
  --h
        Print this help.

Example:
  sudo ./name-resolver --f ./config/example.xml

"""


class UsageError(Exception):
    """The command line is wrong or help was asked for."""


def parse_command_line(argv: Sequence[str]) -> str:
    """Return the configuration file named by ``--f``; raise UsageError otherwise."""
    try:
        options, _ = getopt.gnu_getopt(list(argv), "", ["f=", "h"])
    except getopt.GetoptError as exc:
        raise UsageError(f"Invalid command line parameter: {exc}") from exc

    file_name = None
    for option, value in options:
        if option == "--h":
            raise UsageError("")
        if option == "--f":
            file_name = value

    if file_name is None:
        raise UsageError("Not all mandatory arguments are present in the command line")
    return file_name


def main(argv: Sequence[str] | None = None) -> int:
    """Run the name resolver until a line is read from standard input."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else MODULE_NAME
    args = sys.argv[1:] if argv is None else list(argv)

    if os.geteuid() != 0:
        log(Level.ERROR, MODULE_NAME, f"Root permissions are required to run {program}")
        return 1

    try:
        file_name = parse_command_line(args)
    except UsageError as exc:
        if str(exc):
            print(f"[{MODULE_NAME}] {exc}", file=sys.stderr)
        print(f"\n\n[{MODULE_NAME}] {USAGE}", file=sys.stderr)
        return 1

    try:
        catalog = load_catalog(file_name)
    except ConfigurationError:
        log(Level.ERROR, MODULE_NAME, "Cannot start the database")
        return 1

    try:
        server = make_server(catalog, "", REST_PORT)
    except OSError:
        log(Level.ERROR, MODULE_NAME, "Error when starting the HTTP deamon")
        return 1

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        sys.stdin.readline()
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())