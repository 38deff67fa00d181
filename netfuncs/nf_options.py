"""Command-line options shared by the packet-processing network functions."""

from __future__ import annotations

import getopt
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

NUM_PORTS = 2


def _help_text(exact_ports: bool) -> str:
    if exact_ports:
        ports_line = "--p port_name --p port_name --l file_name [--s semaphore_name]"
        ports_help = "Port to attach to; give it exactly twice."
        semaphore_help = "Semaphore to wait on (required when semaphores are enabled)."
    else:
        ports_line = "--p port_name [--p port_name ...] --s semaphore_name --l file_name"
        ports_help = "Port to attach to; give it once for every port."
        semaphore_help = "Semaphore to wait on."
    return (
        "Usage:\n"
        "  sudo ./nf <runtime options> -- " + ports_line + "\n"
        "\n"
        "Arguments:\n"
        "  --p port_name\n"
        "        " + ports_help + "\n"
        "  --l file_name\n"
        "        Where to write the log: a file name, stdout or stderr.\n"
        "  --s semaphore_name\n"
        "        " + semaphore_help + "\n"
        "  --h\n"
        "        Show this help.\n"
        "\n"
        "Example:\n"
        "  sudo ./nf -c 0x1 -n 2 --proc-type=secondary -- --p port1 --p port2 --s sem\n"
        "\n"
    )


class OptionsError(Exception):
    """The command line of a network function is wrong or help was asked for."""

    def __init__(self, message: str = "", *, help_requested: bool = False) -> None:
        super().__init__(message)
        self.help_requested = help_requested


@dataclass(frozen=True)
class NFOptions:
    """What a network function was asked to work with."""

    ports: tuple[str, ...]
    log_file: str
    semaphore: str | None = None
    remaining: tuple[str, ...] = ()


def parse_nf_arguments(
    argv: Sequence[str],
    exact_ports: bool = False,
    require_semaphore: bool = False,
) -> NFOptions:
    """Parse ``--p``, ``--s``, ``--l`` and ``--h`` from the arguments after the program name.

    With ``exact_ports`` exactly two ports are required, otherwise at least one.
    Raises OptionsError when the command line is not acceptable.
    """
    try:
        options, remaining = getopt.gnu_getopt(list(argv), "", ["s=", "p=", "l=", "h"])
    except getopt.GetoptError as exc:
        raise OptionsError(f"Invalid command line parameter: {exc}") from exc

    ports: list[str] = []
    semaphore: str | None = None
    log_file: str | None = None

    for option, value in options:
        if option == "--p":
            ports.append(value)
        elif option == "--s":
            if semaphore is not None:
                raise OptionsError(
                    "The parameter '--s' appear too many times in the command line"
                )
            semaphore = value
        elif option == "--l":
            if log_file is not None:
                raise OptionsError(
                    "The parameter '--l' appear too many times in the command line"
                )
            log_file = value
        elif option == "--h":
            raise OptionsError(help_requested=True)

    minimum_ports = NUM_PORTS if exact_ports else 1
    if (
        (require_semaphore and semaphore is None)
        or len(ports) < minimum_ports
        or log_file is None
    ):
        raise OptionsError("Not all mandatory arguments are present in the command line")

    if exact_ports and len(ports) > NUM_PORTS:
        raise OptionsError("Exactly two ports must be specified")

    return NFOptions(tuple(ports), log_file, semaphore, tuple(remaining))


def open_log(name: str) -> TextIO:
    """Return the stream to log on: standard output, standard error or a new file."""
    if name == "stdout":
        return sys.stdout
    if name == "stderr":
        return sys.stderr
    try:
        return open(name, "w", encoding="utf-8")
    except OSError as exc:
        raise OptionsError(f"[{name}] Unable to open file to log!") from exc


def usage(name: str, exact_ports: bool = False) -> str:
    """Return the help text of the network function called ``name``."""
    return f"\n\n[{name}] {_help_text(exact_ports)}\n"