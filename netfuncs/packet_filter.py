"""Deep packet inspection: drop HTTP requests carrying forbidden words."""

from __future__ import annotations

import re
from collections.abc import Iterable

ETH_TYPE_POSITION = 12
ETH_TYPE_IP = 0x0800
IP_POSITION = 14
IP_PROTOCOL_POSITION = 9
IP_HLEN_POSITION = 0
IP_PROTOCOL_TCP = 6
TCP_DST_PORT_POSITION = 2
TCP_DST_PORT_HTTP = 80
TCP_DATA_OFFSET_POSITION = 12

FORBIDDEN_WORDS = ("porn", "sex")


class DPIFilter:
    """Matches the payload of HTTP requests against case-insensitive patterns.

    Only packets arriving on the first port are inspected when the filter is
    used as a forwarding hook.
    """

    def __init__(self, patterns: Iterable[str] = FORBIDDEN_WORDS) -> None:
        self.patterns = tuple(patterns)
        compiled = []
        for pattern in self.patterns:
            try:
                compiled.append(re.compile(pattern.encode("utf-8"), re.IGNORECASE))
            except re.error as exc:
                raise ValueError(
                    f"Error compiling regexp '{pattern}' at character {exc.pos}: {exc.msg}"
                ) from exc
        self._compiled = tuple(compiled)

    @staticmethod
    def _http_payload(packet: bytes) -> bytes | None:
        if len(packet) < IP_POSITION:
            return None
        ethertype = int.from_bytes(
            packet[ETH_TYPE_POSITION:ETH_TYPE_POSITION + 2], "big"
        )
        if ethertype != ETH_TYPE_IP:
            return None

        ip = packet[IP_POSITION:]
        if len(ip) <= IP_PROTOCOL_POSITION or ip[IP_PROTOCOL_POSITION] != IP_PROTOCOL_TCP:
            return None
        ip_header_length = (ip[IP_HLEN_POSITION] & 0x0F) * 4

        tcp = ip[ip_header_length:]
        if len(tcp) <= TCP_DATA_OFFSET_POSITION:
            return None
        dst_port = int.from_bytes(
            tcp[TCP_DST_PORT_POSITION:TCP_DST_PORT_POSITION + 2], "big"
        )
        if dst_port != TCP_DST_PORT_HTTP:
            return None
        data_offset = ((tcp[TCP_DATA_OFFSET_POSITION] & 0xF0) >> 4) * 4

        payload = tcp[data_offset:]
        return payload or None

    def should_drop(self, packet: bytes) -> bool:
        """Tell whether an IPv4/TCP packet to port 80 carries a forbidden word."""
        payload = self._http_payload(bytes(packet))
        if payload is None:
            return False
        return any(regex.search(payload) for regex in self._compiled)

    def __call__(self, port_index: int, packet: bytes) -> bytes | None:
        """Forwarding hook: the packet to send on, or None to drop it."""
        if port_index == 0 and self.should_drop(packet):
            return None
        return packet