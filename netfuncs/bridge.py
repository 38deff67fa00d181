"""Forwarding packets between the ports of a network function."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

PKT_TO_NF_THRESHOLD = 200
MAC_LENGTH = 6
NEW_DESTINATION_BYTE = 0x0A

PacketHook = Callable[[int, bytes], "bytes | None"]


@dataclass
class Port:
    """A port with a queue of arriving packets and a bounded outgoing queue."""

    name: str
    capacity: int | None = None
    incoming: deque[bytes] = field(default_factory=deque)
    outgoing: deque[bytes] = field(default_factory=deque)

    def receive(self, limit: int = PKT_TO_NF_THRESHOLD) -> list[bytes]:
        """Take up to ``limit`` packets from the incoming queue."""
        count = min(limit, len(self.incoming))
        return [self.incoming.popleft() for _ in range(count)]

    def send(self, packets: Sequence[bytes]) -> int:
        """Queue as many packets as there is room for; return how many were queued."""
        room = len(packets) if self.capacity is None else max(
            0, self.capacity - len(self.outgoing)
        )
        accepted = list(packets[:room])
        self.outgoing.extend(accepted)
        return len(accepted)


@dataclass
class RoundResult:
    """What happened during one forwarding round."""

    received: int = 0
    sent: int = 0
    filtered: int = 0
    overflow: int = 0


def rewrite_destination_mac(packet: bytes) -> bytes:
    """Return the packet with every destination MAC byte set to 0x0a."""
    if len(packet) < MAC_LENGTH:
        raise ValueError("packet is shorter than an Ethernet destination address")
    return bytes([NEW_DESTINATION_BYTE] * MAC_LENGTH) + bytes(packet[MAC_LENGTH:])


def _rewrite_hook(port_index: int, packet: bytes) -> bytes | None:
    return rewrite_destination_mac(packet)


def forward_round(
    ports: Sequence[Port], packet_filter: PacketHook | None = None
) -> RoundResult:
    """Move the packets received on each port to the next port.

    ``packet_filter`` is called with the index of the receiving port and the
    packet; it returns the packet to forward or None to drop it. Without it
    the destination MAC address of every packet is rewritten.
    """
    hook = packet_filter if packet_filter is not None else _rewrite_hook
    result = RoundResult()
    pending: list[list[bytes]] = [[] for _ in ports]

    for index, port in enumerate(ports):
        output = (index + 1) % len(ports)
        for packet in port.receive():
            result.received += 1
            forwarded = hook(index, packet)
            if forwarded is None:
                result.filtered += 1
                continue
            pending[output].append(forwarded)

    for port, packets in zip(ports, pending):
        if packets:
            sent = port.send(packets)
            result.sent += sent
            result.overflow += len(packets) - sent

    return result