import pytest

from netfuncs.bridge import (
    PKT_TO_NF_THRESHOLD,
    Port,
    forward_round,
    rewrite_destination_mac,
)
from netfuncs.packet_filter import DPIFilter

DST_MAC = bytes.fromhex("020000000002")
SRC_MAC = bytes.fromhex("020000000001")


def frame(payload=b"data"):
    return DST_MAC + SRC_MAC + b"\x08\x00" + payload


def http_frame(payload):
    ip = bytearray(20)
    ip[0] = 0x45
    ip[9] = 6
    tcp = bytearray(20)
    tcp[2:4] = (80).to_bytes(2, "big")
    tcp[12] = 0x50
    return DST_MAC + SRC_MAC + b"\x08\x00" + bytes(ip) + bytes(tcp) + payload


def test_rewrite_destination_mac():
    packet = frame()
    rewritten = rewrite_destination_mac(packet)
    assert rewritten[:6] == b"\x0a" * 6
    assert rewritten[6:] == packet[6:]


def test_rewrite_rejects_short_packet():
    with pytest.raises(ValueError):
        rewrite_destination_mac(b"\x01\x02")


def test_receive_respects_limit():
    port = Port("p")
    port.incoming.extend(frame(bytes([i])) for i in range(5))
    got = port.receive(3)
    assert len(got) == 3
    assert len(port.incoming) == 2
    assert got[0] == frame(b"\x00")


def test_default_limit_is_threshold():
    port = Port("p")
    port.incoming.extend(frame() for _ in range(PKT_TO_NF_THRESHOLD + 5))
    assert len(port.receive()) == PKT_TO_NF_THRESHOLD


def test_send_with_capacity():
    port = Port("p", capacity=2)
    assert port.send([frame(), frame(), frame()]) == 2
    assert len(port.outgoing) == 2


def test_forward_moves_to_next_port_and_rewrites():
    ports = [Port("a"), Port("b"), Port("c")]
    ports[0].incoming.append(frame(b"x"))
    ports[2].incoming.append(frame(b"z"))
    result = forward_round(ports)
    assert list(ports[1].outgoing) == [rewrite_destination_mac(frame(b"x"))]
    assert list(ports[0].outgoing) == [rewrite_destination_mac(frame(b"z"))]
    assert not ports[2].outgoing
    assert result.received == 2
    assert result.sent == 2


def test_forward_counts_overflow():
    ports = [Port("a"), Port("b", capacity=1)]
    ports[0].incoming.extend([frame(), frame(), frame()])
    result = forward_round(ports)
    assert result.sent == 1
    assert result.overflow == 2
    assert result.received == result.sent + result.overflow + result.filtered


def test_forward_with_dpi_filter():
    ports = [Port("a"), Port("b")]
    bad = http_frame(b"GET /porn HTTP/1.1")
    good = http_frame(b"GET / HTTP/1.1")
    ports[0].incoming.extend([bad, good])
    ports[1].incoming.append(bad)
    result = forward_round(ports, DPIFilter())
    assert list(ports[1].outgoing) == [good]
    assert list(ports[0].outgoing) == [bad]
    assert result.filtered == 1


def test_single_port_loops_back():
    ports = [Port("only")]
    ports[0].incoming.append(frame())
    forward_round(ports)
    assert list(ports[0].outgoing) == [rewrite_destination_mac(frame())]


def test_empty_round():
    ports = [Port("a"), Port("b")]
    result = forward_round(ports)
    assert (result.received, result.sent, result.filtered, result.overflow) == (0, 0, 0, 0)