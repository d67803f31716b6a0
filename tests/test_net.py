import socket
import threading
import time

import pytest

from conftest import fill_row
from tetris_config import CONFIG
from tetris_net import (MsgKind, NetError, NetLink, ProtocolError, Role, decode, encode,
                        measure_height, parse_address, read_port)


def wait_for(link, timeout=1.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        messages = link.poll()
        if messages:
            return messages
        time.sleep(0.005)
    return []


@pytest.mark.parametrize("kind,value,byte", [
    (MsgKind.HEIGHT, 17, 0x11),
    (MsgKind.LINES, 3, 0x23),
    (MsgKind.LOST, 0, 0x40),
    (MsgKind.QUIT, 0, 0x60),
    (MsgKind.PAUSE, 0, 0x80),
])
def test_wire_bytes(kind, value, byte):
    assert encode(kind, value) == bytes([byte])
    assert decode(byte) == (kind, value)


def test_value_must_fit_five_bits():
    with pytest.raises(ValueError):
        encode(MsgKind.LINES, 32)
    with pytest.raises(ValueError):
        encode(MsgKind.HEIGHT, -1)


@pytest.mark.parametrize("byte", [0xA0, 0xC5, 0xFF])
def test_unknown_kind(byte):
    with pytest.raises(ProtocolError):
        decode(byte)


def test_ports_and_addresses():
    assert read_port("") == CONFIG["NET_PORT"]
    assert read_port("0") == CONFIG["NET_PORT"]
    assert read_port("80") == 1025
    assert read_port("99999") == 65535
    assert read_port("4000") == 4000
    assert parse_address(":4000") == (None, 4000)
    assert parse_address("example.org:4001") == ("example.org", 4001)
    assert parse_address("example.org") == ("example.org", CONFIG["NET_PORT"])


def test_poll_without_data_returns_nothing(link_pair):
    left, right = link_pair
    assert left.poll() == []
    assert right.poll() == []


def test_messages_arrive_in_order(link_pair):
    left, right = link_pair
    left.send(MsgKind.LINES, 2)
    left.send(MsgKind.PAUSE)
    left.send(MsgKind.LOST)
    got = []
    while len(got) < 3:
        batch = wait_for(right)
        assert batch
        got.extend(batch)
    assert got == [(MsgKind.LINES, 2), (MsgKind.PAUSE, 0), (MsgKind.LOST, 0)]


def test_unknown_bytes_are_skipped(link_pair):
    left, right = link_pair
    left.sock.send(bytes([0xE0, 0x05]))
    assert wait_for(right) == [(MsgKind.HEIGHT, 5)]


def test_peer_close_is_fatal(link_pair):
    left, right = link_pair
    left.close()
    with pytest.raises(NetError):
        deadline = time.monotonic() + 1.0
        while time.monotonic() < deadline:
            right.poll()
            time.sleep(0.005)


def test_closed_link_is_inert(link_pair):
    left, _ = link_pair
    left.close()
    left.close()
    left.send(MsgKind.QUIT)
    assert left.poll() == []


def test_height_reported_only_on_change(link_pair, board):
    left, right = link_pair
    assert measure_height(board) == 0
    assert not left.report_height(board)
    fill_row(board, 12, holes=(3,))
    assert left.report_height(board)
    assert not left.report_height(board)
    assert wait_for(right) == [(MsgKind.HEIGHT, 12)]
    board.collapse_row(12)
    assert left.report_height(board)
    assert wait_for(right) == [(MsgKind.HEIGHT, 0)]


def test_pending_lines_accumulate(link_pair):
    left, _ = link_pair
    left.queue_lines(2)
    left.queue_lines(1)
    assert left.take_pending_lines() == 3
    assert left.take_pending_lines() == 0


def test_serve_and_connect():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    served = {}
    t = threading.Thread(target=lambda: served.setdefault("link", NetLink.serve(port, "127.0.0.1")))
    t.start()
    client = None
    deadline = time.monotonic() + 2.0
    while client is None and time.monotonic() < deadline:
        try:
            client = NetLink.connect("127.0.0.1", port)
        except NetError:
            time.sleep(0.02)
    t.join(2.0)
    server = served["link"]
    try:
        assert server.role is Role.SERVER
        assert client.role is Role.CLIENT
        client.send(MsgKind.QUIT)
        assert wait_for(server) == [(MsgKind.QUIT, 0)]
    finally:
        client.close()
        server.close()


def test_connect_failure_raises_net_error():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    with pytest.raises(NetError):
        NetLink.connect("127.0.0.1", port)
