from __future__ import annotations

import socket

import pytest

from kasactl.core.codec import encode
from kasactl.core.errors import DeviceDiscoveryError
from kasactl.transports.udp import UDPTransport

PROBE = b'{"system":{"get_sysinfo":{}}}'


class FakeDatagramSocket:
    def __init__(self, datagrams: list[tuple[bytes, tuple[str, int]]], *, send_exc: BaseException | None = None) -> None:
        self.datagrams = list(datagrams)
        self.send_exc = send_exc
        self.options: list[tuple[int, int, int]] = []
        self.sent: list[tuple[bytes, tuple[str, int]]] = []
        self.timeouts: list[float] = []
        self.closed = False

    def setsockopt(self, level: int, option: int, value: int) -> None:
        self.options.append((level, option, value))

    def sendto(self, data: bytes, address: tuple[str, int]) -> int:
        if self.send_exc is not None:
            raise self.send_exc
        self.sent.append((data, address))
        return len(data)

    def settimeout(self, value: float) -> None:
        self.timeouts.append(value)

    def recvfrom(self, size: int) -> tuple[bytes, tuple[str, int]]:
        if not self.datagrams:
            raise TimeoutError("timed out")
        return self.datagrams.pop(0)

    def close(self) -> None:
        self.closed = True


def _factory(sock: FakeDatagramSocket):
    def create(family: int, kind: int) -> FakeDatagramSocket:
        assert kind == socket.SOCK_DGRAM
        return sock

    return create


def test_broadcast_collects_replies_by_sender() -> None:
    sock = FakeDatagramSocket(
        [
            (encode(b'{"a":1}'), ("192.168.0.10", 9999)),
            (encode(b'{"b":2}'), ("192.168.0.11", 9999)),
        ]
    )
    replies = UDPTransport(socket_factory=_factory(sock)).broadcast(
        PROBE, address="255.255.255.255", port=9999, window_s=1.0
    )

    assert replies == {"192.168.0.10": b'{"a":1}', "192.168.0.11": b'{"b":2}'}
    assert sock.sent == [(encode(PROBE), ("255.255.255.255", 9999))]
    assert (socket.SOL_SOCKET, socket.SO_BROADCAST, 1) in sock.options
    assert sock.closed


def test_duplicate_sender_overwrites_earlier_reply() -> None:
    sock = FakeDatagramSocket(
        [
            (encode(b'{"first":1}'), ("192.168.0.10", 9999)),
            (encode(b'{"second":2}'), ("192.168.0.10", 9999)),
        ]
    )
    replies = UDPTransport(socket_factory=_factory(sock)).broadcast(
        PROBE, address="255.255.255.255", port=9999, window_s=1.0
    )
    assert replies == {"192.168.0.10": b'{"second":2}'}


def test_collection_stops_when_window_elapses() -> None:
    ticks = iter([0.0, 0.0, 4.0])
    sock = FakeDatagramSocket(
        [
            (encode(b'{"early":1}'), ("192.168.0.10", 9999)),
            (encode(b'{"late":1}'), ("192.168.0.11", 9999)),
        ]
    )
    transport = UDPTransport(socket_factory=_factory(sock), clock=lambda: next(ticks))

    replies = transport.broadcast(PROBE, address="192.168.0.255", port=9999, window_s=3.0)

    assert replies == {"192.168.0.10": b'{"early":1}'}
    assert sock.timeouts == [3.0]
    assert sock.closed


def test_quiet_network_returns_empty_mapping() -> None:
    sock = FakeDatagramSocket([])
    replies = UDPTransport(socket_factory=_factory(sock)).broadcast(
        PROBE, address="255.255.255.255", port=9999, window_s=0.5
    )
    assert replies == {}
    assert sock.closed


def test_send_failure_raises_discovery_error_and_closes() -> None:
    sock = FakeDatagramSocket([], send_exc=OSError(101, "Network is unreachable"))
    with pytest.raises(DeviceDiscoveryError):
        UDPTransport(socket_factory=_factory(sock)).broadcast(
            PROBE, address="255.255.255.255", port=9999, window_s=1.0
        )
    assert sock.closed
