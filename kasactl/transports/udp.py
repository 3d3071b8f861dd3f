"""UDP broadcast transport used for discovery."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable

from kasactl.core.codec import decode, encode
from kasactl.core.errors import DeviceDiscoveryError

LOGGER = logging.getLogger(__name__)


class UDPTransport:
    def __init__(
        self,
        *,
        socket_factory: Callable[..., socket.socket] = socket.socket,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._socket_factory = socket_factory
        self._clock = clock

    def broadcast(
        self,
        payload: bytes,
        *,
        address: str,
        port: int,
        window_s: float,
        buffer_size: int = 4096,
    ) -> dict[str, bytes]:
        try:
            udp_socket = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as exc:
            raise DeviceDiscoveryError(f"Could not create UDP socket: {exc}") from exc

        replies: dict[str, bytes] = {}
        try:
            try:
                udp_socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
                # Datagram boundaries frame the message, so no length header.
                udp_socket.sendto(encode(payload), (address, port))
            except OSError as exc:
                raise DeviceDiscoveryError(f"Could not broadcast to {address}:{port}: {exc}") from exc

            deadline = self._clock() + window_s
            while True:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    break
                udp_socket.settimeout(remaining)
                try:
                    data, sender = udp_socket.recvfrom(buffer_size)
                except TimeoutError:
                    break
                except OSError as exc:
                    raise DeviceDiscoveryError(f"Receiving discovery replies failed: {exc}") from exc
                LOGGER.debug("discovery reply from %s (%d bytes)", sender[0], len(data))
                replies[sender[0]] = decode(data)
        finally:
            udp_socket.close()

        return replies
