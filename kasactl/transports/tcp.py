"""TCP transport: one framed request/response exchange per connection."""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable

from kasactl.core.codec import frame, unframe
from kasactl.core.errors import (
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)
from kasactl.core.model import TransportSpec

LOGGER = logging.getLogger(__name__)


class TCPTransport:
    def __init__(self, *, socket_factory: Callable[..., socket.socket] = socket.socket) -> None:
        self._socket_factory = socket_factory

    def send(
        self,
        host: str,
        payload: bytes,
        *,
        spec: TransportSpec = TransportSpec(),
    ) -> bytes:
        try:
            tcp_socket = self._socket_factory(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as exc:
            raise TransportConnectError(f"Could not create TCP socket: {exc}") from exc
        try:
            tcp_socket.settimeout(spec.connect_timeout_s)
            try:
                tcp_socket.connect((host, spec.port))
            except TimeoutError as exc:
                raise TransportTimeoutError(f"TCP connect timed out for {host}:{spec.port}") from exc
            except OSError as exc:
                raise TransportConnectError(f"TCP connect failed for {host}:{spec.port}: {exc}") from exc

            tcp_socket.settimeout(spec.write_timeout_s)
            try:
                tcp_socket.sendall(frame(payload))
            except TimeoutError as exc:
                raise TransportTimeoutError(f"TCP send timed out for {host}") from exc
            except OSError as exc:
                raise TransportSendError(f"TCP send failed for {host}: {exc}") from exc

            try:
                reply = unframe(_deadline_reader(tcp_socket, spec.read_timeout_s, spec.buffer_size))
            except TimeoutError as exc:
                raise TransportTimeoutError(f"TCP receive timed out for {host}") from exc
            except OSError as exc:
                raise TransportSendError(f"TCP receive failed for {host}: {exc}") from exc
        finally:
            tcp_socket.close()

        LOGGER.debug("%s <- %s", host, reply)
        return reply


def _deadline_reader(
    tcp_socket: socket.socket,
    timeout_s: float,
    buffer_size: int,
) -> Callable[[int], bytes]:
    deadline = time.monotonic() + timeout_s

    def read(size: int) -> bytes:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TimeoutError("read deadline exceeded")
        tcp_socket.settimeout(remaining)
        return tcp_socket.recv(min(size, buffer_size))

    return read
