"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from kasactl.core.model import TransportSpec


class Transport(Protocol):
    def send(
        self,
        host: str,
        payload: bytes,
        *,
        spec: TransportSpec,
    ) -> bytes:
        """Send one plaintext request to a device and return the plaintext reply."""


class DatagramTransport(Protocol):
    def broadcast(
        self,
        payload: bytes,
        *,
        address: str,
        port: int,
        window_s: float,
        buffer_size: int = 4096,
    ) -> dict[str, bytes]:
        """Broadcast a plaintext probe and collect plaintext replies keyed by sender."""
