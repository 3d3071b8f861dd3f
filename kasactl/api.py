"""Stable public API for building tooling on top of kasactl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from kasactl.core.codec import decode, encode, frame, unframe, unframe_bytes
from kasactl.core.devices import (
    Bulb,
    Device,
    Dimmable,
    Identifiable,
    IndicatorControllable,
    Maintainable,
    Plug,
    Switchable,
    require_capability,
)
from kasactl.core.discovery import BROADCAST_ADDRESS, DEFAULT_WINDOW_S, DeviceKind
from kasactl.core.errors import (
    CapabilityError,
    DecodeError,
    DeviceDiscoveryError,
    DeviceError,
    FramingError,
    InvalidParameterError,
    KasactlError,
    ProfileLoadError,
    ProfileValidationError,
    ResponseShapeError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
)
from kasactl.core.model import (
    DeviceProfile,
    LightState,
    Location,
    SystemInfo,
    TimeZone,
    TransportSpec,
    UnrecognizedDevice,
)
from kasactl.core.protocol import Command
from kasactl.core.service import KasaService
from kasactl.transports.base import DatagramTransport, Transport
from kasactl.transports.tcp import TCPTransport
from kasactl.transports.udp import UDPTransport

__all__ = [
    "KasactlError",
    "CapabilityError",
    "DecodeError",
    "DeviceDiscoveryError",
    "DeviceError",
    "FramingError",
    "InvalidParameterError",
    "ProfileLoadError",
    "ProfileValidationError",
    "ResponseShapeError",
    "TransportError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "Command",
    "DeviceKind",
    "DeviceProfile",
    "LightState",
    "Location",
    "SystemInfo",
    "TimeZone",
    "TransportSpec",
    "UnrecognizedDevice",
    "Device",
    "Plug",
    "Bulb",
    "Dimmable",
    "Identifiable",
    "IndicatorControllable",
    "Maintainable",
    "Switchable",
    "require_capability",
    "DatagramTransport",
    "Transport",
    "TCPTransport",
    "UDPTransport",
    "decode",
    "encode",
    "frame",
    "unframe",
    "unframe_bytes",
    "Client",
]


class Client:
    """Public client for interacting with kasactl core capabilities.

    A `Client` instance wraps profile loading, broadcast discovery, and device
    handle construction behind a stable API intended for third-party tools.
    Handles it returns share the client's transport and timeouts.
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        datagram_transport: DatagramTransport | None = None,
        spec: TransportSpec | None = None,
    ) -> None:
        self._service = KasaService(
            transport=transport,
            datagram_transport=datagram_transport,
            spec=spec,
        )

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[DeviceProfile]:
        return self._service.list_profiles()

    def discover(
        self,
        *,
        address: str = BROADCAST_ADDRESS,
        window_s: float = DEFAULT_WINDOW_S,
    ) -> dict[str, DeviceKind]:
        return self._service.discover(address=address, window_s=window_s)

    def device(self, host: str, kind: str) -> Plug | Bulb:
        return self._service.device(host, kind)

    def plug(self, host: str) -> Plug:
        return self._service.plug(host)

    def bulb(self, host: str) -> Bulb:
        return self._service.bulb(host)

    def identify(self, host: str) -> DeviceKind:
        return self._service.identify(host)
