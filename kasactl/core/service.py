"""Service layer used by the public API and the CLI."""

from __future__ import annotations

from kasactl.core.devices import SYSINFO_COMMAND, Bulb, Plug
from kasactl.core.discovery import (
    BROADCAST_ADDRESS,
    DEFAULT_WINDOW_S,
    DeviceKind,
    classify,
    discover_devices,
)
from kasactl.core.errors import InvalidParameterError
from kasactl.core.model import DeviceProfile, SystemInfo, TransportSpec
from kasactl.core.profile_loader import load_profiles
from kasactl.core.protocol import build, parse
from kasactl.transports.base import DatagramTransport, Transport
from kasactl.transports.tcp import TCPTransport
from kasactl.transports.udp import UDPTransport


class KasaService:
    def __init__(
        self,
        *,
        transport: Transport | None = None,
        datagram_transport: DatagramTransport | None = None,
        spec: TransportSpec | None = None,
    ) -> None:
        loaded = load_profiles()
        self.profiles = loaded.profiles
        self.load_warnings = loaded.warnings
        self.transport = transport or TCPTransport()
        self.datagram_transport = datagram_transport or UDPTransport()
        self.spec = spec or TransportSpec()

    def list_profiles(self) -> list[DeviceProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.id)

    def discover(
        self,
        *,
        address: str = BROADCAST_ADDRESS,
        window_s: float = DEFAULT_WINDOW_S,
    ) -> dict[str, DeviceKind]:
        return discover_devices(
            self.profiles,
            self.datagram_transport,
            transport=self.transport,
            spec=self.spec,
            address=address,
            window_s=window_s,
        )

    def device(self, host: str, kind: str) -> Plug | Bulb:
        """Build a handle for ``host`` from a profile id or a device kind hint."""
        profile = self._resolve_profile(kind)
        if profile.kind == Bulb.kind:
            return Bulb(host, profile=profile, transport=self.transport, spec=self.spec)
        return Plug(host, profile=profile, transport=self.transport, spec=self.spec)

    def plug(self, host: str) -> Plug:
        return Plug(host, profile=self._resolve_profile(Plug.kind), transport=self.transport, spec=self.spec)

    def bulb(self, host: str) -> Bulb:
        return Bulb(host, profile=self._resolve_profile(Bulb.kind), transport=self.transport, spec=self.spec)

    def identify(self, host: str) -> DeviceKind:
        """Fetch sysinfo from a known address and classify it like discovery does."""
        reply = self.transport.send(host, build(SYSINFO_COMMAND), spec=self.spec)
        info = SystemInfo.from_payload(parse(SYSINFO_COMMAND, reply))
        return classify(host, info, self.profiles, transport=self.transport, spec=self.spec)

    def _resolve_profile(self, hint: str) -> DeviceProfile:
        hint = hint.lower()
        profile = self.profiles.get(hint)
        if profile is not None:
            return profile
        for candidate in self.list_profiles():
            if candidate.kind == hint:
                return candidate
        available = ", ".join(sorted(self.profiles))
        raise InvalidParameterError(f"Unknown device kind '{hint}'. Available: {available}")
