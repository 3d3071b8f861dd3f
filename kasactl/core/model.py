"""Core data models used across loader, service, devices, and CLI."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

DEFAULT_PORT = 9999


@dataclass(frozen=True)
class MatchRules:
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()


@dataclass(frozen=True)
class Namespaces:
    system: str
    time: str
    lighting: str | None = None


@dataclass(frozen=True)
class DeviceProfile:
    id: str
    name: str
    kind: str
    match: MatchRules
    namespaces: Namespaces


@dataclass(frozen=True)
class TransportSpec:
    port: int = DEFAULT_PORT
    connect_timeout_s: float = 3.0
    write_timeout_s: float = 3.0
    read_timeout_s: float = 5.0
    buffer_size: int = 4096


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class TimeZone:
    """Firmware time zone setting; ``index`` selects an entry in the device's zone table."""

    index: int


@dataclass(frozen=True)
class LightState:
    on_off: int
    brightness: int | None = None
    hue: int | None = None
    saturation: int | None = None
    color_temp: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> LightState:
        # An "off" bulb reports its resume values under dft_on_state.
        source: Mapping[str, Any] = payload
        if not payload.get("on_off") and isinstance(payload.get("dft_on_state"), Mapping):
            source = payload["dft_on_state"]
        return cls(
            on_off=_optional_int(payload.get("on_off")) or 0,
            brightness=_optional_int(source.get("brightness")),
            hue=_optional_int(source.get("hue")),
            saturation=_optional_int(source.get("saturation")),
            color_temp=_optional_int(source.get("color_temp")),
        )


@dataclass(frozen=True)
class SystemInfo:
    """Immutable snapshot of a device's ``get_sysinfo`` reply.

    Fields a device kind does not report stay ``None``; absence means the
    capability is absent, never an error.
    """

    raw: Mapping[str, Any] = field(repr=False)
    device_id: str | None = None
    model: str | None = None
    alias: str | None = None
    device_type: str | None = None
    mac: str | None = None
    sw_ver: str | None = None
    hw_ver: str | None = None
    rssi: int | None = None
    relay_state: int | None = None
    led_off: int | None = None
    is_dimmable: bool = False
    light_state: LightState | None = None
    location: Location | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SystemInfo:
        light_state = payload.get("light_state")
        return cls(
            raw=MappingProxyType(dict(payload)),
            device_id=_optional_str(payload.get("deviceId")),
            model=_optional_str(payload.get("model")),
            alias=_optional_str(payload.get("alias")),
            device_type=_optional_str(payload.get("type", payload.get("mic_type"))),
            mac=_optional_str(payload.get("mac", payload.get("mic_mac"))),
            sw_ver=_optional_str(payload.get("sw_ver")),
            hw_ver=_optional_str(payload.get("hw_ver")),
            rssi=_optional_int(payload.get("rssi")),
            relay_state=_optional_int(payload.get("relay_state")),
            led_off=_optional_int(payload.get("led_off")),
            is_dimmable=bool(payload.get("is_dimmable", 0)),
            light_state=LightState.from_payload(light_state) if isinstance(light_state, Mapping) else None,
            location=_location(payload),
        )

    @property
    def is_on(self) -> bool:
        if self.relay_state is not None:
            return self.relay_state == 1
        if self.light_state is not None:
            return self.light_state.on_off == 1
        return False

    @property
    def is_led_on(self) -> bool | None:
        if self.led_off is None:
            return None
        return self.led_off == 0

    @property
    def brightness(self) -> int | None:
        if self.light_state is not None and self.light_state.brightness is not None:
            return self.light_state.brightness
        return _optional_int(self.raw.get("brightness"))


@dataclass(frozen=True)
class UnrecognizedDevice:
    """A discovery reply that parsed but matched no device profile."""

    host: str
    info: SystemInfo


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _location(payload: Mapping[str, Any]) -> Location | None:
    if "latitude_i" in payload and "longitude_i" in payload:
        lat, lon = _optional_int(payload["latitude_i"]), _optional_int(payload["longitude_i"])
        if lat is not None and lon is not None:
            return Location(latitude=lat / 10000, longitude=lon / 10000)
    if "latitude" in payload and "longitude" in payload:
        try:
            return Location(latitude=float(payload["latitude"]), longitude=float(payload["longitude"]))
        except (TypeError, ValueError):
            return None
    return None
