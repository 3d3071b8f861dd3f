"""Broadcast discovery and classification of responding devices."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TypeAlias

from kasactl.core.device_match import best_profile_for_info
from kasactl.core.devices import SYSINFO_COMMAND, Bulb, Plug
from kasactl.core.errors import DecodeError, DeviceError, ResponseShapeError
from kasactl.core.model import DeviceProfile, SystemInfo, TransportSpec, UnrecognizedDevice
from kasactl.core.protocol import build, decode_json, extract
from kasactl.transports.base import DatagramTransport, Transport

LOGGER = logging.getLogger(__name__)

BROADCAST_ADDRESS = "255.255.255.255"
DEFAULT_WINDOW_S = 3.0

DeviceKind: TypeAlias = Plug | Bulb | UnrecognizedDevice

_DEVICE_CLASSES: dict[str, type[Plug] | type[Bulb]] = {
    Plug.kind: Plug,
    Bulb.kind: Bulb,
}


def classify(
    host: str,
    info: SystemInfo,
    profiles: dict[str, DeviceProfile],
    *,
    transport: Transport | None = None,
    spec: TransportSpec | None = None,
) -> DeviceKind:
    profile = best_profile_for_info(info, profiles)
    if profile is None:
        return UnrecognizedDevice(host=host, info=info)
    device_cls = _DEVICE_CLASSES[profile.kind]
    return device_cls(host, profile=profile, transport=transport, spec=spec)


def parse_discovery_reply(
    host: str,
    reply: bytes,
    profiles: dict[str, DeviceProfile],
    *,
    transport: Transport | None = None,
    spec: TransportSpec | None = None,
) -> DeviceKind:
    """Turn one discovery reply into a device handle.

    Only a ``system.get_sysinfo`` payload is classified against the profiles.
    Any other JSON value is kept whole as an unrecognized device; bytes that
    are not JSON raise ``DecodeError``.
    """
    document = decode_json(reply)
    if not isinstance(document, dict):
        return UnrecognizedDevice(host=host, info=SystemInfo(raw=MappingProxyType({"reply": document})))
    try:
        payload = extract(SYSINFO_COMMAND, document)
    except (ResponseShapeError, DeviceError):
        return UnrecognizedDevice(host=host, info=SystemInfo(raw=MappingProxyType(document)))
    return classify(host, SystemInfo.from_payload(payload), profiles, transport=transport, spec=spec)


def discover_devices(
    profiles: dict[str, DeviceProfile],
    datagram_transport: DatagramTransport,
    *,
    transport: Transport | None = None,
    spec: TransportSpec | None = None,
    address: str = BROADCAST_ADDRESS,
    window_s: float = DEFAULT_WINDOW_S,
) -> dict[str, DeviceKind]:
    spec = spec or TransportSpec()
    replies = datagram_transport.broadcast(
        build(SYSINFO_COMMAND),
        address=address,
        port=spec.port,
        window_s=window_s,
        buffer_size=spec.buffer_size,
    )

    devices: dict[str, DeviceKind] = {}
    for host, reply in replies.items():
        try:
            device = parse_discovery_reply(host, reply, profiles, transport=transport, spec=spec)
        except DecodeError as exc:
            LOGGER.warning("Dropping malformed discovery reply from %s: %s", host, exc)
            continue
        LOGGER.debug("discovered %s at %s", type(device).__name__, host)
        devices[host] = device

    return devices
