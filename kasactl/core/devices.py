"""Device handles and the capability interfaces they implement.

A handle owns only an address. Every operation opens its own connection,
performs one command round trip, and closes it again; nothing is cached.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, ClassVar, Protocol, TypeVar, runtime_checkable

from kasactl.core.errors import CapabilityError, InvalidParameterError, ResponseShapeError
from kasactl.core.model import DeviceProfile, Location, MatchRules, Namespaces, SystemInfo, TimeZone, TransportSpec
from kasactl.core.protocol import Command, build, parse
from kasactl.transports.base import Transport
from kasactl.transports.tcp import TCPTransport

LOGGER = logging.getLogger(__name__)

SYSINFO_COMMAND = Command("system", "get_sysinfo")

C = TypeVar("C")


@runtime_checkable
class Identifiable(Protocol):
    def sysinfo(self) -> SystemInfo: ...

    def alias(self) -> str | None: ...

    def location(self) -> Location | None: ...


@runtime_checkable
class Switchable(Protocol):
    def power(self, on: bool) -> None: ...

    def is_on(self) -> bool: ...


@runtime_checkable
class Dimmable(Protocol):
    def is_dimmable(self) -> bool: ...

    def set_brightness(self, level: int) -> None: ...

    def brightness(self) -> int | None: ...


@runtime_checkable
class IndicatorControllable(Protocol):
    def led(self, on: bool) -> None: ...

    def is_led_on(self) -> bool: ...


@runtime_checkable
class Maintainable(Protocol):
    def reboot(self, delay_s: int = 1) -> None: ...

    def factory_reset(self, delay_s: int = 1) -> None: ...


def require_capability(device: object, capability: type[C]) -> C:
    """Return ``device`` typed as ``capability`` or raise ``CapabilityError``.

    Use this when the concrete kind is only known at runtime, e.g. after
    discovery.
    """
    if not isinstance(device, capability):
        host = getattr(device, "host", "?")
        raise CapabilityError(
            f"{type(device).__name__} at {host} does not support {capability.__name__}"
        )
    return device


class Device:
    """Shared plumbing for concrete device kinds."""

    kind: ClassVar[str]
    default_namespaces: ClassVar[Namespaces]

    def __init__(
        self,
        host: str,
        *,
        profile: DeviceProfile | None = None,
        transport: Transport | None = None,
        spec: TransportSpec | None = None,
    ) -> None:
        self.host = host
        self.profile = profile or DeviceProfile(
            id=self.kind,
            name=self.kind.title(),
            kind=self.kind,
            match=MatchRules(),
            namespaces=self.default_namespaces,
        )
        self.spec = spec or TransportSpec()
        self._transport = transport or TCPTransport()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(host={self.host!r}, profile={self.profile.id!r})"

    @property
    def namespaces(self) -> Namespaces:
        return self.profile.namespaces

    def _request(self, command: Command) -> dict[str, Any]:
        LOGGER.debug("%s -> %s", self.host, command.envelope())
        reply = self._transport.send(self.host, build(command), spec=self.spec)
        return parse(command, reply)

    def sysinfo(self) -> SystemInfo:
        return SystemInfo.from_payload(self._request(SYSINFO_COMMAND))

    def alias(self) -> str | None:
        return self.sysinfo().alias

    def model(self) -> str | None:
        return self.sysinfo().model

    def device_id(self) -> str | None:
        return self.sysinfo().device_id

    def mac_address(self) -> str | None:
        return self.sysinfo().mac

    def sw_ver(self) -> str | None:
        return self.sysinfo().sw_ver

    def hw_ver(self) -> str | None:
        return self.sysinfo().hw_ver

    def rssi(self) -> int | None:
        return self.sysinfo().rssi

    def location(self) -> Location | None:
        return self.sysinfo().location

    def set_alias(self, alias: str) -> None:
        if not alias or not alias.strip():
            raise InvalidParameterError("Alias must not be empty")
        self._request(Command(self.namespaces.system, "set_dev_alias", {"alias": alias}))

    def reboot(self, delay_s: int = 1) -> None:
        self._request(Command(self.namespaces.system, "reboot", {"delay": _delay(delay_s)}))

    def factory_reset(self, delay_s: int = 1) -> None:
        self._request(Command(self.namespaces.system, "reset", {"delay": _delay(delay_s)}))

    def time(self) -> datetime:
        reply = self._request(Command(self.namespaces.time, "get_time"))
        try:
            return datetime(
                reply["year"],
                reply["month"],
                reply["mday"],
                reply["hour"],
                reply["min"],
                reply["sec"],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ResponseShapeError(f"Invalid time reply from {self.host}: {reply}") from exc

    def timezone(self) -> TimeZone:
        reply = self._request(Command(self.namespaces.time, "get_timezone"))
        index = reply.get("index")
        if isinstance(index, bool) or not isinstance(index, int):
            raise ResponseShapeError(f"Invalid time zone reply from {self.host}: {reply}")
        return TimeZone(index=index)


class Plug(Device):
    """A smart plug: relay switching and an LED indicator."""

    kind = "plug"
    default_namespaces = Namespaces(system="system", time="time")

    def power(self, on: bool) -> None:
        self._request(Command(self.namespaces.system, "set_relay_state", {"state": int(on)}))

    def is_on(self) -> bool:
        return self.sysinfo().is_on

    def led(self, on: bool) -> None:
        self._request(Command(self.namespaces.system, "set_led_off", {"off": int(not on)}))

    def is_led_on(self) -> bool:
        led_on = self.sysinfo().is_led_on
        if led_on is None:
            raise CapabilityError(f"Plug at {self.host} does not report an LED indicator")
        return led_on


class Bulb(Device):
    """A smart bulb driven through the lighting service namespace."""

    kind = "bulb"
    default_namespaces = Namespaces(
        system="smartlife.iot.common.system",
        time="smartlife.iot.common.timesetting",
        lighting="smartlife.iot.smartbulb.lightingservice",
    )

    @property
    def _lighting(self) -> str:
        if self.namespaces.lighting is None:
            raise CapabilityError(f"Profile '{self.profile.id}' defines no lighting namespace")
        return self.namespaces.lighting

    def _transition(self, state: dict[str, Any]) -> None:
        self._request(Command(self._lighting, "transition_light_state", state))

    def power(self, on: bool) -> None:
        self._transition({"on_off": int(on)})

    def is_on(self) -> bool:
        return self.sysinfo().is_on

    def is_dimmable(self) -> bool:
        return self.sysinfo().is_dimmable

    def brightness(self) -> int | None:
        return self.sysinfo().brightness

    def set_brightness(self, level: int, *, transition_ms: int | None = None) -> None:
        if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 100:
            raise InvalidParameterError(f"Brightness must be an integer in 0..100, got {level!r}")
        if transition_ms is not None and transition_ms < 0:
            raise InvalidParameterError(f"Transition must not be negative, got {transition_ms!r}")
        if not self.is_dimmable():
            raise CapabilityError(f"Bulb at {self.host} is not dimmable")

        state: dict[str, Any] = {"brightness": level}
        if transition_ms is not None:
            state["transition_period"] = transition_ms
        self._transition(state)


def _delay(delay_s: int) -> int:
    if isinstance(delay_s, bool) or not isinstance(delay_s, int) or delay_s < 0:
        raise InvalidParameterError(f"Delay must be a non-negative integer, got {delay_s!r}")
    return delay_s
