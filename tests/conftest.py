from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from kasactl.core.model import TransportSpec

PLUG_SYSINFO: dict[str, Any] = {
    "sw_ver": "1.5.4 Build 180815 Rel.121440",
    "hw_ver": "2.0",
    "type": "IOT.SMARTPLUGSWITCH",
    "model": "HS100(UK)",
    "mac": "50:C7:BF:00:11:22",
    "deviceId": "8006ABCDEF",
    "alias": "Kettle",
    "relay_state": 1,
    "led_off": 0,
    "rssi": -52,
    "latitude_i": 515074,
    "longitude_i": -1278,
}

BULB_SYSINFO: dict[str, Any] = {
    "sw_ver": "1.8.6 Build 180809 Rel.091659",
    "hw_ver": "1.0",
    "mic_type": "IOT.SMARTBULB",
    "model": "LB110(EU)",
    "mic_mac": "50C7BF334455",
    "deviceId": "8012FEDCBA",
    "alias": "Desk",
    "is_dimmable": 1,
    "is_color": 0,
    "light_state": {"on_off": 1, "brightness": 40, "hue": 0, "saturation": 0, "color_temp": 2700},
    "rssi": -61,
}

DEVICE_TIME = {"year": 2024, "month": 3, "mday": 9, "hour": 18, "min": 5, "sec": 42, "err_code": 0}


class FakeDevice:
    """In-memory device that answers plaintext JSON commands like real firmware."""

    def __init__(self, sysinfo: dict[str, Any], *, lighting: str = "smartlife.iot.smartbulb.lightingservice") -> None:
        self.state = copy.deepcopy(sysinfo)
        self.lighting = lighting
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def send(self, host: str, payload: bytes, *, spec: TransportSpec) -> bytes:
        request = json.loads(payload)
        self.calls.append((host, request))
        (target, actions), = request.items()
        (action, params), = actions.items()
        return json.dumps(self.handle(target, action, params)).encode("utf-8")

    def handle(self, target: str, action: str, params: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] | None = None
        if target == "system" and action == "get_sysinfo":
            result = dict(self.state)
        elif target == "system" and action == "set_relay_state" and "relay_state" in self.state:
            self.state["relay_state"] = params["state"]
            result = {}
        elif target == "system" and action == "set_led_off" and "led_off" in self.state:
            self.state["led_off"] = params["off"]
            result = {}
        elif target == self.lighting and action == "transition_light_state" and "light_state" in self.state:
            light_state = self.state["light_state"]
            light_state.update(params)
            result = dict(light_state)
        elif action == "set_dev_alias":
            self.state["alias"] = params["alias"]
            result = {}
        elif action in {"reboot", "reset"}:
            result = {}
        elif action == "get_time":
            result = dict(DEVICE_TIME)
        elif action == "get_timezone":
            result = {"index": 39}

        if result is None:
            return {target: {"err_code": -1, "err_msg": "module not support"}}
        result.setdefault("err_code", 0)
        return {target: {action: result}}

    def actions(self) -> list[str]:
        return [next(iter(next(iter(request.values())))) for _, request in self.calls]


class FakeDatagramTransport:
    def __init__(self, replies: dict[str, bytes]) -> None:
        self.replies = replies
        self.calls: list[tuple[bytes, str, int, float]] = []

    def broadcast(
        self,
        payload: bytes,
        *,
        address: str,
        port: int,
        window_s: float,
        buffer_size: int = 4096,
    ) -> dict[str, bytes]:
        self.calls.append((payload, address, port, window_s))
        return dict(self.replies)


def sysinfo_reply(info: dict[str, Any]) -> bytes:
    return json.dumps({"system": {"get_sysinfo": {**info, "err_code": 0}}}).encode("utf-8")


@pytest.fixture
def plug_device() -> FakeDevice:
    return FakeDevice(PLUG_SYSINFO)


@pytest.fixture
def bulb_device() -> FakeDevice:
    return FakeDevice(BULB_SYSINFO)


@pytest.fixture(autouse=True)
def isolated_profile_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
