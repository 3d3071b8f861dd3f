from __future__ import annotations

import pytest
from conftest import BULB_SYSINFO, PLUG_SYSINFO, FakeDatagramTransport, FakeDevice, sysinfo_reply
from typer.testing import CliRunner

from kasactl import cli
from kasactl.core.service import KasaService

runner = CliRunner()


@pytest.fixture
def fake_service(monkeypatch: pytest.MonkeyPatch) -> dict[str, FakeDevice]:
    devices = {"plug": FakeDevice(PLUG_SYSINFO), "bulb": FakeDevice(BULB_SYSINFO)}

    class RoutingTransport:
        def send(self, host, payload, *, spec):
            target = devices["bulb"] if host.endswith(".21") else devices["plug"]
            return target.send(host, payload, spec=spec)

    class FakeService(KasaService):
        def __init__(self) -> None:
            super().__init__(
                transport=RoutingTransport(),
                datagram_transport=FakeDatagramTransport(
                    {
                        "192.168.0.20": sysinfo_reply(PLUG_SYSINFO),
                        "192.168.0.21": sysinfo_reply(BULB_SYSINFO),
                        "192.168.0.22": sysinfo_reply({"model": "KP303(UK)"}),
                    }
                ),
            )

    monkeypatch.setattr(cli, "KasaService", FakeService)
    return devices


def test_profiles_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["profiles"])
    assert result.exit_code == 0
    assert "plug: Smart Plug (plug)" in result.stdout
    assert "all_of: relay_state" in result.stdout


def test_discover_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["discover", "--window", "0.1"])
    assert result.exit_code == 0
    assert "192.168.0.20 -> plug" in result.stdout
    assert "192.168.0.21 -> bulb" in result.stdout
    assert "192.168.0.22 KP303(UK) -> <unrecognized>" in result.stdout


def test_info_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["info", "192.168.0.21"])
    assert result.exit_code == 0
    assert "Alias: Desk" in result.stdout
    assert "Brightness: 40" in result.stdout


def test_off_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["off", "192.168.0.20"])
    assert result.exit_code == 0
    assert "turned off" in result.stdout
    assert fake_service["plug"].state["relay_state"] == 0


def test_on_command_with_kind_skips_identification(fake_service) -> None:
    result = runner.invoke(cli.app, ["on", "192.168.0.20", "--kind", "plug"])
    assert result.exit_code == 0
    assert fake_service["plug"].actions() == ["set_relay_state"]


def test_brightness_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["brightness", "192.168.0.21", "70"])
    assert result.exit_code == 0
    assert fake_service["bulb"].state["light_state"]["brightness"] == 70


def test_brightness_on_plug_error_is_clean(fake_service) -> None:
    result = runner.invoke(cli.app, ["brightness", "192.168.0.20", "70"])
    assert result.exit_code == 1
    assert "Error: Plug at 192.168.0.20 does not support Dimmable" in result.stderr
    assert "Traceback" not in result.stdout
    assert "Traceback" not in result.stderr


def test_led_command(fake_service) -> None:
    result = runner.invoke(cli.app, ["led", "192.168.0.20", "off"])
    assert result.exit_code == 0
    assert fake_service["plug"].state["led_off"] == 1


def test_led_command_rejects_bad_state(fake_service) -> None:
    result = runner.invoke(cli.app, ["led", "192.168.0.20", "blink"])
    assert result.exit_code == 1
    assert "LED state must be" in result.stderr


def test_profile_warning_is_printed(fake_service, monkeypatch: pytest.MonkeyPatch) -> None:
    original = cli.KasaService

    class WarnService(original):
        def __init__(self) -> None:
            super().__init__()
            self.load_warnings = ("User profile 'plug' overrides packaged profile",)

    monkeypatch.setattr(cli, "KasaService", WarnService)
    result = runner.invoke(cli.app, ["profiles"])
    assert result.exit_code == 0
    assert "Warning: User profile 'plug' overrides packaged profile" in result.stderr
