"""Typer CLI entrypoint."""

from __future__ import annotations

import typer

from kasactl.core.devices import Dimmable, Identifiable, IndicatorControllable, Switchable, require_capability
from kasactl.core.discovery import DEFAULT_WINDOW_S, DeviceKind
from kasactl.core.errors import KasactlError
from kasactl.core.model import UnrecognizedDevice
from kasactl.core.service import KasaService

app = typer.Typer(help="Local network control for Kasa smart plugs and bulbs")

KIND_OPTION = typer.Option(None, "--kind", help="Profile id or device kind; skips identification")


def _build_service() -> KasaService:
    service = KasaService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _handle(service: KasaService, host: str, kind: str | None) -> DeviceKind:
    if kind:
        return service.device(host, kind)
    return service.identify(host)


def _describe(host: str, device: DeviceKind) -> str:
    if isinstance(device, UnrecognizedDevice):
        model = device.info.model or "<unknown-model>"
        return f"{host} {model} -> <unrecognized>"
    return f"{host} -> {device.profile.id}"


@app.command("profiles")
def list_profiles() -> None:
    """List device profiles and the sysinfo fields they match on."""
    try:
        service = _build_service()
        for profile in service.list_profiles():
            typer.echo(f"{profile.id}: {profile.name} ({profile.kind})")
            rules = profile.match
            for label, fields in (("all_of", rules.all_of), ("any_of", rules.any_of), ("none_of", rules.none_of)):
                if fields:
                    typer.echo(f"  {label}: {', '.join(fields)}")
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("discover")
def discover(
    window: float = typer.Option(DEFAULT_WINDOW_S, "--window", help="Seconds to collect replies"),
) -> None:
    """Broadcast a discovery probe and list responding devices."""
    try:
        service = _build_service()
        devices = service.discover(window_s=window)
        if not devices:
            typer.echo("No devices found")
            return
        for host in sorted(devices):
            typer.echo(_describe(host, devices[host]))
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("info")
def info(host: str, kind: str | None = KIND_OPTION) -> None:
    """Show identity and state of a device."""
    try:
        service = _build_service()
        device = require_capability(_handle(service, host, kind), Identifiable)
        sysinfo = device.sysinfo()
        typer.echo(f"Alias: {sysinfo.alias}")
        typer.echo(f"Model: {sysinfo.model}")
        typer.echo(f"MAC: {sysinfo.mac}")
        typer.echo(f"Firmware: {sysinfo.sw_ver} (hardware {sysinfo.hw_ver})")
        typer.echo(f"On: {sysinfo.is_on}")
        if sysinfo.is_led_on is not None:
            typer.echo(f"LED: {sysinfo.is_led_on}")
        if sysinfo.is_dimmable:
            typer.echo(f"Brightness: {sysinfo.brightness}")
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _set_power(host: str, kind: str | None, on: bool) -> None:
    try:
        service = _build_service()
        device = require_capability(_handle(service, host, kind), Switchable)
        device.power(on)
        typer.echo(f"{host} turned {'on' if on else 'off'}")
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("on")
def turn_on(host: str, kind: str | None = KIND_OPTION) -> None:
    """Switch a device on."""
    _set_power(host, kind, True)


@app.command("off")
def turn_off(host: str, kind: str | None = KIND_OPTION) -> None:
    """Switch a device off."""
    _set_power(host, kind, False)


@app.command("brightness")
def brightness(host: str, level: int, kind: str | None = KIND_OPTION) -> None:
    """Set the brightness (0-100) of a dimmable device."""
    try:
        service = _build_service()
        device = require_capability(_handle(service, host, kind), Dimmable)
        device.set_brightness(level)
        typer.echo(f"{host} brightness set to {level}")
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("led")
def led(host: str, state: str, kind: str | None = KIND_OPTION) -> None:
    """Switch the LED indicator of a device on or off."""
    try:
        if state not in {"on", "off"}:
            typer.echo(f"Error: LED state must be 'on' or 'off', got '{state}'", err=True)
            raise typer.Exit(code=1)
        service = _build_service()
        device = require_capability(_handle(service, host, kind), IndicatorControllable)
        device.led(state == "on")
        typer.echo(f"{host} LED turned {state}")
    except KasactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
