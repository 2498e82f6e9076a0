"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from gpsbridge.core.ack import interpret_ack
from gpsbridge.core.errors import GpsBridgeError
from gpsbridge.core.model import MessageKind
from gpsbridge.core.service import DEFAULT_URL, BridgeService

app = typer.Typer(help="Normalize GPS tracker messages into OpenGTS GPRMC requests")

ConfigOption = typer.Option(
    None,
    "--config",
    envvar="GPSBRIDGE_DEVICES",
    help="Device pattern YAML (replaces packaged and user patterns)",
)


def _build_service(config: Path | None, **kwargs) -> BridgeService:
    service = BridgeService(config_path=config, **kwargs)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log classification details"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("devices")
def list_devices(config: Path | None = ConfigOption) -> None:
    """List configured device patterns in matching order."""
    try:
        service = _build_service(config)
        devices = service.list_devices()
        if not devices:
            typer.echo("No device patterns loaded")
            raise typer.Exit(code=1)

        for index, device in enumerate(devices):
            kinds = [kind.value for kind in MessageKind if device.pattern_for(kind).enabled]
            typer.echo(f"{index}: {device.device} ({', '.join(kinds) or 'no patterns'})")
            if device.order:
                typer.echo(f"  order: {', '.join(tag.name for tag in device.order)}")
    except GpsBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("parse")
def parse_line(
    line: str,
    config: Path | None = ConfigOption,
) -> None:
    """Classify LINE and print the response and upstream query."""
    try:
        service = _build_service(config)
        result = service.filter(line)
        classification = result.classification
        typer.echo(f"Device: {classification.device.device} ({classification.kind.value})")
        if result.response:
            typer.echo(f"response={result.response}")
        if result.query:
            typer.echo(f"query={result.query}")
    except GpsBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("ack")
def check_ack(response: str) -> None:
    """Interpret an upstream acknowledgement line."""
    verdict = interpret_ack(response)
    if not verdict.accepted:
        typer.echo(f"Error: {verdict.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(verdict.message)


@app.command("send")
def send_line(
    line: str,
    url: str = typer.Option(DEFAULT_URL, "--url", envvar="GPSBRIDGE_URL", help="Upstream GPRMC endpoint"),
    timeout: float = typer.Option(5.0, "--timeout", help="HTTP timeout in seconds"),
    config: Path | None = ConfigOption,
) -> None:
    """Classify LINE and deliver its position report upstream."""
    try:
        service = _build_service(config, url=url, timeout_s=timeout)
        result = service.forward(line)
        classification = result.filtered.classification
        if result.ack is None:
            typer.echo(f"{classification.kind.value} of {classification.device.device}: nothing to send")
            return
        result.ack.raise_for_status()
        typer.echo(result.ack.message)
    except GpsBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
