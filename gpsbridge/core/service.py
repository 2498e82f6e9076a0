"""Service layer used by CLI and embedding listeners."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from gpsbridge.core.ack import AckVerdict, interpret_ack
from gpsbridge.core.classifier import filter_message
from gpsbridge.core.model import DevicePattern, FilterResult
from gpsbridge.core.pattern_loader import load_device_patterns
from gpsbridge.core.registry import DevicePatternRegistry
from gpsbridge.transports.base import Transport
from gpsbridge.transports.http_gprmc import HTTPTransport

DEFAULT_URL = "http://localhost:8080/gprmc/Data"
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardResult:
    filtered: FilterResult
    ack: AckVerdict | None


class BridgeService:
    def __init__(
        self,
        *,
        registry: DevicePatternRegistry | None = None,
        config_path: Path | None = None,
        transport: Transport | None = None,
        url: str = DEFAULT_URL,
        timeout_s: float = 5.0,
    ) -> None:
        if registry is None:
            loaded = load_device_patterns(config_path)
            registry = loaded.registry
            self.load_warnings = loaded.warnings
        else:
            self.load_warnings = ()
        self.registry = registry
        self.transport = transport or HTTPTransport()
        self.url = url
        self.timeout_s = timeout_s

    def list_devices(self) -> list[DevicePattern]:
        return list(self.registry)

    def filter(self, line: str) -> FilterResult:
        return filter_message(line, self.registry)

    def forward(self, line: str) -> ForwardResult:
        """Filter a device line and deliver its query upstream.

        Login and heartbeat messages produce no query and are not delivered.
        """
        filtered = self.filter(line)
        if not filtered.query:
            return ForwardResult(filtered=filtered, ack=None)

        response = self.transport.send(self.url, filtered.query, timeout_s=self.timeout_s)
        ack = interpret_ack(response)
        if not ack.accepted:
            LOGGER.warning(
                "Upstream did not accept report from %s: %s",
                filtered.classification.device.device,
                ack.message,
            )
        return ForwardResult(filtered=filtered, ack=ack)
