"""Stable public API for building listeners and tooling on top of gpsbridge.

This module is the supported integration surface for third-party callers, such
as the TCP/UDP listeners that receive device lines. Avoid importing from
internal modules unless intentionally depending on non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from gpsbridge.core.ack import AckVerdict, interpret_ack
from gpsbridge.core.classifier import classify, filter_message
from gpsbridge.core.errors import (
    AckError,
    AckParseError,
    AckRejectedError,
    ClassificationError,
    ConfigurationError,
    DeviceConfigLoadError,
    DeviceConfigValidationError,
    GpsBridgeError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
)
from gpsbridge.core.extractor import field_value
from gpsbridge.core.model import (
    Classification,
    DevicePattern,
    FieldTag,
    FilterResult,
    MessageKind,
    ReqRespPattern,
    UnitTag,
)
from gpsbridge.core.pattern_loader import REGEXP_GPRMC, load_device_patterns
from gpsbridge.core.registry import DevicePatternRegistry, compile_pattern
from gpsbridge.core.sentence import build_query, build_sentence, checksum
from gpsbridge.core.service import DEFAULT_URL, BridgeService, ForwardResult
from gpsbridge.transports.base import Transport

__all__ = [
    "GpsBridgeError",
    "ConfigurationError",
    "DeviceConfigLoadError",
    "DeviceConfigValidationError",
    "ClassificationError",
    "AckError",
    "AckParseError",
    "AckRejectedError",
    "TransportError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "AckVerdict",
    "Classification",
    "DevicePattern",
    "DevicePatternRegistry",
    "FieldTag",
    "FilterResult",
    "ForwardResult",
    "MessageKind",
    "ReqRespPattern",
    "UnitTag",
    "REGEXP_GPRMC",
    "Transport",
    "build_query",
    "build_sentence",
    "checksum",
    "classify",
    "compile_pattern",
    "field_value",
    "filter_message",
    "interpret_ack",
    "load_device_patterns",
    "Client",
]


class Client:
    """Public client for gpsbridge core capabilities.

    A `Client` wraps device pattern loading, message filtering and upstream
    delivery behind a stable API. It holds no per-message state and can be
    shared by concurrent connection handlers.
    """

    def __init__(
        self,
        *,
        registry: DevicePatternRegistry | None = None,
        config_path: Path | None = None,
        transport: Transport | None = None,
        url: str = DEFAULT_URL,
        timeout_s: float = 5.0,
    ) -> None:
        self._service = BridgeService(
            registry=registry,
            config_path=config_path,
            transport=transport,
            url=url,
            timeout_s=timeout_s,
        )

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    @property
    def registry(self) -> DevicePatternRegistry:
        return self._service.registry

    def list_devices(self) -> list[DevicePattern]:
        return self._service.list_devices()

    def filter(self, line: str) -> FilterResult:
        return self._service.filter(line)

    def forward(self, line: str) -> ForwardResult:
        return self._service.forward(line)

    def interpret_ack(self, response: str | None) -> AckVerdict:
        return interpret_ack(response)
