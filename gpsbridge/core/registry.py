"""Ordered, read-only registry of device patterns."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import replace
from typing import overload

from gpsbridge.core.errors import ConfigurationError
from gpsbridge.core.model import DevicePattern, MessageKind, ReqRespPattern

LOGGER = logging.getLogger(__name__)


def compile_pattern(msg: str, resp: str = "", *, context: str = "pattern") -> ReqRespPattern:
    """Build a ReqRespPattern with its matcher compiled up front."""
    if not msg:
        return ReqRespPattern(msg="", resp=resp)
    try:
        # \d and \w match ASCII only
        regex = re.compile(msg, re.ASCII)
    except re.error as exc:
        raise ConfigurationError(f"Invalid regular expression in {context}: {msg!r} ({exc})") from exc
    return ReqRespPattern(msg=msg, resp=resp, regex=regex)


def _compiled(device: DevicePattern) -> DevicePattern:
    patterns: dict[str, ReqRespPattern] = {}
    for kind in MessageKind:
        pattern = device.pattern_for(kind)
        # matchers are always derived from msg
        pattern = compile_pattern(pattern.msg, pattern.resp, context=f"{device.device}.{kind.value}")
        patterns[kind.value] = pattern

    if len(device.order) != len(device.units):
        LOGGER.warning(
            "Device %s declares %d order entries but %d units",
            device.device,
            len(device.order),
            len(device.units),
        )

    return replace(device, **patterns)


class DevicePatternRegistry(Sequence[DevicePattern]):
    """Device patterns in matching priority order.

    Every non-empty pattern is compiled while the registry is built, so a
    registry can be shared between concurrent handlers without further
    synchronization.
    """

    def __init__(self, devices: Iterable[DevicePattern] = ()) -> None:
        self._devices: tuple[DevicePattern, ...] = tuple(_compiled(d) for d in devices)

    @overload
    def __getitem__(self, index: int) -> DevicePattern: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[DevicePattern]: ...

    def __getitem__(self, index: int | slice) -> DevicePattern | Sequence[DevicePattern]:
        return self._devices[index]

    def __len__(self) -> int:
        return len(self._devices)

    def __iter__(self) -> Iterator[DevicePattern]:
        return iter(self._devices)

    def __repr__(self) -> str:
        names = ", ".join(d.device for d in self._devices)
        return f"DevicePatternRegistry([{names}])"

    def names(self) -> tuple[str, ...]:
        return tuple(d.device for d in self._devices)
