"""Core data models used across loader, classifier, extractor, and CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum


class FieldTag(IntEnum):
    """Meaning of a capture group in a device's data pattern."""

    NONE = 0
    DEVID = 1
    DEVIMEI = 2
    GPRMC = 3
    TIME = 4
    ACTIVE = 5
    LAT = 6
    LON = 7
    NS = 8
    EW = 9
    SPEED = 10
    ANGLE = 11
    DATE = 12
    ALT = 13
    ACC = 14
    HEAD = 20
    CHECK = 21
    MAGN = 22


class UnitTag(IntEnum):
    """Unit of a captured numeric field.

    Values share one keyword space with FieldTag so configuration tokens
    resolve to unique integers.
    """

    NONE = 0
    DEGMIN = 15
    KMPERH = 16
    MPERS = 17
    KNOTS = 18
    DEGREE = 19


class MessageKind(str, Enum):
    LOGIN = "login"
    HEARTBEAT = "heartbeat"
    GPS_DATA = "gps_data"


@dataclass(frozen=True)
class ReqRespPattern:
    msg: str = ""
    resp: str = ""
    regex: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    @property
    def enabled(self) -> bool:
        return bool(self.msg)


@dataclass(frozen=True)
class DevicePattern:
    device: str
    login: ReqRespPattern = ReqRespPattern()
    heartbeat: ReqRespPattern = ReqRespPattern()
    gps_data: ReqRespPattern = ReqRespPattern()
    order: tuple[FieldTag, ...] = ()
    units: tuple[UnitTag, ...] = ()

    def pattern_for(self, kind: MessageKind) -> ReqRespPattern:
        if kind is MessageKind.LOGIN:
            return self.login
        if kind is MessageKind.HEARTBEAT:
            return self.heartbeat
        return self.gps_data

    def unit_at(self, position: int) -> UnitTag:
        # units shorter than order: missing entries read as NONE
        if position < len(self.units):
            return self.units[position]
        return UnitTag.NONE


@dataclass(frozen=True)
class Classification:
    index: int
    device: DevicePattern
    kind: MessageKind
    captures: tuple[str, ...]

    @property
    def response(self) -> str:
        return self.device.pattern_for(self.kind).resp


@dataclass(frozen=True)
class FilterResult:
    classification: Classification
    response: str
    query: str
