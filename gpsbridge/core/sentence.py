"""GPRMC sentence assembly and upstream query construction."""

from __future__ import annotations

from collections.abc import Sequence
from functools import reduce
from operator import xor
from urllib.parse import quote_plus

from gpsbridge.core.extractor import field_value
from gpsbridge.core.model import DevicePattern, FieldTag

SENTENCE_HEADER = "$GPRMC"
# Magnetic variation is not reported by any supported device.
MAGNETIC_DEVIATION = ",0.0,W"
# NMEA 2.1 mode indicator, then the checksum delimiter.
SENTENCE_TRAILER = ",A*"
SENTENCE_KEY = "gprmc"

_SENTENCE_ORDER = (
    FieldTag.HEAD,
    FieldTag.TIME,
    FieldTag.ACTIVE,
    FieldTag.LAT,
    FieldTag.NS,
    FieldTag.LON,
    FieldTag.EW,
    FieldTag.SPEED,
    FieldTag.ANGLE,
    FieldTag.DATE,
    FieldTag.MAGN,
)

# Prepended in this order, so the query reads imei, id, alt, acc.
_QUERY_PREFIXES = (
    (FieldTag.ACC, "acc"),
    (FieldTag.ALT, "alt"),
    (FieldTag.DEVID, "id"),
    (FieldTag.DEVIMEI, "imei"),
)


def checksum(sentence: str) -> str:
    """XOR of the characters between the leading ``$`` and the trailing ``*``.

    Each character contributes its code point folded to one byte.
    """
    body = sentence
    if body.startswith("$"):
        body = body[1:]
    if body.endswith("*"):
        body = body[:-1]
    return f"{reduce(xor, (ord(ch) & 0xFF for ch in body), 0):02X}"


def _sentence_body(device: DevicePattern, captures: Sequence[str]) -> str:
    if FieldTag.GPRMC in device.order:
        record, _ = field_value(device, captures, FieldTag.GPRMC)
        if not record:
            return ""
        return f"{SENTENCE_HEADER},{record}{MAGNETIC_DEVIATION}"

    parts: list[str] = []
    for tag in _SENTENCE_ORDER:
        if tag is FieldTag.HEAD:
            parts.append(SENTENCE_HEADER)
        elif tag is FieldTag.MAGN:
            parts.append(MAGNETIC_DEVIATION)
        else:
            value, _ = field_value(device, captures, tag)
            parts.append("," + quote_plus(value))
    return "".join(parts)


def build_sentence(device: DevicePattern, captures: Sequence[str]) -> str:
    """Return the checksummed GPRMC sentence, or "" when nothing was captured."""
    if len(captures) < 2:
        return ""
    sentence = _sentence_body(device, captures)
    if not sentence:
        return ""
    sentence += SENTENCE_TRAILER
    return sentence + checksum(sentence)


def build_query(device: DevicePattern, captures: Sequence[str]) -> str:
    """Return the upstream query string for a matched data message."""
    sentence = build_sentence(device, captures)
    if not sentence:
        return ""

    query = f"{SENTENCE_KEY}={sentence}"
    for tag, key in _QUERY_PREFIXES:
        value, _ = field_value(device, captures, tag)
        if value:
            query = f"{key}={quote_plus(value)}&{query}"
    return query
