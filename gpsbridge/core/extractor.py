"""Resolve semantic field values from pattern captures.

A requested tag is looked up in the device's ``order``. When the tag was
captured, its text is normalized to the units of the position sentence
(degrees+decimal-minutes, knots). When it was not, a default is used; the
hemisphere defaults are derived from the sign of the captured coordinate.

Numeric parse failures leave the captured text unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from gpsbridge.core.model import DevicePattern, FieldTag, UnitTag

KMH_PER_KNOT = 1.852

Normalizer = Callable[[str, UnitTag, FieldTag], str]
Default = Callable[[DevicePattern, Sequence[str]], str]


def _parse_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _passthrough(value: str, unit: UnitTag, tag: FieldTag) -> str:
    return value


def _fixed_width(value: str, unit: UnitTag, tag: FieldTag) -> str:
    return f"{value:>6}"


def _coordinate(value: str, unit: UnitTag, tag: FieldTag) -> str:
    if unit != UnitTag.DEGREE:
        return value
    degrees = _parse_float(value)
    if degrees is None:
        return value

    whole = int(degrees)
    minutes = abs(degrees - whole) * 60.0
    width = 3 if tag == FieldTag.LON else 2
    return f"{abs(whole):0{width}d}{minutes:05.2f}"


def _speed(value: str, unit: UnitTag, tag: FieldTag) -> str:
    speed = _parse_float(value)
    if speed is None:
        return value
    if unit == UnitTag.KMPERH:
        speed /= KMH_PER_KNOT
    elif unit == UnitTag.MPERS:
        speed *= 3.6 / KMH_PER_KNOT
    return f"{speed:.1f}"


def _hemisphere(coordinate: FieldTag, positive: str, negative: str) -> Default:
    def _default(device: DevicePattern, captures: Sequence[str]) -> str:
        _, index = field_value(device, captures, coordinate)
        if 0 < index < len(captures):
            parsed = _parse_float(captures[index])
            if parsed is not None and parsed < 0.0:
                return negative
        return positive

    return _default


def _constant(value: str) -> Default:
    def _default(device: DevicePattern, captures: Sequence[str]) -> str:
        return value

    return _default


_NORMALIZERS: dict[FieldTag, Normalizer] = {
    FieldTag.NONE: _passthrough,
    FieldTag.DEVID: _passthrough,
    FieldTag.DEVIMEI: _passthrough,
    FieldTag.GPRMC: _passthrough,
    FieldTag.TIME: _fixed_width,
    FieldTag.ACTIVE: _passthrough,
    FieldTag.LAT: _coordinate,
    FieldTag.LON: _coordinate,
    FieldTag.NS: _passthrough,
    FieldTag.EW: _passthrough,
    FieldTag.SPEED: _speed,
    FieldTag.ANGLE: _passthrough,
    FieldTag.DATE: _fixed_width,
    FieldTag.ALT: _passthrough,
    FieldTag.ACC: _passthrough,
    FieldTag.HEAD: _passthrough,
    FieldTag.CHECK: _passthrough,
    FieldTag.MAGN: _passthrough,
}

_DEFAULTS: dict[FieldTag, Default] = {
    FieldTag.NONE: _constant("0.0"),
    FieldTag.DEVID: _constant(""),
    FieldTag.DEVIMEI: _constant(""),
    FieldTag.GPRMC: _constant("0.0"),
    FieldTag.TIME: _constant("0.0"),
    FieldTag.ACTIVE: _constant("A"),
    FieldTag.LAT: _constant("0.0"),
    FieldTag.LON: _constant("0.0"),
    FieldTag.NS: _hemisphere(FieldTag.LAT, "N", "S"),
    FieldTag.EW: _hemisphere(FieldTag.LON, "E", "W"),
    FieldTag.SPEED: _constant("0.0"),
    FieldTag.ANGLE: _constant("0.0"),
    FieldTag.DATE: _constant("0.0"),
    FieldTag.ALT: _constant("0.0"),
    FieldTag.ACC: _constant("0.0"),
    FieldTag.HEAD: _constant("0.0"),
    FieldTag.CHECK: _constant("0.0"),
    FieldTag.MAGN: _constant("0.0"),
}


def field_value(device: DevicePattern, captures: Sequence[str], tag: FieldTag) -> tuple[str, int]:
    """Return ``(value, capture_index)`` for ``tag``.

    ``capture_index`` is the group index the value came from, or 0 when the
    value is a default.
    """
    for position, ordered in enumerate(device.order):
        if ordered != tag:
            continue
        index = position + 1
        if index < len(captures):
            return _NORMALIZERS[tag](captures[index], device.unit_at(position), tag), index
        break

    return _DEFAULTS[tag](device, captures), 0
