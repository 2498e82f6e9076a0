"""Message-to-device classification logic."""

from __future__ import annotations

import logging

from gpsbridge.core.errors import ClassificationError
from gpsbridge.core.model import Classification, FilterResult, MessageKind, ReqRespPattern
from gpsbridge.core.registry import DevicePatternRegistry
from gpsbridge.core.sentence import build_query

LOGGER = logging.getLogger(__name__)

# Tried in this order for every device before moving to the next device.
_KIND_PRIORITY = (MessageKind.LOGIN, MessageKind.HEARTBEAT, MessageKind.GPS_DATA)

# Whole match plus at least two explicit groups.
_MIN_CAPTURES = 3

_LOG_LABELS = {
    MessageKind.LOGIN: "Login message",
    MessageKind.HEARTBEAT: "Heartbeat message",
    MessageKind.GPS_DATA: "GPS-data",
}


def _captures(pattern: ReqRespPattern, line: str) -> tuple[str, ...] | None:
    if not pattern.enabled or pattern.regex is None:
        return None
    match = pattern.regex.search(line)
    if match is None:
        return None
    return (match.group(0),) + tuple(group or "" for group in match.groups())


def classify(line: str, registry: DevicePatternRegistry) -> Classification:
    """Return the first device/kind whose pattern captures at least two groups.

    Scanning stops at the first accepted match, so an earlier device with a
    broad pattern shadows later devices.
    """
    for index, device in enumerate(registry):
        for kind in _KIND_PRIORITY:
            captures = _captures(device.pattern_for(kind), line)
            if captures is not None and len(captures) >= _MIN_CAPTURES:
                return Classification(index=index, device=device, kind=kind, captures=captures)

    LOGGER.debug("Unknown Device: %r", line)
    raise ClassificationError("Unknown Device")


def filter_message(line: str, registry: DevicePatternRegistry) -> FilterResult:
    """Classify a raw device line and build the upstream query for data messages."""
    classification = classify(line, registry)
    LOGGER.info("%s of %s", _LOG_LABELS[classification.kind], classification.device.device)

    query = ""
    if classification.kind is MessageKind.GPS_DATA:
        query = build_query(classification.device, classification.captures)

    return FilterResult(
        classification=classification,
        response=classification.response,
        query=query,
    )
