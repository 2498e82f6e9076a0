from __future__ import annotations

import logging
import re

import pytest

from gpsbridge.core.classifier import classify, filter_message
from gpsbridge.core.errors import ClassificationError, ConfigurationError
from gpsbridge.core.model import DevicePattern, FieldTag, MessageKind, ReqRespPattern, UnitTag
from gpsbridge.core.pattern_loader import REGEXP_GPRMC
from gpsbridge.core.registry import DevicePatternRegistry

HQ_HEARTBEAT = "*HQ,355488020824039,XT,V,0,0#"
HQ_DATA = "*HQ,355488020824039,V1,180725,A,5337.37477,N,01010.26495,E,000.0,000.0,021017#"
UDP_DATA = "s08754/s08754/$GPRMC,180725,A,5337.37477,N,1010.26495,E,0.000000,0.000000,021017,,*20"


def _registry(*extra: DevicePattern) -> DevicePatternRegistry:
    return DevicePatternRegistry(
        [
            DevicePattern(
                device="TK103B-H02",
                heartbeat=ReqRespPattern(msg=r"^\*\w{2},(\d{15}),XT,[V|A]*,([0-9]+),([0-9]+)#\s*$"),
                gps_data=ReqRespPattern(msg=r"^\*\w{2},([0-9]{15}),V1," + REGEXP_GPRMC + r"[,#].*$"),
                order=(FieldTag.DEVIMEI, FieldTag.GPRMC),
                units=(UnitTag.NONE, UnitTag.NONE),
            ),
            DevicePattern(
                device="GPS Logger (UDP)",
                gps_data=ReqRespPattern(msg=r"^\w+\/(\w+)\/\$GPRMC," + REGEXP_GPRMC + ",.*$"),
                order=(FieldTag.DEVID, FieldTag.GPRMC),
                units=(UnitTag.NONE, UnitTag.NONE),
            ),
            *extra,
        ]
    )


def test_heartbeat_matched_before_data() -> None:
    result = classify(HQ_HEARTBEAT, _registry())
    assert result.index == 0
    assert result.kind is MessageKind.HEARTBEAT
    assert result.captures[1:] == ("355488020824039", "0", "0")


def test_data_message_captures() -> None:
    result = classify(HQ_DATA, _registry())
    assert result.kind is MessageKind.GPS_DATA
    assert result.captures[1] == "355488020824039"
    assert result.captures[2] == "180725,A,5337.37477,N,01010.26495,E,000.0,000.0,021017"


def test_second_device_matched() -> None:
    result = classify(UDP_DATA, _registry())
    assert result.index == 1
    assert result.device.device == "GPS Logger (UDP)"
    assert result.captures[1] == "s08754"


def test_unknown_line_raises() -> None:
    with pytest.raises(ClassificationError, match="Unknown Device"):
        classify("hello world", _registry())
    with pytest.raises(ClassificationError):
        classify("", DevicePatternRegistry())


def test_classification_is_idempotent() -> None:
    registry = _registry()
    first = classify(HQ_DATA, registry)
    second = classify(HQ_DATA, registry)
    assert (first.index, first.kind, first.captures) == (second.index, second.kind, second.captures)


def test_single_group_match_is_not_accepted() -> None:
    registry = DevicePatternRegistry(
        [DevicePattern(device="one group", gps_data=ReqRespPattern(msg=r"^(\d+)$"))]
    )
    with pytest.raises(ClassificationError):
        classify("123456", registry)


def test_login_has_priority_within_device() -> None:
    device = DevicePattern(
        device="GL103",
        login=ReqRespPattern(msg=r"^##,imei:(\d+),(A);.*$", resp="LOAD"),
        heartbeat=ReqRespPattern(msg=r"^##,imei:(\d+),(\w);.*$", resp="ON"),
    )
    result = classify("##,imei:359586015829802,A;", DevicePatternRegistry([device]))
    assert result.kind is MessageKind.LOGIN
    assert result.response == "LOAD"


def test_earlier_broad_device_shadows_later_device() -> None:
    broad = DevicePattern(device="broad", heartbeat=ReqRespPattern(msg=r"^(\S+?),(\S+)"))
    registry = DevicePatternRegistry([broad, *_registry()])

    result = classify(HQ_DATA, registry)
    assert result.device.device == "broad"
    assert result.kind is MessageKind.HEARTBEAT


def test_filter_message_builds_query_for_data_only() -> None:
    registry = _registry()

    heartbeat = filter_message(HQ_HEARTBEAT, registry)
    assert heartbeat.query == ""
    assert heartbeat.response == ""

    data = filter_message(UDP_DATA, registry)
    assert data.query.startswith("id=s08754&alt=0.0&acc=0.0&gprmc=$GPRMC,180725,A,5337.37477,N,1010.26495,E,")


def test_filter_message_logs_device(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="gpsbridge.core.classifier"):
        filter_message(HQ_HEARTBEAT, _registry())
    assert "Heartbeat message of TK103B-H02" in caplog.text


def test_registry_compiles_patterns_eagerly() -> None:
    registry = _registry()
    for device in registry:
        for kind in MessageKind:
            pattern = device.pattern_for(kind)
            assert (pattern.regex is not None) == pattern.enabled


def test_registry_rejects_invalid_pattern() -> None:
    with pytest.raises(ConfigurationError):
        DevicePatternRegistry([DevicePattern(device="bad", gps_data=ReqRespPattern(msg="([0-9]"))])


def test_registry_warns_on_order_units_mismatch(caplog: pytest.LogCaptureFixture) -> None:
    device = DevicePattern(device="uneven", order=(FieldTag.DEVID, FieldTag.LAT), units=(UnitTag.NONE,))
    with caplog.at_level(logging.WARNING, logger="gpsbridge.core.registry"):
        registry = DevicePatternRegistry([device])
    assert len(registry) == 1
    assert "uneven" in caplog.text


def test_non_ascii_digits_are_not_accepted() -> None:
    with pytest.raises(ClassificationError):
        classify("*HQ," + "٣" * 15 + ",XT,V,0,0#", _registry())


def test_registry_derives_matcher_from_msg() -> None:
    device = DevicePattern(
        device="stale",
        gps_data=ReqRespPattern(msg=r"^(\w+);(\w+)$", regex=re.compile(r"^(.*)(.*)$")),
    )
    registry = DevicePatternRegistry([device])

    assert registry[0].gps_data.regex.pattern == r"^(\w+);(\w+)$"
    with pytest.raises(ClassificationError):
        classify("no separator here", registry)
