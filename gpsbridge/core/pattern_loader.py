"""Device pattern loading and validation for YAML-based gpsbridge configuration."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from enum import IntEnum
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from gpsbridge.core.errors import ConfigurationError, DeviceConfigLoadError, DeviceConfigValidationError
from gpsbridge.core.model import DevicePattern, FieldTag, MessageKind, UnitTag
from gpsbridge.core.registry import DevicePatternRegistry, compile_pattern

# GPRMC record without header, magnetic deviation and checksum:
#          time       active  lat        N/S   lon        E/W   speed   angle   date
REGEXP_GPRMC = "([0-9]{6},[A|V]*,[0-9.]+,[N|S],[0-9.]+,[E|W],[0-9.]+,[0-9.]+,[0-9]{6})"

_MACRO_RE = re.compile(r"%\w+%")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise DeviceConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedDevicePatterns:
    registry: DevicePatternRegistry
    warnings: tuple[str, ...]


def _macros() -> dict[str, str]:
    macros = {"REGEXP_GPRMC": REGEXP_GPRMC}
    for enum_cls in (FieldTag, UnitTag):
        for member in enum_cls:
            macros[member.name] = str(member.value)
    return macros


def substitute_macros(text: str, *, source: str = "<string>") -> str:
    """Replace ``%NAME%`` tokens with regex fragments or enumeration values."""
    for name, replacement in _macros().items():
        text = text.replace(f"%{name}%", replacement)

    leftover = _MACRO_RE.search(text)
    if leftover is not None:
        raise DeviceConfigValidationError(f"Unknown key {leftover.group(0)} found in {source}")
    return text


def _load_schema_validator() -> Any:
    schema_text = resources.files("gpsbridge").joinpath("schemas/devices.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _user_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "gpsbridge/devices.yaml"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeviceConfigLoadError(f"Could not read device configuration {path}: {exc}") from exc

    # comment lines are dropped before macro expansion
    content = "\n".join("" if line.lstrip().startswith("#") else line for line in content.splitlines())
    content = substitute_macros(content, source=str(path))
    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise DeviceConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise DeviceConfigValidationError(f"Device configuration {path} must contain a mapping at root")
    return loaded


def _normalize_tag(value: int | str, enum_cls: type[IntEnum], *, context: str) -> Any:
    try:
        if isinstance(value, int):
            return enum_cls(value)
        return enum_cls[value.strip().upper()]
    except (KeyError, ValueError):
        raise DeviceConfigValidationError(
            f"{context} has unknown {enum_cls.__name__} '{value}'"
        ) from None


def _build_device(doc: dict[str, Any], source: Path | Traversable) -> DevicePattern:
    name = doc["device"]
    order = tuple(
        _normalize_tag(v, FieldTag, context=f"{name}.order[{i}]") for i, v in enumerate(doc.get("order", []))
    )
    units = tuple(
        _normalize_tag(v, UnitTag, context=f"{name}.units[{i}]") for i, v in enumerate(doc.get("units", []))
    )
    if len(order) != len(units):
        raise DeviceConfigValidationError(
            f"Device '{name}' in {source} declares {len(order)} order entries but {len(units)} units"
        )

    patterns = {}
    for kind in MessageKind:
        spec = doc.get(kind.value) or {}
        try:
            patterns[kind.value] = compile_pattern(
                spec.get("msg", ""),
                spec.get("resp", ""),
                context=f"{name}.{kind.value}",
            )
        except ConfigurationError as exc:
            raise DeviceConfigValidationError(f"{exc} in {source}") from exc

    return DevicePattern(device=name, order=order, units=units, **patterns)


def _build_devices(doc: dict[str, Any], source: Path | Traversable) -> list[DevicePattern]:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise DeviceConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    return [_build_device(entry, source) for entry in doc["devices"]]


def _packaged_config_path() -> Traversable:
    return resources.files("gpsbridge").joinpath("devices/default.yaml")


def load_device_file(path: Path | Traversable) -> list[DevicePattern]:
    devices = _build_devices(_read_yaml(path), path)
    LOGGER.info("Found %d device configurations in %s", len(devices), path)
    for device in devices:
        LOGGER.info("Device %s - OK", device.device)
    return devices


def load_device_patterns(path: Path | None = None) -> LoadedDevicePatterns:
    """Build the registry from the packaged defaults plus the user's file.

    An explicit ``path`` replaces both sources.
    """
    if path is not None:
        return LoadedDevicePatterns(registry=DevicePatternRegistry(load_device_file(path)), warnings=())

    devices = load_device_file(_packaged_config_path())
    warnings: list[str] = []

    user_path = _user_config_path()
    if user_path.is_file():
        positions = {device.device: i for i, device in enumerate(devices)}
        for device in load_device_file(user_path):
            if device.device in positions:
                warning = f"User device '{device.device}' overrides packaged device"
                LOGGER.warning(warning)
                warnings.append(warning)
                devices[positions[device.device]] = device
            else:
                positions[device.device] = len(devices)
                devices.append(device)

    return LoadedDevicePatterns(registry=DevicePatternRegistry(devices), warnings=tuple(warnings))
