"""Recognized configuration keys, their value kinds and where they land.

Every key the resolver understands is listed in ``KEY_TABLE``. Keys are
dotted paths relative to the top-level ``clair`` mapping of the YAML file.
"""

from __future__ import annotations

import re
import typing
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from pydantic import BaseModel

from clair.config.durations import parse_duration
from clair.errors import TypeCoercionError
from clair.config.models import Config

_DECIMAL_INT_RE = re.compile(r"[+-]?[0-9]+")


class ValueKind(str, Enum):
    STRING = "string"
    INT = "int"
    DURATION = "duration"
    STRING_LIST = "string_list"
    OPAQUE = "opaque"


@dataclass(frozen=True, slots=True)
class ConfigKey:
    path: str
    kind: ValueKind
    # Field path inside Config; a third segment indexes a mapping field.
    target: tuple[str, ...]
    minimum: Optional[int] = None

    @property
    def segments(self) -> Sequence[str]:
        return self.path.split(".")

    def env_var_name(self, prefix: str) -> str:
        parts = [p.upper() for p in self.segments]
        if prefix:
            parts.insert(0, prefix.upper().rstrip("_"))
        return "_".join(parts)

    def coerce(self, raw: Any, *, layer: Optional[str] = None) -> Any:
        coercer = _COERCERS[self.kind]
        try:
            value = coercer(raw)
        except (TypeError, ValueError) as e:
            raise TypeCoercionError(self.path, raw, str(e), layer=layer) from e
        if self.minimum is not None:
            _check_minimum(self, raw, value, layer)
        return value


def _check_minimum(key: ConfigKey, raw: Any, value: Any, layer: Optional[str]) -> None:
    if isinstance(value, timedelta):
        if value < timedelta(seconds=key.minimum):
            raise TypeCoercionError(key.path, raw, "duration must not be negative", layer=layer)
        return
    if value < key.minimum:
        raise TypeCoercionError(key.path, raw, f"must be at least {key.minimum}", layer=layer)


def _coerce_string(raw: Any) -> str:
    if isinstance(raw, (Mapping, list, tuple)):
        raise TypeError(f"expected a scalar, got {type(raw).__name__}")
    if raw is None:
        raise ValueError("expected a value, got null")
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def _coerce_int(raw: Any) -> int:
    if isinstance(raw, bool):
        raise TypeError("expected an integer, got a boolean")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        # int() also takes underscores and non-ASCII digits.
        if not _DECIMAL_INT_RE.fullmatch(text):
            raise ValueError("expected an integer")
        return int(text, 10)
    raise TypeError(f"expected an integer, got {type(raw).__name__}")


def _coerce_duration(raw: Any) -> timedelta:
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, bool):
        raise TypeError("expected a duration, got a boolean")
    if isinstance(raw, int):
        # A bare number has no unit; only zero is unambiguous.
        if raw == 0:
            return timedelta(0)
        raise ValueError("missing unit in duration")
    if isinstance(raw, str):
        return parse_duration(raw)
    raise TypeError(f"expected a duration, got {type(raw).__name__}")


def _coerce_string_list(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = raw
    else:
        raise TypeError(f"expected a list of strings, got {type(raw).__name__}")
    return tuple(s for s in (_coerce_string(item).strip() for item in items) if s)


def _coerce_opaque(raw: Any) -> Any:
    return raw


_COERCERS: dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.STRING: _coerce_string,
    ValueKind.INT: _coerce_int,
    ValueKind.DURATION: _coerce_duration,
    ValueKind.STRING_LIST: _coerce_string_list,
    ValueKind.OPAQUE: _coerce_opaque,
}


def _is_mapping_annotation(annotation: Any) -> bool:
    origin = typing.get_origin(annotation) or annotation
    return isinstance(origin, type) and issubclass(origin, Mapping)


def _validate_target(key: ConfigKey, root: type[BaseModel]) -> None:
    if len(key.target) not in (2, 3):
        raise ValueError(f"Invalid target for {key.path}: {'.'.join(key.target)}")

    section_name, field_name = key.target[0], key.target[1]
    section_field = root.model_fields.get(section_name)
    if section_field is None:
        raise ValueError(f"Unknown config section for {key.path}: {section_name}")
    section_model = section_field.annotation
    if not (isinstance(section_model, type) and issubclass(section_model, BaseModel)):
        raise ValueError(f"Config section is not a model for {key.path}: {section_name}")

    field = section_model.model_fields.get(field_name)
    if field is None:
        raise ValueError(f"Unknown config field for {key.path}: {section_name}.{field_name}")
    if len(key.target) == 3 and not _is_mapping_annotation(field.annotation):
        raise ValueError(f"Config field does not hold a mapping for {key.path}: {section_name}.{field_name}")


class KeyTable:
    """An immutable, validated set of recognized configuration keys."""

    def __init__(self, keys: Iterable[ConfigKey], *, root: type[BaseModel] = Config) -> None:
        by_path: dict[str, ConfigKey] = {}
        targets: set[tuple[str, ...]] = set()
        for key in keys:
            if key.path in by_path:
                raise ValueError(f"Duplicate configuration key: {key.path}")
            if key.kind not in _COERCERS:
                raise ValueError(f"Unsupported value kind for {key.path}: {key.kind}")
            if key.target in targets:
                raise ValueError(f"Configuration target assigned twice: {'.'.join(key.target)}")
            _validate_target(key, root)
            by_path[key.path] = key
            targets.add(key.target)
        self._keys = by_path

    def __iter__(self):
        return iter(self._keys.values())

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, path: object) -> bool:
        return path in self._keys

    def get(self, path: str) -> Optional[ConfigKey]:
        return self._keys.get(path)


KEY_TABLE = KeyTable(
    [
        ConfigKey("database.type", ValueKind.STRING, ("database", "type")),
        ConfigKey("database.options.source", ValueKind.STRING, ("database", "options", "source")),
        ConfigKey("database.options.cachesize", ValueKind.INT, ("database", "options", "cachesize"), minimum=0),
        ConfigKey("database.options.paginationkey", ValueKind.STRING, ("database", "options", "paginationkey")),
        ConfigKey("api.port", ValueKind.INT, ("api", "port"), minimum=1),
        ConfigKey("api.healthport", ValueKind.INT, ("api", "health_port"), minimum=1),
        ConfigKey("api.timeout", ValueKind.DURATION, ("api", "timeout"), minimum=0),
        ConfigKey("api.cafile", ValueKind.STRING, ("api", "ca_file")),
        ConfigKey("api.certfile", ValueKind.STRING, ("api", "cert_file")),
        ConfigKey("api.keyfile", ValueKind.STRING, ("api", "key_file")),
        ConfigKey("updater.interval", ValueKind.DURATION, ("updater", "interval"), minimum=0),
        ConfigKey("updater.enabledupdaters", ValueKind.STRING_LIST, ("updater", "enabled_updaters")),
        ConfigKey("notifier.attempts", ValueKind.INT, ("notifier", "attempts"), minimum=1),
        ConfigKey("notifier.renotifyinterval", ValueKind.DURATION, ("notifier", "renotify_interval"), minimum=0),
        ConfigKey("notifier.http", ValueKind.OPAQUE, ("notifier", "params", "http")),
    ]
)
