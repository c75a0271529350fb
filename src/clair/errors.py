from __future__ import annotations

from typing import Any, Optional


class ConfigError(Exception):
    """Base class for every failure raised while loading configuration."""


class SourceUnavailableError(ConfigError):
    """Raised when a configuration file was requested but cannot be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"could not load configuration file {path!r}: {reason}")
        self.path = path
        self.reason = reason


class TypeCoercionError(ConfigError):
    """Raised when a configured value cannot be converted to its target type."""

    def __init__(self, key: str, value: Any, reason: str, *, layer: Optional[str] = None) -> None:
        where = f" (from {layer})" if layer else ""
        super().__init__(f"invalid value for {key}{where}: {value!r}: {reason}")
        self.key = key
        self.value = value
        self.reason = reason
        self.layer = layer


class KeyValidationError(ConfigError):
    """Raised when the configured pagination key is not a valid signing key."""


class MissingDatasourceError(ConfigError):
    """Raised when no database connection source is configured."""

    def __init__(self) -> None:
        super().__init__("could not load configuration: no database source specified")
