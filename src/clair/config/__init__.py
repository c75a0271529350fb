"""Layered configuration: defaults, YAML file, environment overrides."""

from clair.config.defaults import default_config
from clair.errors import (
    ConfigError,
    KeyValidationError,
    MissingDatasourceError,
    SourceUnavailableError,
    TypeCoercionError,
)
from clair.config.interfaces import ConfigLoader
from clair.config.loader import YamlConfigLoader, check_datasource, load_config
from clair.config.models import Config, ConfigLoadRequest

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "ConfigLoadRequest",
    "KeyValidationError",
    "MissingDatasourceError",
    "SourceUnavailableError",
    "TypeCoercionError",
    "YamlConfigLoader",
    "check_datasource",
    "load_config",
    "default_config",
]
