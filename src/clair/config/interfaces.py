from __future__ import annotations

from typing import Protocol, runtime_checkable

from clair.config.models import Config, ConfigLoadRequest


@runtime_checkable
class ConfigLoader(Protocol):
    """
    Loads effective runtime configuration.

    Implementations apply defaults, then the YAML file, then environment
    overrides, and return a fully populated Config or raise ConfigError.
    """

    def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> Config:
        ...
