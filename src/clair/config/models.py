from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DatabaseConfig(BaseModel):
    """
    Backend selection plus driver options.

    Options are opaque to this package apart from ``source``, ``cachesize`` and
    ``paginationkey``; the backend initializer interprets the rest.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str = "pgsql"
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def source(self) -> Optional[str]:
        return self.options.get("source")

    @property
    def pagination_key(self) -> Optional[str]:
        return self.options.get("paginationkey")


class UpdaterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    interval: timedelta = Field(default=timedelta(hours=1), ge=timedelta(0))
    # None enables every registered updater.
    enabled_updaters: Optional[tuple[str, ...]] = None


class NotifierConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    attempts: int = Field(default=5, ge=1)
    renotify_interval: timedelta = Field(default=timedelta(hours=2), ge=timedelta(0))
    params: dict[str, Any] = Field(default_factory=dict)


class APIConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    port: int = Field(default=6060, gt=0)
    health_port: int = Field(default=6061, gt=0)
    timeout: timedelta = Field(default=timedelta(seconds=900), ge=timedelta(0))
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None


class Config(BaseModel):
    """
    Effective runtime configuration after applying all precedence rules.

    Built once at startup and shared read-only. Each collaborator receives only
    its own section: ``database`` for the backend, ``api`` for the HTTP server,
    ``updater`` and ``notifier`` for the schedulers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    updater: UpdaterConfig = Field(default_factory=UpdaterConfig)
    notifier: NotifierConfig = Field(default_factory=NotifierConfig)
    api: APIConfig = Field(default_factory=APIConfig)


@dataclass(frozen=True, slots=True)
class ConfigLoadRequest:
    """
    Inputs for a configuration loader.

    An empty ``yaml_path`` skips the file layer. ``dotenv_path`` names an
    optional ``.env`` file whose values sit beneath real environment variables.
    """

    yaml_path: str = ""
    env_prefix: str = "CLAIR"
    dotenv_path: Optional[str] = None
    require_datasource: bool = False
