from __future__ import annotations

from datetime import timedelta

from clair.config.models import APIConfig, Config, DatabaseConfig, NotifierConfig, UpdaterConfig


def default_config() -> Config:
    """Return the built-in baseline configuration. Performs no I/O."""
    return Config(
        database=DatabaseConfig(type="pgsql", options={}),
        updater=UpdaterConfig(interval=timedelta(hours=1)),
        api=APIConfig(port=6060, health_port=6061, timeout=timedelta(seconds=900)),
        notifier=NotifierConfig(attempts=5, renotify_interval=timedelta(hours=2), params={}),
    )
