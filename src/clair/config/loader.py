from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from clair.config.defaults import default_config
from clair.errors import MissingDatasourceError, SourceUnavailableError, TypeCoercionError
from clair.config.models import Config, ConfigLoadRequest
from clair.config.resolver import LayeredResolver
from clair.pagination.keys import KeyCodec, ensure_pagination_key

logger = logging.getLogger(__name__)

# All settings in the YAML file are namespaced under this key.
ROOT_KEY = "clair"


def _read_yaml_config(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SourceUnavailableError(str(path), "file not found") from None
    except OSError as e:
        raise SourceUnavailableError(str(path), e.strerror or str(e)) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise SourceUnavailableError(str(path), f"invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SourceUnavailableError(str(path), f"top-level YAML must be a mapping, got {type(data).__name__}")
    return data


def _extract_file_tree(document: Mapping[str, Any], path: Path) -> dict[str, Any]:
    tree = document.get(ROOT_KEY)
    if tree is None:
        logger.warning("Configuration file has no '%s' section; using defaults. path=%s", ROOT_KEY, path)
        return {}
    if not isinstance(tree, dict):
        raise SourceUnavailableError(str(path), f"'{ROOT_KEY}' must be a mapping, got {type(tree).__name__}")
    return tree


def _environment_snapshot(dotenv_path: Optional[str], env: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    snapshot: dict[str, str] = {}
    if dotenv_path is not None:
        dotenv_file = Path(dotenv_path)
        if dotenv_file.exists():
            snapshot.update({k: v for k, v in dotenv_values(dotenv_file).items() if v is not None})
    # Real environment variables win over .env values.
    snapshot.update(os.environ if env is None else env)
    return snapshot


def _first_error(error: ValidationError) -> tuple[str, Any, str]:
    errors = error.errors()
    if not errors:
        return ROOT_KEY, None, str(error)
    first = errors[0]
    return ".".join(str(part) for part in first["loc"]), first.get("input"), first["msg"]


def check_datasource(config: Config) -> None:
    """Raise MissingDatasourceError unless a database connection source is configured."""
    source = config.database.source
    if not isinstance(source, str) or not source.strip():
        raise MissingDatasourceError()


def load_config(
    path: str = "",
    *,
    env: Optional[Mapping[str, str]] = None,
    env_prefix: str = "CLAIR",
    dotenv_path: Optional[str] = None,
    codec: Optional[KeyCodec] = None,
    require_datasource: bool = False,
) -> Config:
    """
    Build the effective configuration.

    ``path`` may be relative or absolute; an empty path skips the file layer
    and returns the defaults overlaid by the environment. ``env`` defaults to a
    snapshot of the process environment; values from ``dotenv_path`` sit
    beneath whichever environment is used. Raises a ConfigError subclass on
    failure; never exits the process.
    """
    file_tree: dict[str, Any] = {}
    if path:
        yaml_path = Path(path)
        file_tree = _extract_file_tree(_read_yaml_config(yaml_path), yaml_path)
        logger.info("Configuration file loaded. path=%s", yaml_path)

    environ = _environment_snapshot(dotenv_path, env)
    resolver = LayeredResolver(file_tree=file_tree, environ=environ, env_prefix=env_prefix)
    merged = resolver.resolve(default_config())

    merged["database"]["options"] = ensure_pagination_key(merged["database"]["options"], codec=codec)

    try:
        config = Config.model_validate(merged)
    except ValidationError as e:
        key, value, reason = _first_error(e)
        raise TypeCoercionError(key, value, reason) from e

    if require_datasource:
        check_datasource(config)
    return config


class YamlConfigLoader:
    def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> Config:
        return load_config(
            request.yaml_path,
            env_prefix=request.env_prefix,
            dotenv_path=request.dotenv_path,
            require_datasource=request.require_datasource,
        )
