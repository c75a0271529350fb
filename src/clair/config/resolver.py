from __future__ import annotations

import copy
import logging
from typing import Any, Iterator, Mapping, MutableMapping, Optional, Sequence

from clair.config.models import Config
from clair.config.schema import KEY_TABLE, ConfigKey, KeyTable

logger = logging.getLogger(__name__)

LAYER_FILE = "file"
LAYER_ENV = "environment"

_MISSING = object()


def _get_path(tree: Mapping[str, Any], segments: Sequence[str]) -> Any:
    cur: Any = tree
    for segment in segments:
        if not isinstance(cur, Mapping) or segment not in cur:
            return _MISSING
        cur = cur[segment]
    return cur


def _set_target(config: MutableMapping[str, Any], target: Sequence[str], value: Any) -> None:
    cur = config
    for segment in target[:-1]:
        next_value = cur.get(segment)
        if next_value is None:
            next_value = {}
            cur[segment] = next_value
        cur = next_value
    cur[target[-1]] = value


def _iter_leaf_paths(tree: Mapping[str, Any], prefix: str = "") -> Iterator[str]:
    for k, v in tree.items():
        path = f"{prefix}{k}"
        if isinstance(v, Mapping) and v:
            yield from _iter_leaf_paths(v, prefix=f"{path}.")
        else:
            yield path


def _fold_environ(environ: Mapping[str, str], prefix: str) -> dict[str, str]:
    # Environment names are matched case-insensitively; only prefixed names are kept.
    wanted = prefix.upper().rstrip("_")
    folded: dict[str, str] = {}
    original_names: dict[str, str] = {}
    for name, value in environ.items():
        upper = name.upper()
        if wanted and not upper.startswith(f"{wanted}_"):
            continue
        if upper in original_names and original_names[upper] != name:
            logger.warning(
                "Environment variables differ only in case; the later one wins. first=%s second=%s",
                original_names[upper],
                name,
            )
        folded[upper] = value
        original_names[upper] = name
    return folded


class LayeredResolver:
    """
    Resolves one effective value per recognized key.

    Precedence, highest first: environment snapshot, file tree, defaults.
    A resolver is built per load from an explicit file tree (the mapping under
    the ``clair`` key) and an explicit environment snapshot, so it carries no
    state between loads.
    """

    def __init__(
        self,
        *,
        file_tree: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        env_prefix: str = "CLAIR",
        keys: KeyTable = KEY_TABLE,
    ) -> None:
        self._file_tree: Mapping[str, Any] = file_tree or {}
        self._environ = _fold_environ(environ or {}, env_prefix)
        self._env_prefix = env_prefix
        self._keys = keys

    def lookup(self, key: ConfigKey) -> tuple[Any, Optional[str]]:
        """Return the raw value for ``key`` and the layer it came from, or ``(None, None)``."""
        env_value = self._environ.get(key.env_var_name(self._env_prefix))
        if env_value:
            return env_value, LAYER_ENV

        file_value = _get_path(self._file_tree, key.segments)
        if file_value is not _MISSING and file_value is not None:
            return file_value, LAYER_FILE

        return None, None

    def unknown_file_keys(self) -> list[str]:
        unknown: list[str] = []
        for path in _iter_leaf_paths(self._file_tree):
            if path in self._keys:
                continue
            # Opaque keys own their whole sub-tree.
            if any(path.startswith(f"{k.path}.") for k in self._keys):
                continue
            unknown.append(path)
        return unknown

    def resolve(self, base: Config) -> dict[str, Any]:
        """
        Overlay the file and environment layers onto ``base``.

        Returns plain data suitable for ``Config.model_validate``. Raises
        TypeCoercionError on the first value that cannot be converted.
        """
        merged: dict[str, Any] = copy.deepcopy(base.model_dump(mode="python"))

        for path in self.unknown_file_keys():
            logger.debug("Ignoring unknown configuration key. key=%s", path)

        for key in self._keys:
            raw, layer = self.lookup(key)
            if layer is None:
                continue
            value = key.coerce(raw, layer=layer)
            _set_target(merged, key.target, value)
            logger.debug("Configuration value resolved. key=%s layer=%s", key.path, layer)

        return merged
