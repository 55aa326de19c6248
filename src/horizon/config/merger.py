"""Non-destructive merge of the module defaults into the host config store.

INVARIANT: Host values always win. The merge only ever adds keys that are
absent, so running it again with the same defaults changes nothing.
"""

from __future__ import annotations

import copy
import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from horizon.config.models import NAMESPACE, HorizonConfig
from horizon.errors import ConfigLoadError

if TYPE_CHECKING:
    from horizon.contracts import ConfigStore

logger = logging.getLogger(__name__)


def fill_missing(existing: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Return *existing* with every key absent from it copied from *defaults*.

    Mappings present on both sides are filled recursively; any other value
    already in *existing* is kept as is.
    """
    merged = dict(existing)
    for key, default in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(default)
        elif isinstance(merged[key], Mapping) and isinstance(default, Mapping):
            merged[key] = fill_missing(merged[key], default)
    return merged


def load_defaults(path: Path) -> dict[str, Any]:
    """Read and validate a TOML defaults document.

    Raises:
        ConfigLoadError: The file is missing, unreadable, not valid TOML,
            or does not match :class:`HorizonConfig`.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read defaults {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"Invalid TOML in {path}: {exc}") from exc
    try:
        HorizonConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid defaults in {path}: {exc}") from exc
    return data


class ConfigMerger:
    """Merges a defaults document under one namespace of a host config store."""

    def __init__(self, store: ConfigStore, namespace: str = NAMESPACE) -> None:
        self._store = store
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def merge(self, defaults_path: Path) -> None:
        defaults = load_defaults(defaults_path)
        current = self._store.get(self._namespace) or {}
        merged = fill_missing(current, defaults)
        if merged != current:
            self._store.set(self._namespace, merged)
            logger.debug(
                "Merged %d default keys into %r",
                len(set(merged) - set(current)),
                self._namespace,
            )
