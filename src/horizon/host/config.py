"""Host configuration repository — dotted-key access over TOML namespaces.

Each ``<base>/config/<name>.toml`` file becomes the ``<name>`` namespace,
mirroring how the module's own defaults live under ``horizon``.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from horizon.errors import ConfigLoadError

logger = logging.getLogger(__name__)

_MISSING = object()


class Repository:
    """Mutable, process-wide configuration store owned by the host."""

    def __init__(self, items: Mapping[str, Any] | None = None) -> None:
        self._items: dict[str, Any] = dict(items or {})

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._items
        for segment in key.split("."):
            if not isinstance(node, Mapping) or segment not in node:
                return default
            node = node[segment]
        return node

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any) -> None:
        *parents, leaf = key.split(".")
        node = self._items
        for segment in parents:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[leaf] = value

    def all(self) -> dict[str, Any]:
        return self._items

    def configure(self, name: str, config_dir: Path) -> bool:
        """Load ``<config_dir>/<name>.toml`` into the *name* namespace if present."""
        path = config_dir / f"{name}.toml"
        if not path.is_file():
            return False
        self.set(name, _read_toml(path))
        logger.debug("Loaded config namespace %r from %s", name, path)
        return True

    def load_directory(self, config_dir: Path) -> list[str]:
        """Load every ``*.toml`` file in *config_dir*. Returns loaded namespaces."""
        if not config_dir.is_dir():
            return []
        loaded = []
        for path in sorted(config_dir.glob("*.toml")):
            if self.configure(path.stem, config_dir):
                loaded.append(path.stem)
        return loaded


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"Invalid TOML in {path}: {exc}") from exc
