"""Named SQLAlchemy engines built from ``database.connections`` config.

Engines are created lazily, one per connection name. Construction validates
every configured URL so a broken connection fails when the manager is first
resolved rather than on first query.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from horizon.errors import ConfigLoadError, ConnectionNotConfiguredError
from horizon.host.config import Repository

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self, config: Repository) -> None:
        self._config = config
        self._engines: dict[str, Engine] = {}
        for name, options in self._connections().items():
            url = options.get("url") if isinstance(options, dict) else None
            if not url:
                raise ConfigLoadError(f"Database connection [{name}] has no url")
            try:
                make_url(url)
            except ArgumentError as exc:
                raise ConfigLoadError(f"Database connection [{name}] has an invalid url") from exc

    def _connections(self) -> dict[str, Any]:
        return self._config.get("database.connections") or {}

    def names(self) -> list[str]:
        return sorted(self._connections())

    def options(self, name: str) -> dict[str, Any]:
        options = self._connections().get(name)
        if not isinstance(options, dict):
            raise ConnectionNotConfiguredError(
                f"Database connection [{name}] has not been configured."
            )
        return options

    def engine(self, name: str | None = None) -> Engine:
        name = name or self._config.get("database.default", "default")
        if name not in self._engines:
            url = make_url(self.options(name)["url"])
            if url.drivername.startswith("sqlite") and url.database not in (None, "", ":memory:"):
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            self._engines[name] = create_engine(url, echo=False)
            logger.debug("Created engine for connection %r", name)
        return self._engines[name]

    def dispose(self) -> None:
        for engine in self._engines.values():
            engine.dispose()
        self._engines.clear()
