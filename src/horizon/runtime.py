"""Storage mode switch.

``use()`` points every horizon repository and the queue connector at one
named database connection from the host config. The selected connection is
copied into a dedicated ``horizon`` connection carrying the table prefix,
so host code using the original connection is unaffected.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from horizon.errors import ConnectionNotConfiguredError

if TYPE_CHECKING:
    from horizon.contracts import ConfigStore

logger = logging.getLogger(__name__)

CONNECTION = "horizon"
DEFAULT_PREFIX = "horizon_"


@dataclass(frozen=True)
class StorageMode:
    source: str = "default"
    connection: str = CONNECTION
    prefix: str = DEFAULT_PREFIX


_mode = StorageMode()


def use(store: ConfigStore, connection: str) -> StorageMode:
    """Select *connection* as the backing store.

    Raises:
        ConnectionNotConfiguredError: ``database.connections.<connection>``
            is missing from *store*.
    """
    global _mode

    options = store.get(f"database.connections.{connection}")
    if not isinstance(options, Mapping):
        raise ConnectionNotConfiguredError(
            f"Database connection [{connection}] has not been configured."
        )
    prefix = store.get("horizon.prefix") or DEFAULT_PREFIX
    store.set(f"database.connections.{CONNECTION}", {**options, "prefix": prefix})

    _mode = StorageMode(source=connection, prefix=prefix)
    logger.debug("Horizon storage uses connection %r (prefix %r)", connection, prefix)
    return _mode


def current() -> StorageMode:
    return _mode


def reset() -> None:
    global _mode
    _mode = StorageMode()
