"""Pydantic models for the ``horizon`` configuration namespace.

Sparse contract: defaults ship in ``resources/config/horizon.toml`` and the
host's own ``config/horizon.toml`` only carries overrides. The models
validate shape; merging works on the raw mappings so host keys the models
do not know about survive untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from horizon.errors import ConfigLoadError

if TYPE_CHECKING:
    from horizon.contracts import ConfigStore

NAMESPACE = "horizon"
DEFAULT_URI = "horizon"
DEFAULT_MIDDLEWARE: tuple[str, ...] = ("web",)


class SupervisorOptions(BaseModel):
    """One supervisor entry under ``[environments.<env>.<name>]``."""

    model_config = {"frozen": True, "extra": "allow"}

    connection: str = "database"
    queue: list[str] = Field(default_factory=lambda: ["default"])
    balance: str = "simple"
    processes: int = 1
    tries: int = 1
    timeout: int = 60


class TrimConfig(BaseModel):
    """[trim] section, in minutes."""

    model_config = {"frozen": True}

    recent: int = 60
    failed: int = 10080


class HorizonConfig(BaseModel):
    """Root of the ``horizon`` namespace."""

    model_config = {"frozen": True, "extra": "allow"}

    uri: str = DEFAULT_URI
    middleware: list[str] = Field(default_factory=lambda: list(DEFAULT_MIDDLEWARE))
    use: str = "default"
    prefix: str = "horizon_"
    waits: dict[str, int] = Field(default_factory=dict)
    trim: TrimConfig = Field(default_factory=TrimConfig)
    environments: dict[str, dict[str, SupervisorOptions]] = Field(default_factory=dict)

    @classmethod
    def from_store(cls, store: ConfigStore, namespace: str = NAMESPACE) -> HorizonConfig:
        """Typed view of the live namespace in *store*."""
        data: dict[str, Any] = store.get(namespace) or {}
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigLoadError(f"Invalid {namespace!r} configuration: {exc}") from exc

    def max_timeout(self, environment: str) -> int:
        """Largest supervisor timeout configured for *environment* (60 if none)."""
        supervisors = self.environments.get(environment, {})
        return max((s.timeout for s in supervisors.values()), default=60)
