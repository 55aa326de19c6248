"""Host application — owns the shared services providers register into.

Settings priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``HORIZON_*`` prefix
  3. Code defaults

The runtime context (console vs. long-running server) is an explicit
constructor argument, never sniffed from the process.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings

from horizon.config.logging import configure_logging
from horizon.contracts import ConfigStore
from horizon.host.config import Repository
from horizon.host.console import CommandBus
from horizon.host.container import Container
from horizon.host.database import ConnectionManager
from horizon.host.events import Dispatcher
from horizon.host.providers import ProviderManager
from horizon.host.publishing import Publisher
from horizon.host.queue import QueueManager, Worker
from horizon.host.routing import Router
from horizon.host.views import ViewFinder

logger = logging.getLogger(__name__)


class RuntimeContext(StrEnum):
    CONSOLE = "console"
    SERVER = "server"


class AppSettings(BaseSettings):
    """Process-level settings for the host."""

    model_config = {
        "frozen": True,
        "env_prefix": "HORIZON_",
    }

    base_path: Path = Field(default_factory=Path.cwd)
    environment: str = "production"
    http_enabled: bool = True
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False


class Application:
    """Container, config, dispatcher, router, command bus and publisher in one place.

    Providers are driven through two phases by :meth:`boot`: every
    provider's ``provider_register`` hook, then every provider's
    ``provider_boot`` hook, exactly once.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        context: RuntimeContext | str = RuntimeContext.SERVER,
        config: Repository | None = None,
        commands: click.Group | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.context = RuntimeContext(context)
        self.container = Container()
        self.config = config or Repository()
        self.events = Dispatcher(self.container)
        self.router: Router | None = Router() if self.settings.http_enabled else None
        self.commands = CommandBus(commands)
        self.publisher = Publisher()
        self.views = ViewFinder()
        self.providers = ProviderManager()
        self._booted = False

        self._seed_database_defaults()
        self._register_base_bindings()

    # ------------------------------------------------------------------
    # Paths and context
    # ------------------------------------------------------------------

    @property
    def base_path(self) -> Path:
        return self.settings.base_path

    def config_path(self, *parts: str) -> Path:
        return self.base_path.joinpath("config", *parts)

    def public_path(self, *parts: str) -> Path:
        return self.base_path.joinpath("public", *parts)

    def storage_path(self, *parts: str) -> Path:
        return self.base_path.joinpath("storage", *parts)

    def running_in_console(self) -> bool:
        return self.context is RuntimeContext.CONSOLE

    @property
    def booted(self) -> bool:
        return self._booted

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Route logs to stderr tagged with this process's context and environment."""
        configure_logging(
            verbose=self.settings.verbose,
            log_json=self.settings.log_json,
            runtime_context=self.context.value,
            environment=self.settings.environment,
        )

    def load_configuration(self) -> list[str]:
        """Load every ``config/*.toml`` namespace from the base path."""
        loaded = self.config.load_directory(self.config_path())
        self._seed_database_defaults()
        return loaded

    def register_provider(self, provider: object, name: str | None = None) -> None:
        self.providers.register_provider(provider, name=name)

    def discover_providers(self) -> list[str]:
        return self.providers.discover_and_load()

    def boot(self) -> None:
        """Run the register phase, then the boot phase, for every provider."""
        if self._booted:
            logger.debug("Application already booted")
            return
        self.providers.hook.provider_register(app=self)
        self.providers.hook.provider_boot(app=self)
        self._booted = True
        logger.debug("Application booted with providers %s", self.providers.list_provider_names())

    def make(self, key: Any) -> Any:
        return self.container.make(key)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _seed_database_defaults(self) -> None:
        if not self.config.has("database.connections"):
            db_file = self.storage_path("horizon.db")
            self.config.set("database.connections", {"default": {"url": f"sqlite:///{db_file}"}})
        if not self.config.has("queue.connections"):
            self.config.set(
                "queue.connections",
                {"database": {"driver": "database", "queue": "default"}},
            )
            self.config.set("queue.default", "database")

    def _register_base_bindings(self) -> None:
        c = self.container
        c.instance(Application, self)
        c.alias(Application, "app")
        c.instance(Container, c)
        c.instance(Repository, self.config)
        c.alias(Repository, "config")
        c.alias(Repository, ConfigStore)
        c.instance(Dispatcher, self.events)
        c.alias(Dispatcher, "events")
        if self.router is not None:
            c.instance(Router, self.router)
            c.alias(Router, "router")
        c.instance(CommandBus, self.commands)
        c.instance(Publisher, self.publisher)
        c.instance(ViewFinder, self.views)

        c.singleton("db", lambda c: ConnectionManager(c.make("config")))
        c.singleton("queue", lambda c: QueueManager(c.make("config")))
        c.alias("queue", QueueManager)
        c.singleton("queue.worker", lambda c: Worker(c, c.make("queue")))
