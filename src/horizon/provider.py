"""HorizonServiceProvider — activates the dashboard module inside a host.

Two phases, each run once per process by the host:

* ``register``: merge config defaults, select storage, offer the config
  file for publishing, bind services, hook the queue connector, bind the
  work command and declare console commands. Nothing is resolved.
* ``boot``: attach event listeners, open the route group, add the view
  namespace, resolve the broker client and offer the assets for publishing.

INVARIANT: Any error aborts the phase and propagates to the host. There is
no partial-activation fallback and no retry.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from horizon import runtime
from horizon.bindings import SERVICE_BINDINGS, ServiceBindingEntry, ServiceBindingTable
from horizon.commands import CommandDeclaration, CommandRegistrar, horizon_commands
from horizon.commands.work import WORK_COMMAND, WorkCommand
from horizon.config.merger import ConfigMerger
from horizon.config.models import NAMESPACE, HorizonConfig
from horizon.connectors import DRIVER, HorizonConnector
from horizon.contracts import ConnectionFactory
from horizon.errors import HorizonError, LifecycleError, ResolutionError
from horizon.events import HORIZON_EVENTS, EventMap
from horizon.host.providers import hookimpl
from horizon.publishing import ResourcePublisher
from horizon.routes import RouteGroupRegistrar

if TYPE_CHECKING:
    from horizon.contracts import Router
    from horizon.host.application import Application
    from horizon.host.container import Container
    from horizon.host.queue import QueueManager

logger = logging.getLogger(__name__)

BROKER_CLIENT = "db"
QUEUE_MANAGER = "queue"
QUEUE_WORKER = "queue.worker"


class LifecycleState(StrEnum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    BOOTED = "booted"


class HorizonServiceProvider:
    """Declares the module to a host application.

    The event map, service bindings and command declarations are plain
    tables passed in at construction; the defaults are the module's own.

    Args:
        install_path: Directory holding ``resources/``. Resolved once from
            the package location when omitted.
        events: ``(event, listener ids)`` pairs in dispatch order.
        services: Container bindings to register as lazy singletons.
        commands: Console command declarations (default: every horizon command).
        routes: Route table callback opened inside the dashboard group.
    """

    def __init__(
        self,
        install_path: str | Path | None = None,
        *,
        events: Iterable[tuple[str, Iterable[str]]] = HORIZON_EVENTS,
        services: Iterable[ServiceBindingEntry] = SERVICE_BINDINGS,
        commands: Iterable[CommandDeclaration] | None = None,
        routes: Callable[[Router], None] | None = None,
    ) -> None:
        self._install_path = Path(install_path) if install_path is not None else None
        self._install_lock = threading.Lock()
        self.event_map = EventMap.from_pairs(events)
        self.services = ServiceBindingTable(services)
        self._commands = tuple(commands) if commands is not None else None
        self.routes = RouteGroupRegistrar(routes) if routes is not None else RouteGroupRegistrar()
        self.state = LifecycleState.UNREGISTERED

    # ------------------------------------------------------------------
    # Host lifecycle hooks
    # ------------------------------------------------------------------

    @hookimpl
    def provider_register(self, app: Application) -> None:
        self.register(app)

    @hookimpl
    def provider_boot(self, app: Application) -> None:
        self.boot(app)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def register(self, app: Application) -> None:
        if self.state is not LifecycleState.UNREGISTERED:
            logger.debug("Horizon already registered; skipping")
            return

        ConfigMerger(app.config, NAMESPACE).merge(self.resources_path("config", "horizon.toml"))
        config = HorizonConfig.from_store(app.config)
        runtime.use(app.config, config.use)

        if app.running_in_console():
            ResourcePublisher(app.publisher).declare_config(
                self.resources_path("config", "horizon.toml"), app.config_path()
            )

        self.services.register_services(app.container)
        self._register_queue_connector(app.container)
        app.container.singleton(WORK_COMMAND, lambda c: WorkCommand(c.make(QUEUE_WORKER)))
        app.container.alias(WORK_COMMAND, WorkCommand)

        registrar = CommandRegistrar(
            self._commands if self._commands is not None else horizon_commands()
        )
        registrar.register_commands(app.commands, app.running_in_console())

        self.state = LifecycleState.REGISTERED
        logger.debug("Horizon registered (storage connection %r)", config.use)

    def boot(self, app: Application) -> None:
        if self.state is LifecycleState.UNREGISTERED:
            raise LifecycleError("Horizon must be registered before it is booted")
        if self.state is LifecycleState.BOOTED:
            logger.debug("Horizon already booted; skipping")
            return

        config = HorizonConfig.from_store(app.config)
        self.event_map.register_events(app.events)

        self.routes.register_routes(app.router, config.uri, config.middleware)

        app.views.add_namespace(NAMESPACE, self.resources_path("views"))

        self._resolve_broker_client(app.container)

        ResourcePublisher(app.publisher).declare_assets(
            self.resources_path("public"), app.public_path()
        )

        self.state = LifecycleState.BOOTED
        logger.debug("Horizon booted")

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def install_path(self) -> Path:
        if self._install_path is None:
            with self._install_lock:
                if self._install_path is None:
                    self._install_path = Path(__file__).resolve().parent
        return self._install_path

    def resources_path(self, *parts: str) -> Path:
        return self.install_path.joinpath("resources", *parts)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _register_queue_connector(self, container: Container) -> None:
        def attach(manager: QueueManager, c: Any) -> None:
            manager.add_connector(
                DRIVER, lambda: HorizonConnector(c.make(BROKER_CLIENT), c.make("events"))
            )

        container.resolving(QUEUE_MANAGER, attach)
        if container.resolved(QUEUE_MANAGER):
            attach(container.make(QUEUE_MANAGER), container)

    def _resolve_broker_client(self, container: Container) -> None:
        container.alias(BROKER_CLIENT, ConnectionFactory)
        try:
            client = container.make(ConnectionFactory)
        except ResolutionError:
            raise
        except HorizonError as exc:
            raise ResolutionError(BROKER_CLIENT, str(exc)) from exc
        if not isinstance(client, ConnectionFactory):
            raise ResolutionError(BROKER_CLIENT, f"{type(client).__name__} has no engine()")
