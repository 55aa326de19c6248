"""Tests for HorizonServiceProvider — the two-phase module bootstrap."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from horizon import runtime
from horizon.commands import CommandContext, CommandDeclaration
from horizon.commands.snapshot import snapshot
from horizon.commands.work import WORK_COMMAND, WorkCommand
from horizon.connectors import HorizonConnector, HorizonQueue
from horizon.contracts import ConnectionFactory, JobRepository
from horizon.errors import (
    BindingConflictError,
    ConfigLoadError,
    ConnectionNotConfiguredError,
    DuplicateEventDeclarationError,
    LifecycleError,
    ResolutionError,
)
from horizon.events import HORIZON_EVENTS
from horizon.host.application import Application, RuntimeContext
from horizon.provider import HorizonServiceProvider, LifecycleState
from horizon.publishing import ASSETS_TAG, CONFIG_TAG

AppFactory = Callable[..., Application]


def _listener_snapshot(app: Application) -> dict[str, list]:
    return {event: app.events.get_listeners(event) for event in app.events.events()}


class TestConstruction:
    def test_duplicate_event_rejected_at_load(self) -> None:
        with pytest.raises(DuplicateEventDeclarationError):
            HorizonServiceProvider(events=[("a", ["x"]), ("a", ["y"])])

    def test_install_path_resolved_from_package(self) -> None:
        provider = HorizonServiceProvider()
        assert (provider.install_path / "provider.py").is_file()
        assert provider.resources_path("config", "horizon.toml").is_file()

    def test_explicit_install_path(self, tmp_path: Path) -> None:
        provider = HorizonServiceProvider(tmp_path)
        assert provider.install_path == tmp_path
        assert provider.resources_path("views") == tmp_path / "resources" / "views"

    def test_starts_unregistered(self) -> None:
        assert HorizonServiceProvider().state is LifecycleState.UNREGISTERED


class TestRegister:
    def test_merges_defaults_without_touching_host_keys(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        app.config.set("horizon", {"uri": "jobs"})
        provider.register(app)
        assert app.config.get("horizon.uri") == "jobs"
        assert app.config.get("horizon.middleware") == ["web"]
        assert provider.state is LifecycleState.REGISTERED

    def test_applies_mode_switch(self, app: Application, provider: HorizonServiceProvider) -> None:
        app.config.set("horizon", {"use": "redis"})
        provider.register(app)
        assert runtime.current().source == "redis"
        assert app.config.has("database.connections.horizon")

    def test_unknown_mode_switch_connection_fails(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        app.config.set("horizon", {"use": "missing"})
        with pytest.raises(ConnectionNotConfiguredError):
            provider.register(app)
        assert provider.state is LifecycleState.UNREGISTERED

    def test_unreadable_defaults_fail(self, app: Application, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            HorizonServiceProvider(tmp_path / "nowhere").register(app)

    def test_mistyped_host_config_fails(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        app.config.set("horizon", {"uri": 5})
        with pytest.raises(ConfigLoadError, match="uri"):
            provider.register(app)
        assert provider.state is LifecycleState.UNREGISTERED

    def test_services_bound_lazily(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        provider.register(app)
        assert app.container.bound(JobRepository)
        assert not app.container.resolved(JobRepository)

    def test_conflicting_binding_fails(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        app.container.singleton(JobRepository, lambda c: object())
        with pytest.raises(BindingConflictError):
            provider.register(app)

    def test_work_command_singleton(self, booted_app: Application) -> None:
        command = booted_app.make(WorkCommand)
        assert isinstance(command, WorkCommand)
        assert booted_app.make(WORK_COMMAND) is command
        assert command.worker is booted_app.make("queue.worker")

    def test_console_registers_all_commands(self, booted_app: Application) -> None:
        assert booted_app.commands.names() == sorted(
            [
                "assets",
                "continue",
                "list",
                "pause",
                "purge",
                "snapshot",
                "supervisor",
                "supervisors",
                "terminate",
                "timeout",
                "work",
            ]
        )

    def test_server_registers_only_snapshot(self, app_factory: AppFactory) -> None:
        app = app_factory(context=RuntimeContext.SERVER)
        app.register_provider(HorizonServiceProvider(), name="horizon")
        app.boot()
        assert app.commands.names() == ["snapshot"]

    def test_config_publishing_only_in_console(self, app_factory: AppFactory) -> None:
        server = app_factory(context=RuntimeContext.SERVER)
        HorizonServiceProvider().register(server)
        assert CONFIG_TAG not in server.publisher.tags()

        console = app_factory()
        HorizonServiceProvider().register(console)
        assert CONFIG_TAG in console.publisher.tags()

    def test_custom_command_table(self, app: Application) -> None:
        provider = HorizonServiceProvider(
            commands=[CommandDeclaration(snapshot, CommandContext.ALWAYS)]
        )
        provider.register(app)
        assert app.commands.names() == ["snapshot"]

    def test_register_twice_is_a_no_op(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        provider.register(app)
        provider.register(app)
        assert provider.state is LifecycleState.REGISTERED


class TestBoot:
    def test_boot_before_register(self, app: Application, provider: HorizonServiceProvider) -> None:
        with pytest.raises(LifecycleError):
            provider.boot(app)

    def test_mistyped_config_at_boot_fails(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        provider.register(app)
        app.config.set("horizon.middleware", 5)
        with pytest.raises(ConfigLoadError, match="middleware"):
            provider.boot(app)
        assert provider.state is LifecycleState.REGISTERED
        assert app.events.events() == []

    def test_events_attached_once_in_order(self, booted_app: Application) -> None:
        for event, listeners in HORIZON_EVENTS:
            assert booted_app.events.get_listeners(event) == list(listeners)

    def test_default_route_group(self, booted_app: Application) -> None:
        assert booted_app.router is not None
        routes = booted_app.router.routes
        assert routes
        assert all(route.uri.startswith("/horizon") for route in routes)
        assert all(route.middleware == ("web",) for route in routes)

    def test_view_namespace(
        self, booted_app: Application, provider: HorizonServiceProvider
    ) -> None:
        assert booted_app.views.namespaces() == {"horizon": [provider.resources_path("views")]}
        assert booted_app.views.find("horizon::layout").name == "layout.html"

    def test_broker_client_resolved_eagerly(self, booted_app: Application) -> None:
        assert booted_app.container.resolved(ConnectionFactory)
        assert booted_app.make(ConnectionFactory) is booted_app.make("db")

    def test_broker_client_failure_aborts_boot(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        provider.register(app)
        app.config.set("database.connections.broken", {"url": "not a url"})
        with pytest.raises(ResolutionError):
            provider.boot(app)
        assert provider.state is LifecycleState.REGISTERED

    def test_assets_declared(self, booted_app: Application) -> None:
        paths = booted_app.publisher.paths(ASSETS_TAG)
        assert list(paths.values()) == [booted_app.public_path("vendor", "horizon")]

    def test_http_disabled(self, app_factory: AppFactory) -> None:
        app = app_factory(http_enabled=False)
        app.register_provider(HorizonServiceProvider(), name="horizon")
        app.boot()
        assert app.router is None
        assert app.events.events()

    def test_register_then_boot_twice_matches_single_boot(self, app_factory: AppFactory) -> None:
        once_app = app_factory()
        once = HorizonServiceProvider()
        once.register(once_app)
        once.boot(once_app)

        twice_app = app_factory()
        twice = HorizonServiceProvider()
        twice.register(twice_app)
        twice.boot(twice_app)
        twice.boot(twice_app)

        assert twice.state is LifecycleState.BOOTED
        assert _listener_snapshot(twice_app) == _listener_snapshot(once_app)
        assert twice_app.router.routes == once_app.router.routes
        assert twice_app.commands.names() == once_app.commands.names()


class TestScenario:
    def test_jobs_auth_redis(self, app: Application, provider: HorizonServiceProvider) -> None:
        app.config.set("horizon", {"uri": "jobs", "middleware": ["auth"], "use": "redis"})
        app.register_provider(provider, name="horizon")
        app.boot()

        routes = app.router.routes
        assert all(route.uri.startswith("/jobs") for route in routes)
        assert all(route.middleware == ("auth",) for route in routes)

        queue = app.make("queue").connection("database")
        assert isinstance(queue, HorizonQueue)
        assert queue.engine is app.make("db").engine("redis")

    def test_connector_attached_when_queue_manager_resolved(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        provider.register(app)
        assert app.make("queue").has_connector("database")

    def test_connector_attached_to_already_resolved_manager(
        self, app: Application, provider: HorizonServiceProvider
    ) -> None:
        manager = app.make("queue")
        provider.register(app)
        assert manager.has_connector("database")

    def test_connector_hook_builds_horizon_connector(self, booted_app: Application) -> None:
        manager = booted_app.make("queue")
        connector = manager._connectors["database"]()
        assert isinstance(connector, HorizonConnector)
