"""Provider discovery and the two-phase lifecycle hooks via pluggy.

Discovery: entry points in the ``horizon.providers`` group, plus direct
registration. The host calls ``provider_register`` on every provider, then
``provider_boot`` on every provider.
INVARIANT: Provider failures propagate. A provider that raises aborts
startup; the host decides whether to continue without it.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from horizon.host.application import Application

PROJECT_NAME = "horizon"
ENTRY_POINT_GROUP = "horizon.providers"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

logger = logging.getLogger(__name__)


class ProviderSpec:
    """Hook specifications for service providers."""

    @hookspec
    def provider_register(self, app: Application) -> None:
        """Bind services, merge config and declare commands. No resolution yet."""

    @hookspec
    def provider_boot(self, app: Application) -> None:
        """Activate events, routes and resources once every provider registered."""


class ProviderManager:
    """Manages provider discovery, registration, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ProviderSpec)

    def discover_and_load(self) -> list[str]:
        """Load providers from the ``horizon.providers`` entry-point group.

        Returns the names of all registered providers.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_provider_instances()
        return self.list_provider_names()

    def register_provider(self, provider: object, name: str | None = None) -> None:
        resolved_name = name or provider.__class__.__name__
        self._pm.register(provider, name=resolved_name)
        logger.debug("Registered provider: %s", resolved_name)

    def unregister(self, provider: object) -> None:
        self._pm.unregister(provider)

    def has_provider(self, name: str) -> bool:
        return self._pm.has_plugin(name)

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_providers(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_provider_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def _normalize_provider_instances(self) -> None:
        """Replace provider classes registered from entry points with instances.

        Hook dispatch against a class object leaves ``self`` unbound.
        """
        for provider in list(self._pm.get_plugins()):
            if not inspect.isclass(provider) or not self._has_hook_impls(provider):
                continue
            name = self._pm.get_name(provider) or provider.__name__
            self._pm.unregister(provider)
            self._pm.register(provider(), name=name)
            logger.debug("Instantiated entry-point provider: %s", name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has methods decorated with ``@hookimpl``.

        ``HookimplMarker("horizon")`` sets a ``horizon_impl`` attribute.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "horizon_impl", None):
                return True
        return False
