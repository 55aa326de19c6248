"""Tests for ProviderManager — registration and the two-phase hook relay."""

from __future__ import annotations

from typing import Any

import pytest

from horizon.host.providers import ProviderManager, hookimpl


class _RecordingProvider:
    def __init__(self, log: list[str], name: str) -> None:
        self.log = log
        self.name = name

    @hookimpl
    def provider_register(self, app: Any) -> None:
        self.log.append(f"{self.name}.register")

    @hookimpl
    def provider_boot(self, app: Any) -> None:
        self.log.append(f"{self.name}.boot")


class _FailingProvider:
    @hookimpl
    def provider_register(self, app: Any) -> None:
        raise RuntimeError("cannot register")


class TestProviderManager:
    def test_hook_relay_accessible(self) -> None:
        pm = ProviderManager()
        assert hasattr(pm.hook, "provider_register")
        assert hasattr(pm.hook, "provider_boot")

    def test_register_provider(self) -> None:
        pm = ProviderManager()
        pm.register_provider(_RecordingProvider([], "a"), name="a")
        assert pm.has_provider("a")
        assert "a" in pm.list_provider_names()

    def test_register_provider_default_name(self) -> None:
        pm = ProviderManager()
        pm.register_provider(_RecordingProvider([], "a"))
        assert "_RecordingProvider" in pm.list_provider_names()

    def test_unregister(self) -> None:
        pm = ProviderManager()
        provider = _RecordingProvider([], "a")
        pm.register_provider(provider, name="a")
        pm.unregister(provider)
        assert not pm.has_provider("a")
        assert pm.get_providers() == []

    def test_hook_failures_propagate(self) -> None:
        pm = ProviderManager()
        pm.register_provider(_FailingProvider())
        with pytest.raises(RuntimeError, match="cannot register"):
            pm.hook.provider_register(app=None)

    def test_has_hook_impls(self) -> None:
        assert ProviderManager._has_hook_impls(_RecordingProvider)
        assert not ProviderManager._has_hook_impls(object)

    def test_normalize_instantiates_provider_classes(self) -> None:
        class _ClassProvider:
            @hookimpl
            def provider_boot(self, app: Any) -> None:
                pass

        pm = ProviderManager()
        pm._pm.register(_ClassProvider, name="cls")
        pm._normalize_provider_instances()
        [provider] = pm.get_providers()
        assert isinstance(provider, _ClassProvider)
        assert pm.has_provider("cls")
