"""Tests for the module's service binding table."""

from __future__ import annotations

import pytest

from horizon.bindings import SERVICE_BINDINGS, ServiceBindingEntry, ServiceBindingTable
from horizon.contracts import JobRepository
from horizon.errors import BindingConflictError
from horizon.host.application import Application
from horizon.host.container import Container
from horizon.stopwatch import Stopwatch
from horizon.storage.repositories import DatabaseJobRepository


class _Counted:
    created = 0

    def __init__(self) -> None:
        _Counted.created += 1


class _Base:
    pass


class _Impl(_Base):
    pass


class TestServiceBindingEntry:
    def test_self_binding(self) -> None:
        entry = ServiceBindingEntry(Stopwatch)
        assert entry.is_self_binding
        assert entry.implementation is Stopwatch

    def test_keyed_binding(self) -> None:
        entry = ServiceBindingEntry(JobRepository, DatabaseJobRepository)
        assert not entry.is_self_binding
        assert entry.implementation is DatabaseJobRepository


class TestServiceBindingTable:
    def test_duplicate_key_rejected(self) -> None:
        with pytest.raises(BindingConflictError) as exc_info:
            ServiceBindingTable([ServiceBindingEntry(_Base, _Impl), ServiceBindingEntry(_Base)])
        assert exc_info.value.key is _Base

    def test_registration_is_lazy(self) -> None:
        _Counted.created = 0
        container = Container()
        ServiceBindingTable([ServiceBindingEntry(_Counted)]).register_services(container)
        assert _Counted.created == 0
        assert container.bound(_Counted)
        first = container.make(_Counted)
        assert container.make(_Counted) is first
        assert _Counted.created == 1

    def test_keyed_binding_resolves_implementation(self) -> None:
        container = Container()
        ServiceBindingTable([ServiceBindingEntry(_Base, _Impl)]).register_services(container)
        assert isinstance(container.make(_Base), _Impl)

    def test_key_already_bound_in_container(self) -> None:
        container = Container()
        container.singleton(_Base, lambda c: _Impl())
        table = ServiceBindingTable([ServiceBindingEntry(_Counted), ServiceBindingEntry(_Base)])
        with pytest.raises(BindingConflictError):
            table.register_services(container)
        assert not container.bound(_Counted)

    def test_keys(self) -> None:
        table = ServiceBindingTable(
            [ServiceBindingEntry(_Base, _Impl), ServiceBindingEntry(_Counted)]
        )
        assert table.keys() == [_Base, _Counted]
        assert len(table) == 2


class TestHorizonBindings:
    def test_every_entry_resolves_to_declared_type(self, booted_app: Application) -> None:
        for entry in SERVICE_BINDINGS:
            assert booted_app.container.bound(entry.key)
            assert isinstance(booted_app.make(entry.key), entry.implementation)

    def test_nothing_constructed_at_registration(self, app: Application) -> None:
        ServiceBindingTable(SERVICE_BINDINGS).register_services(app.container)
        for entry in SERVICE_BINDINGS:
            assert not app.container.resolved(entry.key)
