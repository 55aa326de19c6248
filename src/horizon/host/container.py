"""Service container — lazy factories, shared singletons, aliases, resolving hooks.

Keys are classes or strings. A class key without a factory is built by
autowiring its ``__init__`` annotations; an unbound dotted string such as
``"horizon.listeners.StoreJob"`` is imported and built the same way.

Resolving hooks are an explicit registry of ``(key, hook)`` pairs, run
synchronously after an object is constructed, in registration order.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from horizon.errors import HorizonError, ResolutionError

logger = logging.getLogger(__name__)

Factory = Callable[["Container"], Any]
ResolvingHook = Callable[[Any, "Container"], None]


@dataclass(frozen=True)
class Binding:
    factory: Factory
    shared: bool


class Container:
    """Maps keys to factories and owns every instance it constructs."""

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._instances: dict[Any, Any] = {}
        self._aliases: dict[Any, Any] = {}
        self._resolving: list[tuple[Any, ResolvingHook]] = []
        self._building: list[Any] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def bind(self, key: Any, factory: Factory | None = None, *, shared: bool = False) -> None:
        """Register *factory* under *key*; last registration wins."""
        self._aliases.pop(key, None)
        self._instances.pop(key, None)
        self._bindings[key] = Binding(factory or self._factory_for(key), shared)

    def singleton(self, key: Any, factory: Factory | None = None) -> None:
        """Register a shared binding constructed on first resolution."""
        self.bind(key, factory, shared=True)

    def instance(self, key: Any, obj: Any) -> None:
        """Register an already-constructed shared object."""
        self._aliases.pop(key, None)
        self._bindings.pop(key, None)
        self._instances[key] = obj

    def alias(self, abstract: Any, name: Any) -> None:
        """Make *name* resolve to whatever *abstract* resolves to."""
        if name == abstract:
            raise ResolutionError(name, "a key cannot alias itself")
        self._aliases[name] = abstract

    def resolving(self, key: Any, hook: ResolvingHook) -> None:
        """Run *hook(obj, container)* whenever *key* (or an instance of it) is built."""
        self._resolving.append((key, hook))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def bound(self, key: Any) -> bool:
        return key in self._bindings or key in self._instances or key in self._aliases

    def resolved(self, key: Any) -> bool:
        """Whether a shared instance for *key* already exists."""
        return self.get_alias(key) in self._instances

    def get_alias(self, key: Any) -> Any:
        seen = {key}
        while key in self._aliases:
            key = self._aliases[key]
            if key in seen:
                raise ResolutionError(key, "alias cycle")
            seen.add(key)
        return key

    def make(self, key: Any) -> Any:
        """Resolve *key*, constructing it if needed.

        Raises:
            ResolutionError: No binding exists and *key* cannot be autowired,
                the dependency graph is circular, or a factory raised.
        """
        key = self.get_alias(key)
        if key in self._instances:
            return self._instances[key]

        if key in self._building:
            chain = " -> ".join(_name(k) for k in [*self._building, key])
            raise ResolutionError(key, f"circular dependency ({chain})")

        binding = self._bindings.get(key)
        factory = binding.factory if binding else self._factory_for(key)

        self._building.append(key)
        try:
            obj = factory(self)
        except HorizonError:
            raise
        except Exception as exc:
            raise ResolutionError(key, str(exc)) from exc
        finally:
            self._building.pop()

        if binding is not None and binding.shared:
            self._instances[key] = obj
        self._fire_resolving(key, obj)
        return obj

    def __getitem__(self, key: Any) -> Any:
        return self.make(key)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def build(self, cls: type) -> Any:
        """Instantiate *cls*, resolving annotated constructor parameters."""
        if inspect.isabstract(cls):
            raise ResolutionError(cls, "abstract class has no binding")
        try:
            hints = typing.get_type_hints(cls.__init__)
        except (NameError, TypeError):
            hints = {}

        kwargs: dict[str, Any] = {}
        for name, param in inspect.signature(cls).parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            hint = hints.get(name)
            if hint is not None and self.bound(hint):
                kwargs[name] = self.make(hint)
            elif param.default is not param.empty:
                continue
            elif _buildable(hint):
                kwargs[name] = self.make(hint)
            else:
                raise ResolutionError(cls, f"cannot resolve parameter {name!r}")
        return cls(**kwargs)

    def _factory_for(self, key: Any) -> Factory:
        if isinstance(key, type):
            return lambda c: c.build(key)
        if isinstance(key, str) and "." in key:
            return lambda c: c.build(_import_string(key))
        raise ResolutionError(key, "no binding registered")

    def _fire_resolving(self, key: Any, obj: Any) -> None:
        for target, hook in list(self._resolving):
            if target == key or (isinstance(target, type) and isinstance(obj, target)):
                hook(obj, self)


def _buildable(hint: Any) -> bool:
    return (
        isinstance(hint, type)
        and hint.__module__ != "builtins"
        and not inspect.isabstract(hint)
        and not getattr(hint, "_is_protocol", False)
    )


def _import_string(path: str) -> type:
    module_name, _, attr = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise ResolutionError(path, f"cannot import {path!r}") from exc
    if not isinstance(target, type):
        raise ResolutionError(path, f"{path!r} is not a class")
    return target


def _name(key: Any) -> str:
    return key.__qualname__ if isinstance(key, type) else str(key)
