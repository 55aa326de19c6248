"""Route table with nested groups (prefix, controller namespace, middleware).

The router only records routes; serving them is the host web layer's job.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Route:
    method: str
    uri: str
    action: str
    middleware: tuple[str, ...] = ()
    name: str | None = None


@dataclass(frozen=True)
class _GroupScope:
    prefix: str = ""
    namespace: str = ""
    middleware: tuple[str, ...] = ()


class Router:
    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._stack: list[_GroupScope] = [_GroupScope()]

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def group(self, options: Mapping[str, Any], callback: Callable[[Router], None]) -> None:
        """Run *callback* with *options* applied to every route it adds."""
        parent = self._stack[-1]
        scope = _GroupScope(
            prefix=_join(parent.prefix, options.get("prefix") or ""),
            namespace=".".join(p for p in (parent.namespace, options.get("namespace") or "") if p),
            middleware=(*parent.middleware, *(options.get("middleware") or ())),
        )
        self._stack.append(scope)
        try:
            callback(self)
        finally:
            self._stack.pop()

    def get(self, uri: str, action: str, *, name: str | None = None) -> Route:
        return self._add("GET", uri, action, name)

    def post(self, uri: str, action: str, *, name: str | None = None) -> Route:
        return self._add("POST", uri, action, name)

    def delete(self, uri: str, action: str, *, name: str | None = None) -> Route:
        return self._add("DELETE", uri, action, name)

    def find(self, method: str, uri: str) -> Route | None:
        uri = "/" + uri.strip("/")
        for route in self._routes:
            if route.method == method and route.uri == uri:
                return route
        return None

    def _add(self, method: str, uri: str, action: str, name: str | None) -> Route:
        scope = self._stack[-1]
        if scope.namespace:
            action = f"{scope.namespace}.{action}"
        route = Route(method, _join(scope.prefix, uri), action, scope.middleware, name)
        self._routes.append(route)
        return route


def _join(prefix: str, uri: str) -> str:
    parts = [p.strip("/") for p in (prefix, uri) if p.strip("/")]
    return "/" + "/".join(parts)
