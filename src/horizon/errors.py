"""Error taxonomy for module activation.

INVARIANT: None of these are recovered inside the module. Each aborts the
lifecycle phase that raised it and propagates to the host, which decides
whether startup fails or continues without the module.
"""

from __future__ import annotations


class HorizonError(Exception):
    """Base class for every error raised while activating the module."""


class ConfigLoadError(HorizonError):
    """The defaults document (or a host config file) could not be read or parsed."""


class ConnectionNotConfiguredError(ConfigLoadError):
    """The ``use`` setting names a connection the host has not configured."""


class BindingConflictError(HorizonError):
    """Two declarations claim the same container key."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Container key {_describe(key)} is already claimed")


class ResolutionError(HorizonError):
    """A dependency could not be constructed by the container."""

    def __init__(self, key: object, reason: str | None = None) -> None:
        self.key = key
        msg = f"Unable to resolve {_describe(key)}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class DuplicateEventDeclarationError(HorizonError):
    """The same event name appears twice in an event map."""

    def __init__(self, event: str) -> None:
        self.event = event
        super().__init__(f"Event {event!r} is declared more than once")


class LifecycleError(HorizonError):
    """A lifecycle phase was invoked out of order."""


def _describe(key: object) -> str:
    if isinstance(key, type):
        return f"{key.__module__}.{key.__qualname__}"
    return repr(key)
