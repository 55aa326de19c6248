"""In-process host application: the services a provider registers into.

Implements the host contracts from :mod:`horizon.contracts` for the CLI
and for tests. Deliberately small: a container, a dotted-key config store,
an event dispatcher, a route table, a click command bus, a resource
publisher, a view finder, database connections and a queue manager.
"""

from horizon.host.application import Application, AppSettings, RuntimeContext
from horizon.host.container import Container

__all__ = ["AppSettings", "Application", "Container", "RuntimeContext"]
