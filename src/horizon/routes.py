"""Dashboard route group.

The module only opens the group (prefix, controller namespace, middleware)
and hands the router to the route table below; controllers are resolved
by the host web layer from the namespaced action names.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from horizon.config.models import DEFAULT_MIDDLEWARE, DEFAULT_URI
from horizon.contracts import Router

logger = logging.getLogger(__name__)

CONTROLLER_NAMESPACE = "horizon.http.controllers"


@dataclass(frozen=True)
class RouteGroupSpec:
    prefix: str
    namespace: str
    middleware: tuple[str, ...]

    def options(self) -> dict[str, Any]:
        return {
            "prefix": self.prefix,
            "namespace": self.namespace,
            "middleware": list(self.middleware),
        }


def define_routes(router: Router) -> None:
    """The dashboard's route table."""
    # Dashboard stats
    router.get("/api/stats", "DashboardStatsController.index", name="horizon.stats.index")

    # Workload
    router.get("/api/workload", "WorkloadController.index", name="horizon.workload.index")

    # Master supervisors
    router.get("/api/masters", "MasterSupervisorController.index", name="horizon.masters.index")

    # Monitoring
    router.get("/api/monitoring", "MonitoringController.index", name="horizon.monitoring.index")
    router.post("/api/monitoring", "MonitoringController.store", name="horizon.monitoring.store")
    router.delete(
        "/api/monitoring/{tag}", "MonitoringController.destroy", name="horizon.monitoring.destroy"
    )

    # Job metrics
    router.get("/api/metrics/jobs", "JobMetricsController.index", name="horizon.jobs-metrics.index")
    router.get(
        "/api/metrics/jobs/{id}", "JobMetricsController.show", name="horizon.jobs-metrics.show"
    )

    # Queue metrics
    router.get(
        "/api/metrics/queues", "QueueMetricsController.index", name="horizon.queues-metrics.index"
    )
    router.get(
        "/api/metrics/queues/{id}",
        "QueueMetricsController.show",
        name="horizon.queues-metrics.show",
    )

    # Jobs
    router.get("/api/jobs/recent", "RecentJobsController.index", name="horizon.recent-jobs.index")
    router.get("/api/jobs/failed", "FailedJobsController.index", name="horizon.failed-jobs.index")
    router.get(
        "/api/jobs/failed/{id}", "FailedJobsController.show", name="horizon.failed-jobs.show"
    )
    router.post("/api/jobs/retry/{id}", "RetryController.store", name="horizon.retry-jobs.show")

    # Catch-all dashboard view
    router.get("/{view?}", "HomeController.index", name="horizon.index")


class RouteGroupRegistrar:
    def __init__(
        self,
        definitions: Callable[[Router], None] = define_routes,
        namespace: str = CONTROLLER_NAMESPACE,
    ) -> None:
        self._definitions = definitions
        self._namespace = namespace

    def spec_for(self, prefix: str | None, middleware: Sequence[str] | None) -> RouteGroupSpec:
        """Effective group options, falling back to the defaults when unset."""
        return RouteGroupSpec(
            prefix=prefix or DEFAULT_URI,
            namespace=self._namespace,
            middleware=tuple(DEFAULT_MIDDLEWARE if middleware is None else middleware),
        )

    def register_routes(
        self,
        router: Router | None,
        prefix: str | None,
        middleware: Sequence[str] | None,
    ) -> RouteGroupSpec | None:
        """Open the route group on *router*; a None router (HTTP disabled) is a no-op."""
        if router is None:
            logger.debug("HTTP is disabled; dashboard routes not registered")
            return None
        spec = self.spec_for(prefix, middleware)
        router.group(spec.options(), self._definitions)
        logger.debug("Registered dashboard routes under /%s", spec.prefix.strip("/"))
        return spec
