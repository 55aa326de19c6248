"""Listeners attached by the event map.

Each listener is resolved by the host container (constructor dependencies
autowired) and receives the event payload in ``handle``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from horizon.config.models import HorizonConfig
from horizon.contracts import (
    ConfigStore,
    JobRepository,
    MasterSupervisorRepository,
    MetricsRepository,
    SupervisorRepository,
)
from horizon.stopwatch import Stopwatch

logger = logging.getLogger(__name__)

# Masters and supervisors refresh their record every loop; anything quieter
# than this is considered gone.
SUPERVISOR_TTL_SECONDS = 60


class StoreJob:
    def __init__(self, jobs: JobRepository) -> None:
        self._jobs = jobs

    def handle(self, event: Mapping[str, Any]) -> None:
        self._jobs.store(
            event["id"],
            connection=event["connection"],
            queue=event["queue"],
            name=event["name"],
            payload=event.get("payload") or {},
        )


class MarkJobAsReserved:
    def __init__(self, jobs: JobRepository) -> None:
        self._jobs = jobs

    def handle(self, event: Mapping[str, Any]) -> None:
        self._jobs.reserved(event["id"])


class StartTimingJob:
    def __init__(self, stopwatch: Stopwatch) -> None:
        self._stopwatch = stopwatch

    def handle(self, event: Mapping[str, Any]) -> None:
        self._stopwatch.start(event["id"])


class MarkJobAsReleased:
    def __init__(self, jobs: JobRepository) -> None:
        self._jobs = jobs

    def handle(self, event: Mapping[str, Any]) -> None:
        self._jobs.released(event["id"])


class MarkJobAsComplete:
    """Record completion with the runtime measured since reservation.

    Must run before :class:`UpdateJobMetrics`, which clears the timer.
    """

    def __init__(self, jobs: JobRepository, stopwatch: Stopwatch) -> None:
        self._jobs = jobs
        self._stopwatch = stopwatch

    def handle(self, event: Mapping[str, Any]) -> None:
        self._jobs.completed(event["id"], runtime_ms=self._stopwatch.check(event["id"]))


class UpdateJobMetrics:
    def __init__(self, metrics: MetricsRepository, stopwatch: Stopwatch) -> None:
        self._metrics = metrics
        self._stopwatch = stopwatch

    def handle(self, event: Mapping[str, Any]) -> None:
        runtime_ms = self._stopwatch.check(event["id"])
        self._metrics.increment(event["queue"], runtime_ms)
        self._stopwatch.forget(event["id"])


class MarkJobAsFailed:
    def __init__(self, jobs: JobRepository, stopwatch: Stopwatch) -> None:
        self._jobs = jobs
        self._stopwatch = stopwatch

    def handle(self, event: Mapping[str, Any]) -> None:
        self._jobs.failed(event["id"], event.get("exception") or "")
        self._stopwatch.forget(event["id"])


class TrimRecentJobs:
    def __init__(self, jobs: JobRepository, config: ConfigStore) -> None:
        self._jobs = jobs
        self._config = config

    def handle(self, event: Mapping[str, Any]) -> None:
        minutes = HorizonConfig.from_store(self._config).trim.recent
        trimmed = self._jobs.trim_recent(minutes * 60)
        if trimmed:
            logger.debug("Trimmed %d recent jobs", trimmed)


class TrimFailedJobs:
    def __init__(self, jobs: JobRepository, config: ConfigStore) -> None:
        self._jobs = jobs
        self._config = config

    def handle(self, event: Mapping[str, Any]) -> None:
        minutes = HorizonConfig.from_store(self._config).trim.failed
        trimmed = self._jobs.trim_failed(minutes * 60)
        if trimmed:
            logger.debug("Trimmed %d failed jobs", trimmed)


class ExpireSupervisors:
    def __init__(
        self,
        masters: MasterSupervisorRepository,
        supervisors: SupervisorRepository,
    ) -> None:
        self._masters = masters
        self._supervisors = supervisors

    def handle(self, event: Mapping[str, Any]) -> None:
        for name in self._masters.stale(SUPERVISOR_TTL_SECONDS):
            self._masters.forget(name)
        for name in self._supervisors.stale(SUPERVISOR_TTL_SECONDS):
            self._supervisors.forget(name)


class LogLongWaitDetected:
    def handle(self, event: Mapping[str, Any]) -> None:
        logger.warning(
            "Queue %s on connection %s has waited %s seconds",
            event.get("queue"),
            event.get("connection"),
            event.get("seconds"),
        )
