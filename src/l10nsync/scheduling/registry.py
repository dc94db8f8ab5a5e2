"""Startup reconciliation of the scheduler registry.

The scheduler may hold jobs and triggers registered by an earlier version of
the process. Before anything fires, every live key of the default group that
is no longer declared is removed, triggers first so no trigger is left
pointing at a deleted job.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog

from l10nsync.config.constants import DEFAULT_GROUP
from l10nsync.core.diff import stale_keys
from l10nsync.core.errors import SchedulerError
from l10nsync.scheduling.backend import SchedulerBackend
from l10nsync.scheduling.definitions import JobDefinitions
from l10nsync.scheduling.keys import JobKey, TriggerKey

logger = structlog.get_logger()


@dataclass
class RegistryReconcileResult:
    """Keys removed by a registry reconciliation."""

    removed_triggers: set[TriggerKey] = field(default_factory=set)
    removed_jobs: set[JobKey] = field(default_factory=set)
    duration_ms: float = 0.0

    @property
    def changed(self) -> bool:
        return bool(self.removed_triggers or self.removed_jobs)


class RegistryReconciler:
    """Aligns the scheduler's live registry with the declared definitions."""

    def __init__(
        self,
        backend: SchedulerBackend,
        definitions: JobDefinitions,
        group: str = DEFAULT_GROUP,
    ) -> None:
        self.backend = backend
        self.definitions = definitions
        self.group = group

    def outdated_job_keys(self) -> set[JobKey]:
        live = self.backend.get_job_keys(self.group)
        return stale_keys(self.definitions.job_keys(self.group), live)

    def outdated_trigger_keys(self) -> set[TriggerKey]:
        live = self.backend.get_trigger_keys(self.group)
        return stale_keys(self.definitions.trigger_keys(self.group), live)

    def reconcile(self) -> RegistryReconcileResult:
        """Unschedule outdated triggers, then delete outdated jobs.

        Raises:
            SchedulerError: registry_cleanup_failed wrapping any backend error.
        """
        start = time.perf_counter()
        result = RegistryReconcileResult()
        try:
            result.removed_triggers = self.outdated_trigger_keys()
            result.removed_jobs = self.outdated_job_keys()
            self.backend.unschedule_jobs(sorted(result.removed_triggers))
            self.backend.delete_jobs(sorted(result.removed_jobs))
        except Exception as e:
            logger.error("registry_cleanup_failed", group=self.group, error=str(e))
            raise SchedulerError.registry_cleanup_failed(str(e)) from e

        result.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "registry_reconciled",
            group=self.group,
            removed_triggers=sorted(str(k) for k in result.removed_triggers),
            removed_jobs=sorted(str(k) for k in result.removed_jobs),
        )
        return result

    def register_declared(self) -> None:
        """Store every declared job detail and trigger, overwriting live ones."""
        for detail in self.definitions.job_details:
            self.backend.add_job(detail, replace=True)
        for trigger in self.definitions.triggers:
            self.backend.schedule_job(trigger, replace=True)
        logger.debug(
            "declared_jobs_registered",
            jobs=len(self.definitions.job_details),
            triggers=len(self.definitions.triggers),
        )
