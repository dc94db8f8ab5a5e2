"""Job scheduling: keys, definitions, backend, registry cleanup and dedup scheduling."""

from l10nsync.scheduling.backend import JobHandler, SchedulerBackend
from l10nsync.scheduling.dedup import DeduplicatingJobScheduler
from l10nsync.scheduling.definitions import JobDefinitions, JobDetail, TriggerDetail
from l10nsync.scheduling.engine import ApschedulerBackend, dispatch_job
from l10nsync.scheduling.keys import JobKey, TriggerKey
from l10nsync.scheduling.registry import RegistryReconciler, RegistryReconcileResult

__all__ = [
    "ApschedulerBackend",
    "DeduplicatingJobScheduler",
    "JobDefinitions",
    "JobDetail",
    "JobHandler",
    "JobKey",
    "RegistryReconcileResult",
    "RegistryReconciler",
    "SchedulerBackend",
    "TriggerDetail",
    "TriggerKey",
    "dispatch_job",
]
