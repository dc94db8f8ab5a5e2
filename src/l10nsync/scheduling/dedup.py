"""Scheduling of one-off jobs with at most one pending instance per key."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from l10nsync.config.constants import DYNAMIC_GROUP
from l10nsync.scheduling.backend import SchedulerBackend
from l10nsync.scheduling.definitions import JobDetail, TriggerDetail
from l10nsync.scheduling.keys import JobKey, TriggerKey

logger = structlog.get_logger()


class DeduplicatingJobScheduler:
    """Schedules a job identified by (job type, unique id).

    Scheduling the same key again before the job ran overwrites the pending
    job's input instead of queueing a second job.
    """

    def __init__(self, backend: SchedulerBackend, group: str = DYNAMIC_GROUP) -> None:
        self.backend = backend
        self.group = group

    @staticmethod
    def key_name(job_type: str, unique_id: str) -> str:
        return f"{job_type}_{unique_id}"

    def job_key(self, job_type: str, unique_id: str) -> JobKey:
        return JobKey(name=self.key_name(job_type, unique_id), group=self.group)

    def schedule(
        self,
        job_type: str,
        unique_id: str,
        input: BaseModel | Mapping[str, Any] | None = None,  # noqa: A002
    ) -> JobKey:
        """Schedule a run-once job, replacing any pending job with the same key."""
        if isinstance(input, BaseModel):
            data = input.model_dump(mode="json")
        else:
            data = dict(input or {})

        job_key = self.job_key(job_type, unique_id)
        trigger_key = TriggerKey(name=job_key.name, group=job_key.group)

        self.backend.add_job(
            JobDetail(key=job_key, job_type=job_type, data=data, durable=False),
            replace=True,
        )
        self.backend.schedule_job(TriggerDetail(key=trigger_key, job_key=job_key), replace=True)

        logger.debug("job_scheduled", job_key=str(job_key), job_type=job_type)
        return job_key
