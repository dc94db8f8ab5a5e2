"""Interface of the scheduling runtime.

The registry reconciler and the deduplicating scheduler only talk to the
runtime through this protocol. The backend's stores are the single arbiter of
job and trigger identity: add_job and schedule_job with replace=True are
"replace if exists, else insert" in one step.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Protocol

from l10nsync.scheduling.definitions import JobDetail, TriggerDetail
from l10nsync.scheduling.keys import JobKey, TriggerKey

JobHandler = Callable[[dict[str, Any]], None]
"""Body of a job type. Receives the job detail's data."""


class SchedulerBackend(Protocol):
    def get_job_keys(self, group: str) -> set[JobKey]: ...

    def get_trigger_keys(self, group: str) -> set[TriggerKey]: ...

    def add_job(self, detail: JobDetail, replace: bool = False) -> None: ...

    def schedule_job(self, trigger: TriggerDetail, replace: bool = False) -> None: ...

    def unschedule_jobs(self, keys: Iterable[TriggerKey]) -> int: ...

    def delete_jobs(self, keys: Iterable[JobKey]) -> int: ...

    def start_delayed(self, seconds: float) -> None: ...

    def shutdown(self, wait: bool = True) -> None: ...
