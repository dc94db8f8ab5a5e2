"""Scheduling of branch notification jobs.

The notification job body (rendering and delivery) is supplied by the
embedding process. This module only builds its input and schedules it with
one pending job per branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from l10nsync.config.constants import BRANCH_NOTIFICATION_JOB_TYPE

if TYPE_CHECKING:
    from l10nsync.scheduling.dedup import DeduplicatingJobScheduler
    from l10nsync.scheduling.keys import JobKey
    from l10nsync.storage.models import Branch


class BranchNotificationJobInput(BaseModel):
    """Input of a branch notification job."""

    branch_id: int


def schedule_branch_notification(
    job_scheduler: DeduplicatingJobScheduler, branch: Branch
) -> JobKey:
    assert branch.id is not None
    return job_scheduler.schedule(
        BRANCH_NOTIFICATION_JOB_TYPE,
        str(branch.id),
        BranchNotificationJobInput(branch_id=branch.id),
    )
