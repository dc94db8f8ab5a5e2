"""Declared jobs and job handlers of the service."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from l10nsync.branch.notification import BranchNotificationJobInput
from l10nsync.config.constants import (
    BRANCH_NOTIFICATION_JOB_TYPE,
    BRANCH_STATISTICS_JOB_TYPE,
    DEFAULT_GROUP,
)
from l10nsync.scheduling.definitions import JobDefinitions, JobDetail, TriggerDetail
from l10nsync.scheduling.keys import JobKey, TriggerKey

if TYPE_CHECKING:
    from l10nsync.branch.batch import BranchBatchDriver
    from l10nsync.config.models import L10nSyncConfig
    from l10nsync.scheduling.backend import JobHandler

logger = structlog.get_logger()

NotificationHandler = Callable[[BranchNotificationJobInput], None]


def branch_statistics_job_key(repository_id: int) -> JobKey:
    return JobKey(name=f"{BRANCH_STATISTICS_JOB_TYPE}-{repository_id}", group=DEFAULT_GROUP)


def branch_statistics_trigger_key(repository_id: int) -> TriggerKey:
    return TriggerKey(
        name=f"{BRANCH_STATISTICS_JOB_TYPE}-{repository_id}-trigger", group=DEFAULT_GROUP
    )


def build_job_definitions(config: L10nSyncConfig) -> JobDefinitions:
    """One durable branch statistics job per configured repository."""
    definitions = JobDefinitions()
    interval = config.branch_statistics.interval_sec
    for repository_id in sorted(set(config.branch_statistics.repository_ids)):
        job_key = branch_statistics_job_key(repository_id)
        definitions.job_details.append(
            JobDetail(
                key=job_key,
                job_type=BRANCH_STATISTICS_JOB_TYPE,
                data={"repository_id": repository_id},
            )
        )
        definitions.triggers.append(
            TriggerDetail(
                key=branch_statistics_trigger_key(repository_id),
                job_key=job_key,
                interval_seconds=interval,
            )
        )
    return definitions


def log_branch_notification(job_input: BranchNotificationJobInput) -> None:
    """Default notification body. Delivery is provided by the embedding process."""
    logger.info("branch_notification_requested", branch_id=job_input.branch_id)


def build_job_handlers(
    driver: BranchBatchDriver,
    notification_handler: NotificationHandler | None = None,
) -> dict[str, JobHandler]:
    notify = notification_handler or log_branch_notification

    def run_branch_statistics(data: dict[str, Any]) -> None:
        driver.reconcile_all(int(data["repository_id"]))

    def run_branch_notification(data: dict[str, Any]) -> None:
        notify(BranchNotificationJobInput.model_validate(data))

    return {
        BRANCH_STATISTICS_JOB_TYPE: run_branch_statistics,
        BRANCH_NOTIFICATION_JOB_TYPE: run_branch_notification,
    }
