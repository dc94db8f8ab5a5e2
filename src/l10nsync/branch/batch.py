"""Batch reconciliation of every processable branch of a repository."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from l10nsync.branch.notification import schedule_branch_notification
from l10nsync.config.models import BranchStatisticsConfig
from l10nsync.core.logging import clear_run_id, get_run_id, set_run_id
from l10nsync.storage.repositories import BranchStore

if TYPE_CHECKING:
    from l10nsync.branch.statistics import BranchStatisticReconciler, BranchStatisticResult
    from l10nsync.scheduling.dedup import DeduplicatingJobScheduler
    from l10nsync.storage.database import Database
    from l10nsync.storage.models import Branch

logger = structlog.get_logger()


@dataclass
class BatchResult:
    """Summary of one reconcile_all run."""

    repository_id: int
    run_id: str | None = None
    reconciled: list[BranchStatisticResult] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
    notification_failed: dict[int, str] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed and not self.notification_failed

    @property
    def branches(self) -> int:
        return len(self.reconciled) + len(self.failed)


@dataclass
class BranchBatchDriver:
    """Reconciles the branches of a repository and schedules their notifications.

    Design:
    - Branches are independent, up to max_workers run in parallel
    - The reconciler's BranchLocks serialize work on the same branch
    - A failed branch is logged and skipped, the next run retries it
    - A reconciled branch whose notification cannot be scheduled is logged
      and recorded, the remaining branches still run
      (continue_on_error=False re-raises the first failure instead)
    - Without a job_scheduler no notifications are scheduled
    """

    db: Database
    reconciler: BranchStatisticReconciler
    job_scheduler: DeduplicatingJobScheduler | None = None
    config: BranchStatisticsConfig = field(default_factory=BranchStatisticsConfig)

    def get_branches_to_process(self, repository_id: int) -> list[Branch]:
        with self.db.session() as session:
            return BranchStore(session).find_processable(
                repository_id, self.config.primary_branch_name
            )

    def reconcile_all(self, repository_id: int) -> BatchResult:
        """Reconcile all processable branches of a repository."""
        owns_run_id = get_run_id() is None
        run_id = set_run_id() if owns_run_id else get_run_id()
        start = time.perf_counter()
        result = BatchResult(repository_id=repository_id, run_id=run_id)

        try:
            branches = self.get_branches_to_process(repository_id)
            logger.info(
                "branch_batch_started",
                repository_id=repository_id,
                branches=len(branches),
                max_workers=self.config.max_workers,
            )

            if self.config.max_workers > 1 and len(branches) > 1:
                self._run_parallel(branches, result)
            else:
                for branch in branches:
                    self._run_one(branch, result)
        finally:
            result.duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "branch_batch_completed",
                repository_id=repository_id,
                reconciled=len(result.reconciled),
                failed=len(result.failed),
                notification_failed=len(result.notification_failed),
                duration_ms=round(result.duration_ms, 1),
            )
            if owns_run_id:
                clear_run_id()

        return result

    def _run_parallel(self, branches: list[Branch], result: BatchResult) -> None:
        run_id = get_run_id()

        def task(branch: Branch) -> None:
            set_run_id(run_id)
            try:
                self._run_one(branch, result)
            finally:
                clear_run_id()

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="l10nsync-branch",
        ) as executor:
            futures = [executor.submit(task, branch) for branch in branches]
        # Executor exit waits for in-flight work; surface the first failure
        for future in futures:
            future.result()

    def _run_one(self, branch: Branch, result: BatchResult) -> None:
        assert branch.id is not None
        try:
            statistic = self.reconciler.reconcile(branch)
        except Exception as e:
            logger.exception(
                "branch_reconcile_failed",
                branch_id=branch.id,
                branch_name=branch.name,
            )
            result.failed[branch.id] = str(e)
            if not self.config.continue_on_error:
                raise
            return

        result.reconciled.append(statistic)
        if self.job_scheduler is None:
            return
        try:
            schedule_branch_notification(self.job_scheduler, branch)
        except Exception as e:
            logger.exception(
                "branch_notification_schedule_failed",
                branch_id=branch.id,
                branch_name=branch.name,
            )
            result.notification_failed[branch.id] = str(e)
            if not self.config.continue_on_error:
                raise
