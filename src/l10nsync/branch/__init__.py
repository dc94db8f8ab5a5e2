"""Branch statistics: per-branch reconciliation, batch driver and notifications."""

from l10nsync.branch.batch import BatchResult, BranchBatchDriver
from l10nsync.branch.locks import BranchLocks
from l10nsync.branch.notification import BranchNotificationJobInput, schedule_branch_notification
from l10nsync.branch.statistics import (
    BranchStatisticReconciler,
    BranchStatisticResult,
    TextUnitCounts,
)

__all__ = [
    "BatchResult",
    "BranchBatchDriver",
    "BranchLocks",
    "BranchNotificationJobInput",
    "BranchStatisticReconciler",
    "BranchStatisticResult",
    "TextUnitCounts",
    "schedule_branch_notification",
]
