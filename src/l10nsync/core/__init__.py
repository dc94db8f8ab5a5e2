"""Core module exports."""

from l10nsync.core.diff import KeyDiff, diff_keys, missing_keys, stale_keys
from l10nsync.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    L10nSyncError,
    SchedulerError,
    SearchError,
    StorageError,
)
from l10nsync.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Diff
    "KeyDiff",
    "diff_keys",
    "missing_keys",
    "stale_keys",
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "L10nSyncError",
    "SchedulerError",
    "SearchError",
    "StorageError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
