"""Config module exports."""

from l10nsync.config.loader import L10nSyncSettings, load_config
from l10nsync.config.models import (
    BranchStatisticsConfig,
    DatabaseConfig,
    L10nSyncConfig,
    LoggingConfig,
    SchedulerConfig,
    SearchConfig,
)

__all__ = [
    "load_config",
    "L10nSyncConfig",
    "L10nSyncSettings",
    "BranchStatisticsConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "SearchConfig",
]
