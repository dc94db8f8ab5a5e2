"""Storage layer: database, table models and entity stores."""

from l10nsync.storage.database import Database
from l10nsync.storage.models import (
    AssetTextUnit,
    AssetTextUnitToTmTextUnit,
    Branch,
    BranchStatistic,
    BranchTextUnitStatistic,
    Repository,
    SchedulerJobDetail,
    TmTextUnit,
)
from l10nsync.storage.repositories import (
    BranchStatisticStore,
    BranchStore,
    BranchTextUnitStatisticStore,
    TextUnitMappingStore,
    TmTextUnitStore,
)

__all__ = [
    "Database",
    "AssetTextUnit",
    "AssetTextUnitToTmTextUnit",
    "Branch",
    "BranchStatistic",
    "BranchTextUnitStatistic",
    "Repository",
    "SchedulerJobDetail",
    "TmTextUnit",
    "BranchStatisticStore",
    "BranchStore",
    "BranchTextUnitStatisticStore",
    "TextUnitMappingStore",
    "TmTextUnitStore",
]
