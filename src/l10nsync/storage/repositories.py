"""Entity stores over an open ORM session.

Stores never commit: the caller owns the transaction (see
Database.immediate_transaction), so one branch reconciliation is applied
atomically or not at all.
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import delete
from sqlmodel import Session, col, select

from l10nsync.storage.models import (
    AssetTextUnit,
    AssetTextUnitToTmTextUnit,
    Branch,
    BranchStatistic,
    BranchTextUnitStatistic,
    TmTextUnit,
)


class BranchStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, branch_id: int) -> Branch | None:
        return self.session.get(Branch, branch_id)

    def find_processable(self, repository_id: int, primary_branch_name: str) -> list[Branch]:
        """Branches of a repository that get statistics.

        Excludes deleted branches, the primary branch and branches without a
        name (assets extracted without branch information).
        """
        stmt = (
            select(Branch)
            .where(Branch.repository_id == repository_id)
            .where(Branch.deleted == False)  # noqa: E712
            .where(col(Branch.name).is_not(None))
            .where(Branch.name != primary_branch_name)
            .order_by(col(Branch.id))
        )
        return list(self.session.exec(stmt).all())


class BranchStatisticStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_branch(self, branch_id: int) -> BranchStatistic | None:
        stmt = select(BranchStatistic).where(BranchStatistic.branch_id == branch_id)
        return self.session.exec(stmt).first()

    def save(self, statistic: BranchStatistic) -> BranchStatistic:
        """Insert or update. Flushes so a new row gets its id."""
        self.session.add(statistic)
        self.session.flush()
        return statistic


class BranchTextUnitStatisticStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_statistic_and_text_unit(
        self, branch_statistic_id: int, tm_text_unit_id: int
    ) -> BranchTextUnitStatistic | None:
        stmt = (
            select(BranchTextUnitStatistic)
            .where(BranchTextUnitStatistic.branch_statistic_id == branch_statistic_id)
            .where(BranchTextUnitStatistic.tm_text_unit_id == tm_text_unit_id)
        )
        return self.session.exec(stmt).first()

    def find_text_unit_ids(self, branch_statistic_id: int) -> set[int]:
        """Text unit ids currently tracked by a branch statistic."""
        stmt = select(BranchTextUnitStatistic.tm_text_unit_id).where(
            BranchTextUnitStatistic.branch_statistic_id == branch_statistic_id
        )
        return set(self.session.exec(stmt).all())

    def save(self, row: BranchTextUnitStatistic) -> BranchTextUnitStatistic:
        self.session.add(row)
        self.session.flush()
        return row

    def delete_by_branch_and_text_unit_ids_in(
        self, branch_id: int, tm_text_unit_ids: Collection[int]
    ) -> int:
        """Bulk delete the rows of a branch for the given text unit ids.

        An empty id collection is a no-op returning 0.
        """
        if not tm_text_unit_ids:
            return 0

        statistic_ids = select(BranchStatistic.id).where(BranchStatistic.branch_id == branch_id)
        stmt = (
            delete(BranchTextUnitStatistic)
            .where(col(BranchTextUnitStatistic.branch_statistic_id).in_(statistic_ids))
            .where(col(BranchTextUnitStatistic.tm_text_unit_id).in_(list(tm_text_unit_ids)))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount)


class TmTextUnitStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, tm_text_unit_id: int) -> TmTextUnit | None:
        return self.session.get(TmTextUnit, tm_text_unit_id)


class TextUnitMappingStore:
    """Branch to translation memory text unit mapping."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_text_unit_ids_by_branch(self, branch_id: int) -> list[int]:
        stmt = (
            select(AssetTextUnitToTmTextUnit.tm_text_unit_id)
            .join(
                AssetTextUnit,
                col(AssetTextUnit.id) == col(AssetTextUnitToTmTextUnit.asset_text_unit_id),
            )
            .where(AssetTextUnit.branch_id == branch_id)
            .distinct()
            .order_by(col(AssetTextUnitToTmTextUnit.tm_text_unit_id))
        )
        return list(self.session.exec(stmt).all())
