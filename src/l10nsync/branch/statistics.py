"""Branch statistics reconciliation.

The BranchStatisticReconciler recomputes the per text unit counts of a branch
against the search service and brings the derived rows in line:

- rows of text units still returned by search are created or updated
- rows of text units no longer returned are bulk deleted
- the branch statistic carries the sums over the remaining rows

Search and count queries run before the write transaction is opened, so the
SQLite write lock is never held across HTTP calls. All writes of one branch
happen in a single immediate_transaction: a failure leaves the previous
statistics untouched and the next batch run recomputes them.

INVARIANT: Callers go through reconcile(), which serializes per branch.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from l10nsync.branch.locks import BranchLocks
from l10nsync.core.diff import stale_keys
from l10nsync.core.errors import InternalError, StorageError
from l10nsync.search.models import StatusFilter, TextUnitDTO, TextUnitSearcherParameters
from l10nsync.storage.models import Branch, BranchStatistic, BranchTextUnitStatistic
from l10nsync.storage.repositories import (
    BranchStatisticStore,
    BranchStore,
    BranchTextUnitStatisticStore,
    TextUnitMappingStore,
    TmTextUnitStore,
)

if TYPE_CHECKING:
    from l10nsync.search.client import TextUnitSearcher
    from l10nsync.storage.database import Database

logger = structlog.get_logger()


@dataclass
class TextUnitCounts:
    """Counts of one text unit as reported by search."""

    total_count: int
    for_translation_count: int


@dataclass
class BranchStatisticResult:
    """Snapshot of a branch statistic after reconciliation."""

    branch_id: int
    branch_statistic_id: int
    total_count: int = 0
    for_translation_count: int = 0
    text_units: int = 0
    added: int = 0
    updated: int = 0
    removed: int = 0
    duration_ms: float = 0.0

    @property
    def changed(self) -> int:
        """Number of text unit rows written or removed."""
        return self.added + self.updated + self.removed


class BranchStatisticReconciler:
    """Keeps the statistic rows of a branch in sync with search results."""

    def __init__(
        self,
        db: Database,
        searcher: TextUnitSearcher,
        locks: BranchLocks | None = None,
    ) -> None:
        self.db = db
        self.searcher = searcher
        self.locks = locks if locks is not None else BranchLocks()

    def reconcile(self, branch: Branch) -> BranchStatisticResult:
        """Recompute and save the statistics of a branch.

        Raises:
            SearchError: search service failed; nothing was written.
            StorageError: a returned text unit is unknown; nothing was written.
        """
        if branch.id is None:
            raise InternalError.unexpected("branch is not persisted", name=branch.name)
        with self.locks.hold(branch.id):
            return self._reconcile(branch.id, branch.repository_id)

    def reconcile_by_id(self, branch_id: int) -> BranchStatisticResult:
        with self.db.session() as session:
            branch = BranchStore(session).get(branch_id)
        if branch is None:
            raise StorageError.branch_not_found(branch_id)
        return self.reconcile(branch)

    def get_text_units_for_branch(self, branch_id: int, repository_id: int) -> list[TextUnitDTO]:
        """Text units of a branch in the root locale, de-duplicated by id.

        A branch without mapped text units has none, search is not queried.
        """
        with self.db.session() as session:
            mapped_ids = TextUnitMappingStore(session).find_text_unit_ids_by_branch(branch_id)

        if not mapped_ids:
            logger.debug("branch_has_no_text_units", branch_id=branch_id)
            return []

        params = TextUnitSearcherParameters(
            repository_ids=[repository_id],
            tm_text_unit_ids=mapped_ids,
            for_root_locale=True,
        )
        text_units = self.searcher.search(params)

        # Paged results may repeat a text unit
        seen: set[int] = set()
        unique: list[TextUnitDTO] = []
        for text_unit in text_units:
            if text_unit.tm_text_unit_id in seen:
                continue
            seen.add(text_unit.tm_text_unit_id)
            unique.append(text_unit)

        if len(unique) != len(text_units):
            logger.debug(
                "duplicate_text_units_dropped",
                branch_id=branch_id,
                dropped=len(text_units) - len(unique),
            )
        return unique

    def get_for_translation_count(self, tm_text_unit_id: int) -> int:
        params = TextUnitSearcherParameters(
            tm_text_unit_ids=[tm_text_unit_id],
            status_filter=StatusFilter.FOR_TRANSLATION,
            to_be_fully_translated=True,
        )
        return self.searcher.count_text_unit_and_word_count(params).text_unit_count

    def get_total_count(self, tm_text_unit_id: int) -> int:
        params = TextUnitSearcherParameters(tm_text_unit_ids=[tm_text_unit_id])
        return self.searcher.count_text_unit_and_word_count(params).text_unit_count

    def _compute_counts(self, branch_id: int, repository_id: int) -> dict[int, TextUnitCounts]:
        counts: dict[int, TextUnitCounts] = {}
        for text_unit in self.get_text_units_for_branch(branch_id, repository_id):
            tm_text_unit_id = text_unit.tm_text_unit_id
            counts[tm_text_unit_id] = TextUnitCounts(
                total_count=self.get_total_count(tm_text_unit_id),
                for_translation_count=self.get_for_translation_count(tm_text_unit_id),
            )
            logger.debug(
                "text_unit_counted",
                branch_id=branch_id,
                tm_text_unit_id=tm_text_unit_id,
                total=counts[tm_text_unit_id].total_count,
                for_translation=counts[tm_text_unit_id].for_translation_count,
            )
        return counts

    def _reconcile(self, branch_id: int, repository_id: int) -> BranchStatisticResult:
        start = time.perf_counter()
        logger.debug("branch_statistics_started", branch_id=branch_id)

        counts = self._compute_counts(branch_id, repository_id)

        with self.db.immediate_transaction() as session:
            statistics = BranchStatisticStore(session)
            rows = BranchTextUnitStatisticStore(session)
            tm_text_units = TmTextUnitStore(session)

            statistic = statistics.find_by_branch(branch_id)
            if statistic is None:
                statistic = statistics.save(BranchStatistic(branch_id=branch_id))
                logger.debug("branch_statistic_created", branch_id=branch_id)
            assert statistic.id is not None

            tracked = rows.find_text_unit_ids(statistic.id)
            result = BranchStatisticResult(
                branch_id=branch_id,
                branch_statistic_id=statistic.id,
                text_units=len(counts),
            )

            for tm_text_unit_id, unit_counts in counts.items():
                row = rows.get_by_statistic_and_text_unit(statistic.id, tm_text_unit_id)
                if row is None:
                    if tm_text_units.get(tm_text_unit_id) is None:
                        raise StorageError.text_unit_not_found(tm_text_unit_id)
                    row = BranchTextUnitStatistic(
                        branch_statistic_id=statistic.id,
                        tm_text_unit_id=tm_text_unit_id,
                    )
                    result.added += 1
                elif (row.total_count, row.for_translation_count) != (
                    unit_counts.total_count,
                    unit_counts.for_translation_count,
                ):
                    result.updated += 1

                row.total_count = unit_counts.total_count
                row.for_translation_count = unit_counts.for_translation_count
                rows.save(row)

            statistic.total_count = sum(c.total_count for c in counts.values())
            statistic.for_translation_count = sum(c.for_translation_count for c in counts.values())
            statistics.save(statistic)

            stale = stale_keys(counts.keys(), tracked)
            result.removed = rows.delete_by_branch_and_text_unit_ids_in(branch_id, stale)

            result.total_count = statistic.total_count
            result.for_translation_count = statistic.for_translation_count

        result.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "branch_statistics_reconciled",
            branch_id=branch_id,
            text_units=result.text_units,
            added=result.added,
            updated=result.updated,
            removed=result.removed,
            total=result.total_count,
            for_translation=result.for_translation_count,
            duration_ms=round(result.duration_ms, 1),
        )
        return result
