"""SQLModel definitions for branches, text units and derived statistics.

Single source of truth for all table schemas.

Ownership:
- repository, branch, tm_text_unit, asset_text_unit and
  asset_text_unit_to_tm_text_unit are written by the extraction pipeline;
  this package only reads them.
- branch_statistic and branch_text_unit_statistic are derived data, fully
  owned by the branch statistic reconciler.
- scheduler_job_detail holds job details of the scheduler adapter.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# SOURCE ENTITIES (read-only here)
# ============================================================================


class Repository(SQLModel, table=True):
    """A repository of translatable assets."""

    __tablename__ = "repository"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)


class Branch(SQLModel, table=True):
    """A unit of translation work within a repository.

    A null name means assets were extracted without branch information.
    """

    __tablename__ = "branch"

    id: int | None = Field(default=None, primary_key=True)
    repository_id: int = Field(foreign_key="repository.id", index=True)
    name: str | None = Field(default=None, index=True)
    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=_utcnow)


class TmTextUnit(SQLModel, table=True):
    """A translatable string of the translation memory."""

    __tablename__ = "tm_text_unit"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    content: str = ""
    comment: str | None = None


class AssetTextUnit(SQLModel, table=True):
    """A text unit as extracted from an asset of a given branch."""

    __tablename__ = "asset_text_unit"

    id: int | None = Field(default=None, primary_key=True)
    branch_id: int | None = Field(default=None, foreign_key="branch.id", index=True)
    name: str


class AssetTextUnitToTmTextUnit(SQLModel, table=True):
    """Mapping of extracted text units to translation memory text units."""

    __tablename__ = "asset_text_unit_to_tm_text_unit"

    id: int | None = Field(default=None, primary_key=True)
    asset_text_unit_id: int = Field(foreign_key="asset_text_unit.id", index=True)
    tm_text_unit_id: int = Field(foreign_key="tm_text_unit.id", index=True)


# ============================================================================
# DERIVED STATISTICS
# ============================================================================


class BranchStatistic(SQLModel, table=True):
    """Aggregated translation counts of a branch (one row per branch)."""

    __tablename__ = "branch_statistic"

    id: int | None = Field(default=None, primary_key=True)
    branch_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("branch.id", ondelete="CASCADE"), unique=True, nullable=False
        )
    )
    total_count: int = 0
    for_translation_count: int = 0


class BranchTextUnitStatistic(SQLModel, table=True):
    """Translation counts of one text unit within a branch statistic."""

    __tablename__ = "branch_text_unit_statistic"
    __table_args__ = (
        UniqueConstraint("branch_statistic_id", "tm_text_unit_id", name="uq_branch_text_unit"),
    )

    id: int | None = Field(default=None, primary_key=True)
    branch_statistic_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("branch_statistic.id", ondelete="CASCADE"),
            index=True,
            nullable=False,
        )
    )
    tm_text_unit_id: int = Field(foreign_key="tm_text_unit.id", index=True)
    total_count: int = 0
    for_translation_count: int = 0


# ============================================================================
# SCHEDULER
# ============================================================================


class SchedulerJobDetail(SQLModel, table=True):
    """Job detail of the scheduler adapter, addressed by (job_group, job_name).

    revision is bumped on every overwrite so a finished execution only removes
    a non-durable detail that was not replaced while it ran.
    """

    __tablename__ = "scheduler_job_detail"
    __table_args__ = (UniqueConstraint("job_group", "job_name", name="uq_job_key"),)

    id: int | None = Field(default=None, primary_key=True)
    job_group: str = Field(index=True)
    job_name: str
    job_type: str
    data_json: str = "{}"
    durable: bool = True
    revision: int = 1
