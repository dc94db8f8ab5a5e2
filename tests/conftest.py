"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
import uuid
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local l10nsync package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of l10nsync modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("l10nsync"):
        del sys.modules[module_name]

from l10nsync.scheduling.engine import ApschedulerBackend  # noqa: E402
from l10nsync.storage.database import Database  # noqa: E402
from l10nsync.storage.models import (  # noqa: E402
    AssetTextUnit,
    AssetTextUnitToTmTextUnit,
    Branch,
    Repository,
    TmTextUnit,
)


@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Database, None, None]:
    """Create a temporary SQLite database with schema."""
    db = Database(f"sqlite:///{tmp_path / 'test.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def backend(temp_db: Database) -> Generator[ApschedulerBackend, None, None]:
    """Paused in-memory scheduler backend with a unique name."""
    sched = ApschedulerBackend(temp_db, name=f"test-{uuid.uuid4().hex[:8]}")
    yield sched
    sched.shutdown(wait=False)


@pytest.fixture
def repository(temp_db: Database) -> Repository:
    with temp_db.session() as session:
        repo = Repository(name="webapp")
        session.add(repo)
        session.commit()
        session.refresh(repo)
        return repo


def add_branch(
    db: Database, repository_id: int, name: str | None, *, deleted: bool = False
) -> Branch:
    """Insert a branch row."""
    with db.session() as session:
        branch = Branch(repository_id=repository_id, name=name, deleted=deleted)
        session.add(branch)
        session.commit()
        session.refresh(branch)
        return branch


def add_text_units(db: Database, branch_id: int, tm_text_unit_ids: list[int]) -> None:
    """Insert text units and map them to a branch. Existing text units are reused."""
    with db.session() as session:
        for tm_text_unit_id in tm_text_unit_ids:
            if session.get(TmTextUnit, tm_text_unit_id) is None:
                session.add(
                    TmTextUnit(id=tm_text_unit_id, name=f"key.{tm_text_unit_id}", content="text")
                )
            asset_text_unit = AssetTextUnit(branch_id=branch_id, name=f"key.{tm_text_unit_id}")
            session.add(asset_text_unit)
            session.flush()
            assert asset_text_unit.id is not None
            session.add(
                AssetTextUnitToTmTextUnit(
                    asset_text_unit_id=asset_text_unit.id, tm_text_unit_id=tm_text_unit_id
                )
            )
        session.commit()


@pytest.fixture
def branch_factory(temp_db: Database, repository: Repository):  # type: ignore[no-untyped-def]
    """Create branches of the test repository: branch_factory(name, text_unit_ids=...)."""
    assert repository.id is not None
    repository_id = repository.id

    def make(
        name: str | None, text_unit_ids: list[int] | None = None, *, deleted: bool = False
    ) -> Branch:
        branch = add_branch(temp_db, repository_id, name, deleted=deleted)
        if text_unit_ids:
            assert branch.id is not None
            add_text_units(temp_db, branch.id, text_unit_ids)
        return branch

    return make


@pytest.fixture
def map_text_units(temp_db: Database):  # type: ignore[no-untyped-def]
    """Map more text units to an existing branch: map_text_units(branch_id, ids)."""

    def make(branch_id: int, text_unit_ids: list[int]) -> None:
        add_text_units(temp_db, branch_id, text_unit_ids)

    return make
