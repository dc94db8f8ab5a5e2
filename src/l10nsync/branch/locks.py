"""Per-branch mutual exclusion.

Two reconciliations of the same branch must never interleave: the
load-or-create of the branch statistic would race and the second insert would
hit the unique constraint on branch_statistic.branch_id. Different branches
share nothing and run freely in parallel.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager


class BranchLocks:
    """Hands out one lock per branch id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def lock_for(self, branch_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(branch_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[branch_id] = lock
            return lock

    @contextmanager
    def hold(self, branch_id: int) -> Generator[None, None, None]:
        """Block until the branch is free, then hold it for the block."""
        lock = self.lock_for(branch_id)
        with lock:
            yield
