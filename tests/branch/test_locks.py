"""Tests for branch/locks.py."""

from __future__ import annotations

import threading
import time

from l10nsync.branch.locks import BranchLocks


class TestBranchLocks:
    def test_same_branch_gets_same_lock(self) -> None:
        locks = BranchLocks()
        assert locks.lock_for(1) is locks.lock_for(1)
        assert locks.lock_for(1) is not locks.lock_for(2)

    def test_hold_marks_branch_busy(self) -> None:
        locks = BranchLocks()
        with locks.hold(7):
            assert locks.lock_for(7).locked()
            assert not locks.lock_for(8).locked()
        assert not locks.lock_for(7).locked()

    def test_hold_releases_on_exception(self) -> None:
        locks = BranchLocks()
        try:
            with locks.hold(7):
                raise ValueError("boom")
        except ValueError:
            pass
        assert not locks.lock_for(7).locked()

    def test_same_branch_is_serialized(self) -> None:
        # Given two workers on the same branch
        locks = BranchLocks()
        active = 0
        max_active = 0
        counter_lock = threading.Lock()

        def work() -> None:
            nonlocal active, max_active
            with locks.hold(1):
                with counter_lock:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.02)
                with counter_lock:
                    active -= 1

        # When
        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Then
        assert max_active == 1

    def test_different_branches_do_not_block(self) -> None:
        locks = BranchLocks()
        entered = threading.Event()

        def other() -> None:
            with locks.hold(2):
                entered.set()

        with locks.hold(1):
            thread = threading.Thread(target=other)
            thread.start()
            assert entered.wait(timeout=2)
            thread.join()
