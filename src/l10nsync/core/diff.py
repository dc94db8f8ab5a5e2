"""Set difference between a desired key set and a currently stored key set.

Shared by branch statistic reconciliation (desired = text unit ids returned by
search, current = ids tracked by the branch statistic) and scheduler registry
reconciliation (desired = declared job/trigger keys, current = live keys).
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class KeyDiff(Generic[K]):
    """Outcome of comparing desired keys against current keys."""

    stale: frozenset[K]
    missing: frozenset[K]
    kept: frozenset[K]

    @property
    def is_empty(self) -> bool:
        """True when current already matches desired."""
        return not self.stale and not self.missing


def stale_keys(desired: Iterable[K], current: Iterable[K]) -> set[K]:
    """Keys present in current but not in desired."""
    return set(current) - set(desired)


def missing_keys(desired: Iterable[K], current: Iterable[K]) -> set[K]:
    """Keys present in desired but not in current."""
    return set(desired) - set(current)


def diff_keys(desired: Iterable[K], current: Iterable[K]) -> KeyDiff[K]:
    """Compute stale, missing and kept keys in one pass over both inputs."""
    desired_set = frozenset(desired)
    current_set = frozenset(current)
    return KeyDiff(
        stale=current_set - desired_set,
        missing=desired_set - current_set,
        kept=current_set & desired_set,
    )
