"""Job and trigger identities.

A key is a (name, group) pair rendered as "<group>.<name>". Group names never
contain a dot; job names may.
"""

from __future__ import annotations

from dataclasses import dataclass

from l10nsync.config.constants import DEFAULT_GROUP


def _split(value: str) -> tuple[str, str]:
    group, sep, name = value.partition(".")
    if not sep or not group or not name:
        raise ValueError(f"Not a '<group>.<name>' key: {value!r}")
    return group, name


@dataclass(frozen=True, order=True)
class JobKey:
    """Identity of a schedulable unit of work."""

    name: str
    group: str = DEFAULT_GROUP

    def __str__(self) -> str:
        return f"{self.group}.{self.name}"

    @classmethod
    def parse(cls, value: str) -> JobKey:
        group, name = _split(value)
        return cls(name=name, group=group)


@dataclass(frozen=True, order=True)
class TriggerKey:
    """Identity of a firing rule."""

    name: str
    group: str = DEFAULT_GROUP

    def __str__(self) -> str:
        return f"{self.group}.{self.name}"

    @classmethod
    def parse(cls, value: str) -> TriggerKey:
        group, name = _split(value)
        return cls(name=name, group=group)
