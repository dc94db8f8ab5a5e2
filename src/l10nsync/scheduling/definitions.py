"""Job and trigger definitions handed to the scheduler backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from l10nsync.scheduling.keys import JobKey, TriggerKey


@dataclass
class JobDetail:
    """What to run: a job type plus its JSON-compatible input.

    Non-durable details are removed once their execution finishes.
    """

    key: JobKey
    job_type: str
    data: dict[str, Any] = field(default_factory=dict)
    durable: bool = True


@dataclass
class TriggerDetail:
    """When to run a job. No rule at all means fire once, as soon as possible."""

    key: TriggerKey
    job_key: JobKey
    cron: str | None = None
    interval_seconds: float | None = None
    run_date: datetime | None = None

    def __post_init__(self) -> None:
        rules = [r for r in (self.cron, self.interval_seconds, self.run_date) if r is not None]
        if len(rules) > 1:
            raise ValueError(f"Trigger {self.key} must have at most one firing rule")
        if self.interval_seconds is not None and self.interval_seconds <= 0:
            raise ValueError(f"Trigger {self.key} interval must be > 0")

    @property
    def fires_once(self) -> bool:
        return self.cron is None and self.interval_seconds is None


@dataclass
class JobDefinitions:
    """The statically declared jobs and triggers of a process."""

    job_details: list[JobDetail] = field(default_factory=list)
    triggers: list[TriggerDetail] = field(default_factory=list)

    def job_keys(self, group: str | None = None) -> set[JobKey]:
        return {d.key for d in self.job_details if group is None or d.key.group == group}

    def trigger_keys(self, group: str | None = None) -> set[TriggerKey]:
        return {t.key for t in self.triggers if group is None or t.key.group == group}
