"""Tests for scheduling keys and definitions."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from l10nsync.config.constants import DEFAULT_GROUP, DYNAMIC_GROUP
from l10nsync.scheduling.definitions import JobDefinitions, JobDetail, TriggerDetail
from l10nsync.scheduling.keys import JobKey, TriggerKey


class TestKeys:
    def test_str_is_group_dot_name(self) -> None:
        assert str(JobKey("branch-statistics-1")) == "DEFAULT.branch-statistics-1"
        assert str(TriggerKey("t", DYNAMIC_GROUP)) == "DYNAMIC.t"

    def test_parse_splits_on_first_dot(self) -> None:
        assert JobKey.parse("DYNAMIC.notify.v2") == JobKey("notify.v2", "DYNAMIC")
        assert TriggerKey.parse("DEFAULT.x") == TriggerKey("x")

    @pytest.mark.parametrize("value", ["nodot", ".name", "group."])
    def test_parse_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError):
            JobKey.parse(value)

    def test_job_and_trigger_keys_are_distinct_types(self) -> None:
        assert JobKey("a") != TriggerKey("a")
        assert len({JobKey("a"), JobKey("a", DEFAULT_GROUP)}) == 1


class TestTriggerDetail:
    def test_no_rule_fires_once(self) -> None:
        trigger = TriggerDetail(key=TriggerKey("t"), job_key=JobKey("j"))
        assert trigger.fires_once

    def test_run_date_fires_once(self) -> None:
        trigger = TriggerDetail(
            key=TriggerKey("t"),
            job_key=JobKey("j"),
            run_date=datetime(2030, 1, 1, tzinfo=timezone.utc),
        )
        assert trigger.fires_once

    def test_interval_is_recurring(self) -> None:
        trigger = TriggerDetail(key=TriggerKey("t"), job_key=JobKey("j"), interval_seconds=60)
        assert not trigger.fires_once

    def test_rejects_two_rules(self) -> None:
        with pytest.raises(ValueError, match="at most one"):
            TriggerDetail(
                key=TriggerKey("t"), job_key=JobKey("j"), cron="* * * * *", interval_seconds=5
            )

    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError, match="interval"):
            TriggerDetail(key=TriggerKey("t"), job_key=JobKey("j"), interval_seconds=0)


class TestJobDefinitions:
    def test_keys_filtered_by_group(self) -> None:
        definitions = JobDefinitions(
            job_details=[
                JobDetail(key=JobKey("a"), job_type="x"),
                JobDetail(key=JobKey("b", DYNAMIC_GROUP), job_type="x"),
            ],
            triggers=[TriggerDetail(key=TriggerKey("a-trigger"), job_key=JobKey("a"))],
        )

        assert definitions.job_keys(DEFAULT_GROUP) == {JobKey("a")}
        assert definitions.job_keys() == {JobKey("a"), JobKey("b", DYNAMIC_GROUP)}
        assert definitions.trigger_keys(DYNAMIC_GROUP) == set()
        assert definitions.trigger_keys(DEFAULT_GROUP) == {TriggerKey("a-trigger")}
