"""Tests for scheduling/registry.py RegistryReconciler."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from l10nsync.config.constants import DEFAULT_GROUP, DYNAMIC_GROUP
from l10nsync.core.errors import ErrorCode, SchedulerError
from l10nsync.scheduling.definitions import JobDefinitions, JobDetail, TriggerDetail
from l10nsync.scheduling.engine import ApschedulerBackend
from l10nsync.scheduling.keys import JobKey, TriggerKey
from l10nsync.scheduling.registry import RegistryReconciler


def _definitions(*names: str) -> JobDefinitions:
    return JobDefinitions(
        job_details=[JobDetail(key=JobKey(n), job_type="echo") for n in names],
        triggers=[
            TriggerDetail(key=TriggerKey(f"{n}-trigger"), job_key=JobKey(n), interval_seconds=60)
            for n in names
        ],
    )


def _register(backend: ApschedulerBackend, definitions: JobDefinitions) -> None:
    RegistryReconciler(backend, definitions).register_declared()


class TestReconcile:
    def test_removes_undeclared_jobs_and_triggers(self, backend: ApschedulerBackend) -> None:
        # Given a registry left by a version declaring A, B and C
        _register(backend, _definitions("A", "B", "C"))

        # When the current version only declares A and C
        result = RegistryReconciler(backend, _definitions("A", "C")).reconcile()

        # Then
        assert result.removed_jobs == {JobKey("B")}
        assert result.removed_triggers == {TriggerKey("B-trigger")}
        assert result.changed
        assert backend.get_job_keys(DEFAULT_GROUP) == {JobKey("A"), JobKey("C")}
        assert backend.get_trigger_keys(DEFAULT_GROUP) == {
            TriggerKey("A-trigger"),
            TriggerKey("C-trigger"),
        }

    def test_matching_registry_is_untouched(self, backend: ApschedulerBackend) -> None:
        _register(backend, _definitions("A"))

        result = RegistryReconciler(backend, _definitions("A")).reconcile()

        assert not result.changed
        assert backend.get_job_keys(DEFAULT_GROUP) == {JobKey("A")}

    def test_empty_declarations_clear_the_group(self, backend: ApschedulerBackend) -> None:
        _register(backend, _definitions("A", "B"))

        RegistryReconciler(backend, JobDefinitions()).reconcile()

        assert backend.get_job_keys(DEFAULT_GROUP) == set()
        assert backend.get_trigger_keys(DEFAULT_GROUP) == set()

    def test_dynamic_group_is_left_alone(self, backend: ApschedulerBackend) -> None:
        pending = JobKey("branch-notification_1", DYNAMIC_GROUP)
        backend.add_job(JobDetail(key=pending, job_type="echo", durable=False))
        backend.schedule_job(
            TriggerDetail(key=TriggerKey(pending.name, DYNAMIC_GROUP), job_key=pending)
        )

        RegistryReconciler(backend, JobDefinitions()).reconcile()

        assert backend.get_job_keys(DYNAMIC_GROUP) == {pending}
        assert backend.get_trigger_keys(DYNAMIC_GROUP) == {TriggerKey(pending.name, DYNAMIC_GROUP)}

    def test_triggers_are_removed_before_jobs(self) -> None:
        backend = MagicMock()
        backend.get_job_keys.return_value = {JobKey("old")}
        backend.get_trigger_keys.return_value = {TriggerKey("old-trigger")}

        RegistryReconciler(backend, JobDefinitions()).reconcile()

        names = [c[0] for c in backend.method_calls if c[0] in ("unschedule_jobs", "delete_jobs")]
        assert names == ["unschedule_jobs", "delete_jobs"]
        backend.unschedule_jobs.assert_called_once_with([TriggerKey("old-trigger")])
        backend.delete_jobs.assert_called_once_with([JobKey("old")])

    def test_backend_failure_is_wrapped(self) -> None:
        backend = MagicMock()
        backend.get_job_keys.return_value = {JobKey("old")}
        backend.get_trigger_keys.return_value = set()
        backend.delete_jobs.side_effect = RuntimeError("store offline")

        with pytest.raises(SchedulerError) as exc_info:
            RegistryReconciler(backend, JobDefinitions()).reconcile()

        assert exc_info.value.code == ErrorCode.SCHEDULER_REGISTRY_CLEANUP_FAILED
        assert "store offline" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestOutdatedKeys:
    def test_computed_per_group(self) -> None:
        backend = MagicMock()
        backend.get_job_keys.return_value = {JobKey("A"), JobKey("X")}
        backend.get_trigger_keys.return_value = {TriggerKey("A-trigger")}
        reconciler = RegistryReconciler(backend, _definitions("A"))

        assert reconciler.outdated_job_keys() == {JobKey("X")}
        assert reconciler.outdated_trigger_keys() == set()
        backend.get_job_keys.assert_called_with(DEFAULT_GROUP)


class TestRegisterDeclared:
    def test_overwrites_live_definitions(self, backend: ApschedulerBackend) -> None:
        backend.add_job(JobDetail(key=JobKey("A"), job_type="echo", data={"old": True}))

        _register(backend, _definitions("A"))

        detail = backend.get_job_detail(JobKey("A"))
        assert detail is not None
        assert detail.data == {}
        assert backend.get_trigger_keys(DEFAULT_GROUP) == {TriggerKey("A-trigger")}
