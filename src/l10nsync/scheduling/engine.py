"""SchedulerBackend on top of APScheduler.

Layout:
- Job details live in the scheduler_job_detail table of the statistics
  database, addressed by (job_group, job_name).
- Triggers are APScheduler jobs whose id is the trigger key ("<group>.<name>").
  They all call dispatch_job(), which runs the job detail's handler on the
  backend live in the current process. Persisted triggers carry only the job
  key, so any process sharing the job store can run them. dispatch_job is a
  module-level function so triggers can be persisted by SQLAlchemyJobStore.
- At most one backend is live per process.

The APScheduler instance is started paused on construction: jobs and triggers
can be read and written immediately, but nothing fires until start_delayed().
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Iterable, Mapping

import structlog
from apscheduler.jobstores.base import BaseJobStore, ConflictingIdError, JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import delete, text
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from l10nsync.config.constants import DEFAULT_SCHEDULER_NAME
from l10nsync.core.errors import InternalError, SchedulerError
from l10nsync.core.logging import clear_run_id, set_run_id
from l10nsync.scheduling.backend import JobHandler
from l10nsync.scheduling.definitions import JobDetail, TriggerDetail
from l10nsync.scheduling.keys import JobKey, TriggerKey
from l10nsync.storage.database import Database
from l10nsync.storage.models import SchedulerJobDetail

logger = structlog.get_logger()

_live_backend: ApschedulerBackend | None = None
_live_backend_lock = threading.Lock()

_UPSERT_JOB_DETAIL_SQL = """
    INSERT INTO scheduler_job_detail (job_group, job_name, job_type, data_json, durable, revision)
    VALUES (:job_group, :job_name, :job_type, :data_json, :durable, 1)
    ON CONFLICT (job_group, job_name)
    DO UPDATE SET job_type = excluded.job_type,
                  data_json = excluded.data_json,
                  durable = excluded.durable,
                  revision = scheduler_job_detail.revision + 1
"""

_INSERT_JOB_DETAIL_SQL = """
    INSERT INTO scheduler_job_detail (job_group, job_name, job_type, data_json, durable, revision)
    VALUES (:job_group, :job_name, :job_type, :data_json, :durable, 1)
"""


def dispatch_job(job_group: str, job_name: str) -> None:
    """Entry point of every trigger."""
    with _live_backend_lock:
        backend = _live_backend
    if backend is None:
        logger.warning("dispatch_without_scheduler", job_key=f"{job_group}.{job_name}")
        return
    backend.execute(JobKey(name=job_name, group=job_group))


class ApschedulerBackend:
    """APScheduler-backed scheduler with persisted job details."""

    def __init__(
        self,
        db: Database,
        handlers: Mapping[str, JobHandler] | None = None,
        *,
        name: str = DEFAULT_SCHEDULER_NAME,
        jobstore_url: str | None = None,
        timezone: str = "UTC",
        misfire_grace_sec: int = 60,
    ) -> None:
        self.db = db
        self.name = name
        self.misfire_grace_sec = misfire_grace_sec
        self._handlers: dict[str, JobHandler] = dict(handlers or {})
        self._timezone = timezone
        self._start_timer: threading.Timer | None = None
        self._firing = False

        jobstore: BaseJobStore
        if jobstore_url:
            jobstore = SQLAlchemyJobStore(url=jobstore_url)
        else:
            jobstore = MemoryJobStore()

        self._scheduler = BackgroundScheduler(
            jobstores={"default": jobstore},
            job_defaults={"coalesce": True, "max_instances": 1},
            timezone=timezone,
        )

        global _live_backend
        with _live_backend_lock:
            if _live_backend is not None:
                raise InternalError.unexpected(
                    "a scheduler is already live in this process",
                    name=name,
                    live=_live_backend.name,
                )
            _live_backend = self

        self._scheduler.start(paused=True)
        logger.debug("scheduler_standby", scheduler=name, persistent=jobstore_url is not None)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def register_handler(self, job_type: str, handler: JobHandler) -> None:
        self._handlers[job_type] = handler

    @property
    def job_types(self) -> set[str]:
        return set(self._handlers)

    # ------------------------------------------------------------------
    # Registry reads
    # ------------------------------------------------------------------

    def get_job_keys(self, group: str) -> set[JobKey]:
        with self.db.session() as session:
            stmt = select(SchedulerJobDetail.job_name).where(SchedulerJobDetail.job_group == group)
            return {JobKey(name=n, group=group) for n in session.exec(stmt).all()}

    def get_trigger_keys(self, group: str) -> set[TriggerKey]:
        keys: set[TriggerKey] = set()
        for job in self._scheduler.get_jobs():
            try:
                key = TriggerKey.parse(job.id)
            except ValueError:
                continue
            if key.group == group:
                keys.add(key)
        return keys

    def get_job_detail(self, key: JobKey) -> JobDetail | None:
        record = self._load_record(key)
        if record is None:
            return None
        return JobDetail(
            key=key,
            job_type=record.job_type,
            data=json.loads(record.data_json),
            durable=record.durable,
        )

    # ------------------------------------------------------------------
    # Registry writes
    # ------------------------------------------------------------------

    def add_job(self, detail: JobDetail, replace: bool = False) -> None:
        """Store a job detail. With replace, an existing detail is overwritten."""
        params = {
            "job_group": detail.key.group,
            "job_name": detail.key.name,
            "job_type": detail.job_type,
            "data_json": json.dumps(detail.data, sort_keys=True),
            "durable": detail.durable,
        }
        sql = _UPSERT_JOB_DETAIL_SQL if replace else _INSERT_JOB_DETAIL_SQL
        try:
            with self.db.immediate_transaction() as session:
                session.execute(text(sql), params)
        except IntegrityError as e:
            raise SchedulerError.job_exists(str(detail.key)) from e

    def schedule_job(self, trigger: TriggerDetail, replace: bool = False) -> None:
        """Attach a trigger to a stored job detail."""
        if self._load_record(trigger.job_key) is None:
            raise SchedulerError.job_not_found(str(trigger.job_key))

        try:
            self._scheduler.add_job(
                dispatch_job,
                trigger=self._build_trigger(trigger),
                id=str(trigger.key),
                name=str(trigger.job_key),
                kwargs={
                    "job_group": trigger.job_key.group,
                    "job_name": trigger.job_key.name,
                },
                # A one-off trigger must still run if it waited out a paused start
                misfire_grace_time=None if trigger.fires_once else self.misfire_grace_sec,
                # A replacement may fire while the previous run of the same key is executing
                max_instances=2 if trigger.fires_once else 1,
                replace_existing=replace,
            )
        except ConflictingIdError as e:
            raise SchedulerError.job_exists(str(trigger.key)) from e

    def unschedule_jobs(self, keys: Iterable[TriggerKey]) -> int:
        """Remove triggers. Unknown keys are skipped. Returns number removed."""
        removed = 0
        for key in keys:
            try:
                self._scheduler.remove_job(str(key))
            except JobLookupError:
                continue
            removed += 1
        return removed

    def delete_jobs(self, keys: Iterable[JobKey]) -> int:
        """Delete job details along with any trigger still firing them."""
        keys = list(keys)
        if not keys:
            return 0

        targets = {(k.group, k.name) for k in keys}
        for job in self._scheduler.get_jobs():
            if (job.kwargs.get("job_group"), job.kwargs.get("job_name")) in targets:
                self._scheduler.remove_job(job.id)

        deleted = 0
        with self.db.immediate_transaction() as session:
            for key in keys:
                stmt = (
                    delete(SchedulerJobDetail)
                    .where(col(SchedulerJobDetail.job_group) == key.group)
                    .where(col(SchedulerJobDetail.job_name) == key.name)
                )
                deleted += int(session.execute(stmt).rowcount)
        return deleted

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_firing(self) -> bool:
        return self._firing

    def start_delayed(self, seconds: float) -> None:
        """Let triggers fire after a delay."""
        if self._firing or self._start_timer is not None:
            logger.debug("scheduler_start_already_requested", scheduler=self.name)
            return
        if seconds <= 0:
            self._resume()
            return
        self._start_timer = threading.Timer(seconds, self._resume)
        self._start_timer.daemon = True
        self._start_timer.start()
        logger.info("scheduler_start_delayed", scheduler=self.name, delay_sec=seconds)

    def _resume(self) -> None:
        self._scheduler.resume()
        self._firing = True
        logger.info("scheduler_started", scheduler=self.name)

    def shutdown(self, wait: bool = True) -> None:
        if self._start_timer is not None:
            self._start_timer.cancel()
            self._start_timer = None
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
        self._firing = False
        global _live_backend
        with _live_backend_lock:
            if _live_backend is self:
                _live_backend = None
        logger.info("scheduler_shutdown", scheduler=self.name)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, job_key: JobKey) -> None:
        """Run the handler of a job detail. Called from trigger threads."""
        record = self._load_record(job_key)
        if record is None:
            logger.warning("job_detail_missing", job_key=str(job_key))
            return

        start = time.perf_counter()
        set_run_id()
        try:
            handler = self._handlers.get(record.job_type)
            if handler is None:
                raise SchedulerError.unknown_job_type(record.job_type)
            logger.info("job_started", job_key=str(job_key), job_type=record.job_type)
            handler(json.loads(record.data_json))
            logger.info(
                "job_completed",
                job_key=str(job_key),
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
        except Exception:
            logger.exception("job_failed", job_key=str(job_key), job_type=record.job_type)
            raise
        finally:
            clear_run_id()
            if not record.durable:
                self._delete_if_unchanged(record)

    def _delete_if_unchanged(self, record: SchedulerJobDetail) -> None:
        with self.db.immediate_transaction() as session:
            stmt = (
                delete(SchedulerJobDetail)
                .where(col(SchedulerJobDetail.id) == record.id)
                .where(col(SchedulerJobDetail.revision) == record.revision)
            )
            if not session.execute(stmt).rowcount:
                logger.debug(
                    "job_detail_replaced_during_execution",
                    job_key=f"{record.job_group}.{record.job_name}",
                )

    def _load_record(self, key: JobKey) -> SchedulerJobDetail | None:
        with self.db.session() as session:
            stmt = (
                select(SchedulerJobDetail)
                .where(SchedulerJobDetail.job_group == key.group)
                .where(SchedulerJobDetail.job_name == key.name)
            )
            return session.exec(stmt).first()

    def _build_trigger(self, trigger: TriggerDetail) -> BaseTrigger:
        if trigger.cron is not None:
            return CronTrigger.from_crontab(trigger.cron, timezone=self._timezone)
        if trigger.interval_seconds is not None:
            return IntervalTrigger(seconds=trigger.interval_seconds, timezone=self._timezone)
        return DateTrigger(run_date=trigger.run_date, timezone=self._timezone)

    def __repr__(self) -> str:
        return f"ApschedulerBackend(name={self.name!r}, firing={self._firing})"
