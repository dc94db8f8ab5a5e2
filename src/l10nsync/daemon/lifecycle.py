"""Service lifecycle management."""

from __future__ import annotations

import signal
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from l10nsync.branch.batch import BranchBatchDriver
from l10nsync.branch.locks import BranchLocks
from l10nsync.branch.statistics import BranchStatisticReconciler
from l10nsync.daemon.jobs import NotificationHandler, build_job_definitions, build_job_handlers
from l10nsync.scheduling.dedup import DeduplicatingJobScheduler
from l10nsync.scheduling.engine import ApschedulerBackend
from l10nsync.scheduling.registry import RegistryReconciler, RegistryReconcileResult
from l10nsync.search.client import HttpTextUnitSearcher
from l10nsync.storage.database import Database

if TYPE_CHECKING:
    import httpx

    from l10nsync.config.models import L10nSyncConfig
    from l10nsync.scheduling.backend import SchedulerBackend
    from l10nsync.scheduling.definitions import JobDefinitions

logger = structlog.get_logger()


def start_scheduler(
    backend: SchedulerBackend,
    definitions: JobDefinitions,
    start_delay_sec: float,
) -> RegistryReconcileResult:
    """Startup sequence: clean the registry, register declared jobs, then fire.

    Raises:
        SchedulerError: registry cleanup failed. The scheduler is not started.
    """
    reconciler = RegistryReconciler(backend, definitions)
    result = reconciler.reconcile()
    reconciler.register_declared()
    backend.start_delayed(start_delay_sec)
    return result


@dataclass
class ServiceController:
    """
    Orchestrates service components.

    Components:
    - Database: statistics and job detail storage
    - HttpTextUnitSearcher: search service client
    - ApschedulerBackend: triggers and job execution
    - BranchBatchDriver: recurring branch statistics work
    """

    config: L10nSyncConfig
    db: Database
    searcher: HttpTextUnitSearcher
    backend: ApschedulerBackend
    driver: BranchBatchDriver
    definitions: JobDefinitions

    _stop_event: threading.Event = field(default_factory=threading.Event, init=False)
    _started: bool = field(default=False, init=False)
    _stopped: bool = field(default=False, init=False)

    @classmethod
    def from_config(
        cls,
        config: L10nSyncConfig,
        *,
        notification_handler: NotificationHandler | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> ServiceController:
        """Wire all components. Nothing fires until start()."""
        db = Database.from_config(config.database)
        db.create_all()
        searcher = HttpTextUnitSearcher.from_config(config.search, transport=transport)
        backend = ApschedulerBackend(
            db,
            name=config.scheduler.name,
            jobstore_url=config.scheduler.jobstore_url,
            timezone=config.scheduler.timezone,
            misfire_grace_sec=config.scheduler.misfire_grace_sec,
        )
        driver = BranchBatchDriver(
            db=db,
            reconciler=BranchStatisticReconciler(db, searcher, BranchLocks()),
            job_scheduler=DeduplicatingJobScheduler(backend),
            config=config.branch_statistics,
        )
        for job_type, handler in build_job_handlers(driver, notification_handler).items():
            backend.register_handler(job_type, handler)

        return cls(
            config=config,
            db=db,
            searcher=searcher,
            backend=backend,
            driver=driver,
            definitions=build_job_definitions(config),
        )

    def start(self) -> RegistryReconcileResult:
        """Run the startup sequence."""
        logger.info(
            "service_starting",
            scheduler=self.backend.name,
            repositories=self.config.branch_statistics.repository_ids,
        )
        result = start_scheduler(
            self.backend, self.definitions, self.config.scheduler.start_delay_sec
        )
        self._started = True
        logger.info("service_started")
        return result

    def stop(self) -> None:
        """Stop all components. Safe to call more than once."""
        if self._stopped:
            return
        self._stopped = True
        logger.info("service_stopping")
        self.backend.shutdown(wait=True)
        self.searcher.close()
        self.db.dispose()
        self._stop_event.set()
        logger.info("service_stopped")

    def request_stop(self) -> None:
        """Ask wait() to return. Used from signal handlers."""
        self._stop_event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop is requested. Returns False on timeout."""
        return self._stop_event.wait(timeout)

    @property
    def started(self) -> bool:
        return self._started


def run_service(controller: ServiceController) -> None:
    """Start the service and block until SIGINT or SIGTERM."""

    def signal_handler(signum: int, _frame: object) -> None:
        logger.info("shutdown_signal_received", signal=signal.Signals(signum).name)
        controller.request_stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)

    try:
        controller.start()
        # Short timeouts keep the main thread responsive to signals
        while not controller.wait(timeout=1.0):
            pass
    finally:
        controller.stop()
