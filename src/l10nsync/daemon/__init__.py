"""Service wiring: declared jobs, startup sequence and lifecycle."""

from l10nsync.daemon.jobs import build_job_definitions, build_job_handlers
from l10nsync.daemon.lifecycle import ServiceController, run_service, start_scheduler

__all__ = [
    "ServiceController",
    "build_job_definitions",
    "build_job_handlers",
    "run_service",
    "start_scheduler",
]
