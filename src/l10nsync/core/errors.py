"""l10nsync error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Storage
- 4xxx: Search
- 5xxx: Scheduler
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Storage (3xxx)
    STORAGE_TEXT_UNIT_NOT_FOUND = 3001
    STORAGE_BRANCH_NOT_FOUND = 3002

    # Search (4xxx)
    SEARCH_UNAVAILABLE = 4001
    SEARCH_BAD_RESPONSE = 4002

    # Scheduler (5xxx)
    SCHEDULER_REGISTRY_CLEANUP_FAILED = 5001
    SCHEDULER_UNKNOWN_JOB_TYPE = 5002
    SCHEDULER_JOB_EXISTS = 5003
    SCHEDULER_JOB_NOT_FOUND = 5004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class L10nSyncError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(L10nSyncError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class StorageError(L10nSyncError):
    """Persistent entity lookups that came back empty."""

    @classmethod
    def text_unit_not_found(cls, tm_text_unit_id: int) -> "StorageError":
        return cls(
            code=ErrorCode.STORAGE_TEXT_UNIT_NOT_FOUND,
            message=f"Text unit {tm_text_unit_id} does not exist",
            details={"tm_text_unit_id": tm_text_unit_id},
        )

    @classmethod
    def branch_not_found(cls, branch_id: int) -> "StorageError":
        return cls(
            code=ErrorCode.STORAGE_BRANCH_NOT_FOUND,
            message=f"Branch {branch_id} does not exist",
            details={"branch_id": branch_id},
        )


class SearchError(L10nSyncError):
    """Failures talking to the text unit search service."""

    @classmethod
    def unavailable(cls, url: str, reason: str) -> "SearchError":
        return cls(
            code=ErrorCode.SEARCH_UNAVAILABLE,
            message=f"Search service unavailable at {url}: {reason}",
            retryable=True,
            details={"url": url, "reason": reason},
        )

    @classmethod
    def bad_response(cls, url: str, reason: str, status_code: int | None = None) -> "SearchError":
        return cls(
            code=ErrorCode.SEARCH_BAD_RESPONSE,
            message=f"Unexpected search response from {url}: {reason}",
            details={"url": url, "reason": reason, "status_code": status_code},
        )


class SchedulerError(L10nSyncError):
    """Scheduler registry and job dispatch errors."""

    @classmethod
    def registry_cleanup_failed(cls, reason: str) -> "SchedulerError":
        return cls(
            code=ErrorCode.SCHEDULER_REGISTRY_CLEANUP_FAILED,
            message=f"Failed to remove outdated jobs and triggers: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def unknown_job_type(cls, job_type: str) -> "SchedulerError":
        return cls(
            code=ErrorCode.SCHEDULER_UNKNOWN_JOB_TYPE,
            message=f"No handler registered for job type '{job_type}'",
            details={"job_type": job_type},
        )

    @classmethod
    def job_exists(cls, key: str) -> "SchedulerError":
        return cls(
            code=ErrorCode.SCHEDULER_JOB_EXISTS,
            message=f"Job already exists: {key}",
            details={"key": key},
        )

    @classmethod
    def job_not_found(cls, key: str) -> "SchedulerError":
        return cls(
            code=ErrorCode.SCHEDULER_JOB_NOT_FOUND,
            message=f"Job not found: {key}",
            details={"key": key},
        )


class InternalError(L10nSyncError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
