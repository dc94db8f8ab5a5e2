"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (L10NSYNC__SECTION__KEY)
3. Config YAML (--config path, or ./l10nsync.yaml)
4. Global YAML (~/.config/l10nsync/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    L10NSYNC__<SECTION>__<KEY>=<VALUE>

Examples:
    L10NSYNC__LOGGING__LEVEL=DEBUG
    L10NSYNC__DATABASE__URL=sqlite:////var/lib/l10nsync/stats.db
    L10NSYNC__SEARCH__BASE_URL=http://textunits.internal:8080
    L10NSYNC__BRANCH_STATISTICS__REPOSITORY_IDS=[1,2,3]
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from l10nsync.config.constants import (
    DEFAULT_PRIMARY_BRANCH,
    DEFAULT_SCHEDULER_NAME,
    DEFAULT_START_DELAY_SEC,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        L10NSYNC__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every text unit count lookup.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DatabaseConfig(BaseModel):
    """Statistics database configuration.

    Env vars:
        L10NSYNC__DATABASE__URL: SQLAlchemy URL of the statistics database
        L10NSYNC__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        L10NSYNC__DATABASE__MAX_RETRIES: Max retry attempts for locked DB
    """

    url: str = Field(
        default="sqlite:///l10nsync.db",
        description="SQLAlchemy database URL. SQLite gets WAL mode and busy handling.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )

    @field_validator("busy_timeout_ms", "max_retries")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class SearchConfig(BaseModel):
    """Text unit search service configuration.

    Env vars:
        L10NSYNC__SEARCH__BASE_URL: Base URL of the search service
        L10NSYNC__SEARCH__TIMEOUT_SEC: Per-request timeout
        L10NSYNC__SEARCH__PAGE_SIZE: Text units fetched per search page
        L10NSYNC__SEARCH__MAX_IDS_PER_REQUEST: Text unit ids sent per search query
        L10NSYNC__SEARCH__AUTH_TOKEN: Optional bearer token
    """

    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the text unit search service.",
    )
    timeout_sec: float = Field(
        default=30.0,
        description="Per-request timeout for search and count queries.",
    )
    page_size: int = Field(
        default=1000,
        description="Text units requested per search page.",
    )
    max_ids_per_request: int = Field(
        default=200,
        description="Text unit ids per search query. Longer id lists are split "
        "across queries to keep request URLs short.",
    )
    auth_token: str | None = Field(
        default=None,
        description="Bearer token sent with every search request.",
    )

    @field_validator("page_size", "max_ids_per_request")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1, got {v}")
        return v


class BranchStatisticsConfig(BaseModel):
    """Branch statistics batch configuration.

    Env vars:
        L10NSYNC__BRANCH_STATISTICS__PRIMARY_BRANCH_NAME: Branch never reconciled
        L10NSYNC__BRANCH_STATISTICS__REPOSITORY_IDS: Repositories with a recurring job
        L10NSYNC__BRANCH_STATISTICS__INTERVAL_SEC: Recurring job interval
        L10NSYNC__BRANCH_STATISTICS__MAX_WORKERS: Branches reconciled in parallel
        L10NSYNC__BRANCH_STATISTICS__CONTINUE_ON_ERROR: Keep going after a branch fails
    """

    primary_branch_name: str = Field(
        default=DEFAULT_PRIMARY_BRANCH,
        description="Name of the primary branch. It is never reconciled.",
    )
    repository_ids: list[int] = Field(
        default_factory=list,
        description="Repositories that get a recurring branch statistics job.",
    )
    interval_sec: float = Field(
        default=300.0,
        description="Interval between recurring branch statistics runs.",
    )
    max_workers: int = Field(
        default=1,
        description="Branches reconciled in parallel within one repository. "
        "RISK: >1 increases SQLite write contention.",
    )
    continue_on_error: bool = Field(
        default=True,
        description="Continue with the remaining branches when one branch fails.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v

    @field_validator("interval_sec")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"interval_sec must be > 0, got {v}")
        return v


class SchedulerConfig(BaseModel):
    """Job scheduler configuration.

    Env vars:
        L10NSYNC__SCHEDULER__JOBSTORE_URL: SQLAlchemy URL for persisted triggers
        L10NSYNC__SCHEDULER__START_DELAY_SEC: Delay before triggers start firing
    """

    name: str = Field(
        default=DEFAULT_SCHEDULER_NAME,
        description="Scheduler instance name, used in logs.",
    )
    jobstore_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the trigger job store. None keeps triggers in memory.",
    )
    timezone: str = Field(
        default="UTC",
        description="Timezone for cron triggers.",
    )
    start_delay_sec: float = Field(
        default=DEFAULT_START_DELAY_SEC,
        description="Delay between startup cleanup and the first trigger firing.",
    )
    misfire_grace_sec: int = Field(
        default=60,
        description="Recurring triggers later than this are skipped until their next fire time.",
    )

    @field_validator("start_delay_sec")
    @classmethod
    def validate_start_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"start_delay_sec must be >= 0, got {v}")
        return v


class L10nSyncConfig(BaseModel):
    """Root configuration for l10nsync.

    All settings can be configured via:
    1. Environment variables: L10NSYNC__SECTION__KEY
    2. YAML config files
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    branch_statistics: BranchStatisticsConfig = Field(default_factory=BranchStatisticsConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
