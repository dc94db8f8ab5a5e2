"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- DatabaseConfig model
- SearchConfig model
- BranchStatisticsConfig model
- SchedulerConfig model
- L10nSyncConfig root model
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from l10nsync.config.models import (
    BranchStatisticsConfig,
    DatabaseConfig,
    L10nSyncConfig,
    LoggingConfig,
    LogOutputConfig,
    SchedulerConfig,
    SearchConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_file_destination_allowed(self, tmp_path: Path) -> None:
        config = LogOutputConfig(destination=str(tmp_path / "out.log"))
        assert config.destination == str(tmp_path / "out.log")

    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError, match="absolute"):
            LogOutputConfig(destination="logs/out.log")


class TestLoggingConfig:
    def test_defaults_to_single_console_output(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert len(config.outputs) == 1

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")  # type: ignore[arg-type]


class TestDatabaseConfig:
    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DatabaseConfig(max_retries=-1)


class TestSearchConfig:
    def test_defaults(self) -> None:
        config = SearchConfig()
        assert config.base_url == "http://localhost:8080"
        assert config.page_size == 1000
        assert config.max_ids_per_request == 200
        assert config.auth_token is None

    def test_page_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="page_size"):
            SearchConfig(page_size=0)

    def test_max_ids_per_request_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="max_ids_per_request"):
            SearchConfig(max_ids_per_request=0)


class TestBranchStatisticsConfig:
    def test_defaults(self) -> None:
        config = BranchStatisticsConfig()
        assert config.primary_branch_name == "master"
        assert config.repository_ids == []
        assert config.interval_sec == 300.0
        assert config.max_workers == 1
        assert config.continue_on_error is True

    @pytest.mark.parametrize("interval", [0, -5])
    def test_interval_must_be_positive(self, interval: float) -> None:
        with pytest.raises(ValidationError, match="interval_sec"):
            BranchStatisticsConfig(interval_sec=interval)

    def test_max_workers_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="max_workers"):
            BranchStatisticsConfig(max_workers=0)


class TestSchedulerConfig:
    def test_defaults(self) -> None:
        config = SchedulerConfig()
        assert config.name == "l10nsync"
        assert config.timezone == "UTC"
        assert config.misfire_grace_sec == 60

    def test_negative_start_delay_rejected(self) -> None:
        with pytest.raises(ValidationError, match="start_delay_sec"):
            SchedulerConfig(start_delay_sec=-1)


class TestL10nSyncConfig:
    def test_nested_dicts_are_validated(self) -> None:
        config = L10nSyncConfig.model_validate(
            {"branch_statistics": {"repository_ids": [3, 1]}, "scheduler": {"name": "x"}}
        )
        assert config.branch_statistics.repository_ids == [3, 1]
        assert config.scheduler.name == "x"
        assert config.database.url == "sqlite:///l10nsync.db"
