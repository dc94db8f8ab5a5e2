"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import structlog

from l10nsync.config.models import LoggingConfig, LogOutputConfig
from l10nsync.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)


class TestRunIdCorrelation:
    """Run ID context variable tests."""

    def setup_method(self) -> None:
        clear_run_id()

    def test_given_run_id_when_set_then_can_retrieve(self) -> None:
        # When
        result = set_run_id("batch-123")

        # Then
        assert result == "batch-123"
        assert get_run_id() == "batch-123"

    def test_given_no_id_when_set_then_generates_short_hex(self) -> None:
        rid = set_run_id()
        assert len(rid) == 12  # uuid4().hex[:12]
        int(rid, 16)

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        set_run_id("to-clear")
        clear_run_id()
        assert get_run_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_run_id()

    def teardown_method(self) -> None:
        clear_run_id()
        logging.getLogger().handlers.clear()

    def _json_lines(self, path: Path) -> list[dict[str, object]]:
        return [json.loads(line) for line in path.read_text().splitlines() if line]

    def test_given_json_output_when_log_then_event_fields_present(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "l10nsync.log"
        configure_logging(
            config=LoggingConfig(
                level="INFO",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )

        # When
        get_logger("test").info("branch_statistics_reconciled", branch_id=3)

        # Then
        (entry,) = self._json_lines(log_file)
        assert entry["event"] == "branch_statistics_reconciled"
        assert entry["branch_id"] == 3
        assert entry["level"] == "info"
        assert entry["logger"] == "test"
        assert "timestamp" in entry

    def test_given_run_id_when_log_then_run_id_attached(self, tmp_path: Path) -> None:
        log_file = tmp_path / "l10nsync.log"
        configure_logging(
            config=LoggingConfig(
                outputs=[LogOutputConfig(format="json", destination=str(log_file))]
            )
        )
        set_run_id("abc123")

        get_logger().info("branch_batch_started")

        (entry,) = self._json_lines(log_file)
        assert entry["run_id"] == "abc123"

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        configure_logging(config=config, json_format=False, level="ERROR")
        get_logger().debug("debug msg")

        assert "debug msg" in log_file.read_text()

    def test_given_multi_output_config_when_configure_then_levels_apply_per_output(
        self, tmp_path: Path
    ) -> None:
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content

        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_scheduler_library_logs_are_quieted(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger("apscheduler").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
