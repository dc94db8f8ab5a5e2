"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence: kwargs > env > config file > global file > defaults
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from l10nsync.config.loader import _deep_merge, _load_yaml, load_config
from l10nsync.core.errors import ConfigError, ErrorCode


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """No global config, no local config, no L10NSYNC__ env vars."""
    monkeypatch.setattr(
        "l10nsync.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml"
    )
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    for key in list(os.environ):
        if key.upper().startswith("L10NSYNC__"):
            monkeypatch.delenv(key)
    return workdir


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("search:\n  base_url: http://textunits.internal:8080\n")

        assert _load_yaml(yaml_file) == {"search": {"base_url": "http://textunits.internal:8080"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_parse_error_on_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("search: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_parse_error_on_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert "mapping" in exc_info.value.message


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_dicts_are_merged(self) -> None:
        base = {"search": {"base_url": "a", "page_size": 10}, "x": 1}
        override = {"search": {"page_size": 20}}

        assert _deep_merge(base, override) == {
            "search": {"base_url": "a", "page_size": 20},
            "x": 1,
        }

    def test_does_not_mutate_base(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}

    def test_non_dict_override_replaces(self) -> None:
        assert _deep_merge({"a": {"b": 1}}, {"a": [1]}) == {"a": [1]}


class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_when_no_sources(self) -> None:
        config = load_config()

        assert config.database.url == "sqlite:///l10nsync.db"
        assert config.branch_statistics.primary_branch_name == "master"
        assert config.branch_statistics.continue_on_error is True
        assert config.scheduler.start_delay_sec == 2.0
        assert config.scheduler.jobstore_url is None

    def test_local_config_file_is_picked_up(self, isolated_config: Path) -> None:
        (isolated_config / "l10nsync.yaml").write_text(
            "branch_statistics:\n  repository_ids: [1, 2]\n  primary_branch_name: main\n"
        )

        config = load_config()

        assert config.branch_statistics.repository_ids == [1, 2]
        assert config.branch_statistics.primary_branch_name == "main"

    def test_explicit_config_overrides_global(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global" / "config.yaml"
        global_file.parent.mkdir()
        global_file.write_text("search:\n  base_url: http://global\n  page_size: 50\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("search:\n  base_url: http://explicit\n")

        config = load_config(explicit)

        assert config.search.base_url == "http://explicit"
        assert config.search.page_size == 50

    def test_env_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (isolated_config / "l10nsync.yaml").write_text("search:\n  page_size: 50\n")
        monkeypatch.setenv("L10NSYNC__SEARCH__PAGE_SIZE", "75")

        config = load_config()

        assert config.search.page_size == 75

    def test_kwargs_override_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("L10NSYNC__LOGGING__LEVEL", "DEBUG")

        config = load_config(logging={"level": "ERROR"})

        assert config.logging.level == "ERROR"

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "nope.yaml")
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_invalid_value_raises_config_error(self, isolated_config: Path) -> None:
        (isolated_config / "l10nsync.yaml").write_text("branch_statistics:\n  max_workers: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "max_workers" in exc_info.value.details["field"]
