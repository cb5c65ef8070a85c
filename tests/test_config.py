"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from snipthread.config import (
    MotionBudget,
    ProjectConfig,
    find_project_root,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from snipthread.exceptions import ConfigError


class TestConfig:
    def test_default_config(self):
        config = ProjectConfig()
        assert config.budget.max_upstream_nodes == 5
        assert config.budget.max_downstream_nodes == 5
        assert config.budget.max_lateral_nodes == 8
        assert config.builder.fail_fast is True
        assert config.builder.timeout_seconds is None

    def test_save_and_load(self, tmp_path: Path):
        config = ProjectConfig(name="journal")
        config.budget.max_lateral_nodes = 3
        config.builder.fail_fast = False

        save_config(tmp_path, config)
        loaded = load_config(tmp_path)

        assert loaded.name == "journal"
        assert loaded.budget.max_lateral_nodes == 3
        assert loaded.builder.fail_fast is False

    def test_load_missing_uses_defaults(self, tmp_path: Path):
        config = load_config(tmp_path)
        assert config.name == tmp_path.name
        assert config.budget.max_upstream_nodes == 5

    def test_load_invalid_json(self, tmp_path: Path):
        (tmp_path / ".snipthread").mkdir()
        (tmp_path / ".snipthread" / "config.json").write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_find_project_root(self, tmp_path: Path):
        # No .snipthread dir - should return None
        assert find_project_root(tmp_path) is None

        (tmp_path / ".snipthread").mkdir()
        assert find_project_root(tmp_path) == tmp_path

        # Should find from subdirectory
        sub = tmp_path / "notes" / "2026"
        sub.mkdir(parents=True)
        assert find_project_root(sub) == tmp_path

    def test_set_config_nested(self):
        config = ProjectConfig()
        updated = set_config_value(config, "budget.max_upstream_nodes", 12)
        assert updated.budget.max_upstream_nodes == 12
        assert config.budget.max_upstream_nodes == 5

    def test_set_config_timeout(self):
        updated = set_config_value(ProjectConfig(), "builder.timeout_seconds", 1.5)
        assert updated.builder.timeout_seconds == 1.5

    def test_set_config_invalid_key(self):
        config = ProjectConfig()
        with pytest.raises(KeyError):
            set_config_value(config, "nonexistent.key", "value")
        with pytest.raises(KeyError):
            set_config_value(config, "budget.max_sideways_nodes", 1)

    def test_set_config_invalid_value(self):
        with pytest.raises(ConfigError):
            set_config_value(ProjectConfig(), "budget.max_lateral_nodes", -1)

    def test_budget_must_allow_one_node(self):
        with pytest.raises(ValidationError):
            MotionBudget(max_upstream_nodes=0)
        with pytest.raises(ConfigError):
            set_config_value(ProjectConfig(), "budget.max_downstream_nodes", 0)
        assert MotionBudget(max_lateral_nodes=1).max_lateral_nodes == 1

    def test_get_config_value(self):
        config = ProjectConfig()
        assert get_config_value(config, "budget.max_lateral_nodes") == 8
        assert get_config_value(config, "builder") == {"fail_fast": True, "timeout_seconds": None}

    def test_get_config_invalid_key(self):
        config = ProjectConfig()
        with pytest.raises(KeyError):
            get_config_value(config, "budget.max_sideways_nodes")
        with pytest.raises(KeyError):
            get_config_value(config, "builder.fail_fast.deeper")
