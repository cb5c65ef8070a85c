"""Configuration management for SnipThread."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from snipthread.exceptions import ConfigError

SNIPTHREAD_DIR = ".snipthread"
CONFIG_FILE = "config.json"
THREAD_DB_FILE = "thread.db"


class MotionBudget(BaseModel):
    """Per-axis node budget for a thread context."""

    max_upstream_nodes: int = Field(default=5, ge=1)
    max_downstream_nodes: int = Field(default=5, ge=1)
    max_lateral_nodes: int = Field(default=8, ge=1)


class BuilderConfig(BaseModel):
    """Thread assembler behavior."""

    fail_fast: bool = True  # False = partial results with per-axis error markers
    timeout_seconds: float | None = Field(default=None, gt=0)


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    budget: MotionBudget = Field(default_factory=MotionBudget)
    builder: BuilderConfig = Field(default_factory=BuilderConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .snipthread directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / SNIPTHREAD_DIR).is_dir():
            return current
        current = current.parent
    if (current / SNIPTHREAD_DIR).is_dir():
        return current
    return None


def get_snipthread_dir(root: Path) -> Path:
    """Get the .snipthread directory for a project root."""
    return root / SNIPTHREAD_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .snipthread/config.json."""
    config_path = get_snipthread_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return ProjectConfig(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid config at {config_path}: {e}") from e
    return ProjectConfig(name=root.name, root_path=str(root))


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .snipthread/config.json."""
    st_dir = get_snipthread_dir(root)
    st_dir.mkdir(parents=True, exist_ok=True)
    config_path = st_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def _parent_of(data: dict, key: str) -> tuple[dict, str]:
    """Resolve a dot-notation key to (containing section, leaf name)."""
    parts = key.split(".")
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    return target, parts[-1]


def get_config_value(config: ProjectConfig, key: str) -> Any:
    """Read a nested config value using dot notation (e.g., 'builder.fail_fast')."""
    section, leaf = _parent_of(config.model_dump(), key)
    return section[leaf]


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'budget.max_lateral_nodes')."""
    data = config.model_dump()
    section, leaf = _parent_of(data, key)
    section[leaf] = value
    try:
        return ProjectConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
