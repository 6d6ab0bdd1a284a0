"""Scheduler configuration and config file loading.

The configuration is an immutable value passed explicitly to each component.
It can be loaded from a YAML file (``taskplan_config.yaml``) whose
``scheduler`` section holds the options below; keys may be written in
snake_case or camelCase.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .exceptions import ConfigError

DEFAULT_CONFIG_FILENAME = "taskplan_config.yaml"


def _default_priority_weights() -> dict[str, int]:
    # critical is reserved; it ranks with high until it gets its own weight
    return {"critical": 3, "high": 3, "medium": 2, "low": 1}


class SchedulerConfig(BaseModel):
    """Options for scheduling, reminders, monitoring and storage locations."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    # Reminders
    reminder_threshold_days: int = Field(default=2, ge=0)

    # Monitor
    monitor_interval_minutes: int = Field(default=30, ge=1)

    # Capacity: maximum number of tasks allowed to start on the same day
    max_tasks_per_day: int = Field(default=3, ge=1)
    # Days scanned for a free slot before a task is force-placed
    horizon_days: int = Field(default=60, ge=1)

    # Ordering
    priority_weights: dict[str, int] = Field(default_factory=_default_priority_weights)

    # Effort
    productive_hours_per_day: float = Field(default=6.0, gt=0)
    default_estimated_hours: float = Field(default=4.0, gt=0)

    # Storage
    schedule_path: Path = Path("docs/taskmaster/schedule.json")
    tasks_path: Path = Path("data/taskmaster/tasks.json")

    @field_validator("priority_weights", mode="before")
    @classmethod
    def normalize_priority_keys(cls, v: Any) -> Any:
        """Priority names are matched case-insensitively."""
        if isinstance(v, dict):
            items: dict[Any, Any] = v  # type: ignore[assignment]
            return {str(key).strip().lower(): value for key, value in items.items()}
        return v

    def priority_weight(self, priority: str) -> int:
        """Weight used for ordering; priorities missing from the mapping weigh 1."""
        return self.priority_weights.get(str(priority).lower(), 1)


def load_config(config_path: Path | str) -> SchedulerConfig:
    """Load scheduler configuration from a YAML file.

    Args:
        config_path: Path to taskplan_config.yaml

    Returns:
        SchedulerConfig built from the file's ``scheduler`` section (defaults if absent)

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or has invalid values
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if data is None:
        return SchedulerConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {config_path}: expected a mapping at top level")

    section: Any = data.get("scheduler", {})  # type: ignore[union-attr]
    if section is None:
        return SchedulerConfig()
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid config file {config_path}: 'scheduler' must be a mapping")

    try:
        return SchedulerConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid scheduler configuration in {config_path}: {e}") from e


def discover_config(config_path: Path | None = None) -> SchedulerConfig:
    """Find and load the configuration.

    Search order:
    1. Explicit config_path argument (must exist)
    2. Current directory / taskplan_config.yaml

    Falls back to defaults when no file is found.
    """
    if config_path is not None:
        return load_config(config_path)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return SchedulerConfig()
