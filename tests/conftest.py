"""Pytest configuration and fixtures for taskplan tests."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from taskplan.config import SchedulerConfig
from taskplan.logger import reset_logger
from taskplan.models import Task
from taskplan.scheduler import ScheduleBuilder, SchedulerService
from taskplan.sources import InMemoryTaskSource
from taskplan.store import ScheduleStore

TODAY = date(2025, 3, 3)
FIXED_NOW = datetime(2025, 3, 3, 9, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_task(  # noqa: PLR0913 - test helper mirrors the task record
    task_id: str,
    *,
    deps: Iterable[str] = (),
    priority: str = "medium",
    hours: float | None = 4,
    due: date | None = None,
    status: str = "todo",
    name: str | None = None,
    completed: date | None = None,
    **extra: Any,
) -> Task:
    """Create a task with sensible defaults."""
    return Task.model_validate(
        {
            "id": task_id,
            "name": name or f"Task {task_id}",
            "status": status,
            "priority": priority,
            "dueDate": due,
            "estimatedHours": hours,
            "dependencies": list(deps),
            "completedDate": completed,
            **extra,
        }
    )


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Ensure every test starts and ends with a default logger."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def config() -> SchedulerConfig:
    return SchedulerConfig()


@pytest.fixture
def builder(config: SchedulerConfig) -> ScheduleBuilder:
    return ScheduleBuilder(config)


@pytest.fixture
def source() -> InMemoryTaskSource:
    """Three tasks in a chain, the first one in progress."""
    return InMemoryTaskSource(
        [
            make_task("123", priority="high", status="in-progress", due=date(2025, 3, 4)),
            make_task("124", priority="medium", hours=2, deps=["123"], due=date(2025, 3, 6)),
            make_task("125", priority="low", hours=1, deps=["123", "124"], due=date(2025, 3, 8)),
        ]
    )


@pytest.fixture
def store(tmp_path: Path) -> ScheduleStore:
    return ScheduleStore(tmp_path / "docs" / "schedule.json", clock=fixed_clock)


@pytest.fixture
def service(
    config: SchedulerConfig, source: InMemoryTaskSource, store: ScheduleStore
) -> SchedulerService:
    return SchedulerService(config, source, store, today=TODAY, clock=fixed_clock)
