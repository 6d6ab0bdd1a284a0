"""Data models for taskplan.

Task records come from a task source and use camelCase keys on the wire
(``dueDate``, ``estimatedHours``...). The pydantic models below expose them as
snake_case attributes and serialize back to the same camelCase keys, so a
schedule snapshot written by one version can be read back verbatim.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_ESTIMATED_HOURS = 4.0

# Date strings longer than this carry a time part ("2025-01-31T00:00:00.000Z")
ISO_DATE_LENGTH = 10


class TaskStatus(str, Enum):
    """Workflow state of a task."""

    TODO = "todo"
    PENDING = "pending"  # Emitted by older task providers; same meaning as todo
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class Priority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReminderType(str, Enum):
    """Kinds of reminders raised from a schedule."""

    DEADLINE = "deadline"
    OVERDUE = "overdue"
    BLOCKED = "blocked"


def parse_calendar_date(value: Any) -> date | None:
    """Parse a calendar date, accepting full ISO timestamps by dropping the time part."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > ISO_DATE_LENGTH:
        text = text[:ISO_DATE_LENGTH]
    return date.fromisoformat(text)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class Task(_CamelModel):
    """A unit of work as reported by the task source.

    Fields the scheduler does not know about are kept as extras and written
    back unchanged.
    """

    id: str
    name: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    due_date: date | None = None
    estimated_hours: float | None = DEFAULT_ESTIMATED_HOURS
    dependencies: list[str] = []
    assigned_to: str | None = None
    completed_date: date | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Task ids are strings even when the source stores them as numbers."""
        if v is None:
            raise ValueError("task id is required")
        return str(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("status", "priority", mode="before")
    @classmethod
    def normalize_enum_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("due_date", "completed_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> date | None:
        return parse_calendar_date(v)

    @field_validator("estimated_hours")
    @classmethod
    def require_finite_hours(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError("estimated hours must be a finite number")
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_dependency_list(cls, v: Any) -> list[str]:
        """Accept a single id or any iterable of ids; drop duplicates, keep order."""
        if v is None:
            return []
        items = [v] if isinstance(v, (str, int)) else list(v)
        seen: dict[str, None] = {}
        for item in items:
            seen.setdefault(str(item), None)
        return list(seen)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


_SCHEDULE_ONLY_FIELDS = {"start_date", "end_date", "blocked_by"}


class ScheduledTask(Task):
    """A task annotated with its computed calendar slot.

    ``start_date`` is None until the task has been placed. Once placed,
    ``start_date <= end_date`` and the task starts strictly after every
    incomplete dependency ends.
    """

    start_date: date | None = None
    end_date: date | None = None
    blocked_by: list[str] = []

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_slot_dates(cls, v: Any) -> date | None:
        return parse_calendar_date(v)

    @classmethod
    def from_task(cls, task: Task) -> ScheduledTask:
        """Create an unscheduled shell (no dates, nothing blocking) for a task."""
        data = task.model_dump(by_alias=True)
        for name in _SCHEDULE_ONLY_FIELDS:
            data.pop(to_camel(name), None)
        return cls.model_validate(data)

    def to_task(self) -> Task:
        """Strip the computed fields, leaving the task as the source would report it."""
        return Task.model_validate(self.model_dump(by_alias=True, exclude=_SCHEDULE_ONLY_FIELDS))

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None


class Schedule(_CamelModel):
    """Ordered collection of scheduled tasks plus the time it was last saved."""

    tasks: list[ScheduledTask] = []
    last_updated: datetime | None = None

    def get(self, task_id: str) -> ScheduledTask | None:
        """Look up a task by id."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def task_ids(self) -> list[str]:
        return [task.id for task in self.tasks]

    def to_json(self) -> str:
        """Serialize to the snapshot file format (camelCase keys, ISO dates)."""
        return self.model_dump_json(by_alias=True, indent=2) + "\n"

    @classmethod
    def from_json(cls, text: str | bytes) -> Schedule:
        """Parse a snapshot produced by ``to_json``.

        Raises:
            pydantic.ValidationError: If the text is not valid JSON or has the wrong shape
        """
        return cls.model_validate_json(text)


@dataclass(frozen=True)
class Reminder:
    """A reminder raised for a scheduled task. Never persisted."""

    type: ReminderType
    task: ScheduledTask
    message: str
    # Days until due for deadline reminders, days overdue for overdue reminders
    days: int | None = None
    blockers: list[str] = field(default_factory=list)

    @property
    def days_overdue(self) -> int | None:
        return self.days if self.type == ReminderType.OVERDUE else None
