"""Reconciliation of a stored schedule against the live task list."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from taskplan.logger import get_logger
from taskplan.models import Schedule, ScheduledTask, Task

from .builder import ScheduleBuilder

logger = get_logger()

# Fields the task source is authoritative for; copied into the schedule on drift
SOURCE_OWNED_FIELDS = (
    "name",
    "status",
    "priority",
    "due_date",
    "estimated_hours",
    "dependencies",
    "assigned_to",
)


def _default_str_list() -> list[str]:
    return []


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation."""

    schedule: Schedule
    changed: bool
    added: list[str] = field(default_factory=_default_str_list)
    removed: list[str] = field(default_factory=_default_str_list)
    updated: list[str] = field(default_factory=_default_str_list)
    warnings: list[str] = field(default_factory=_default_str_list)


class Reconciler:
    """Brings a stored schedule in line with the live task list.

    Status and the other source-owned fields are copied forward, newly
    completed tasks get a completion date, new tasks are added and vanished
    tasks are deleted. When anything changed, the whole schedule is rebuilt;
    when nothing changed, the schedule is left untouched.
    """

    def __init__(self, builder: ScheduleBuilder) -> None:
        self.builder = builder

    def reconcile(
        self,
        live_tasks: Sequence[Task],
        schedule: Schedule,
        today: date,
        now: datetime | None = None,
    ) -> ReconcileResult:
        """Apply live task state to ``schedule``, rebuilding it in place if anything drifted.

        Args:
            live_tasks: Current tasks from the task source
            schedule: Stored schedule; mutated only when something changed
            today: Date used for completion stamps and rebuilding
            now: Timestamp recorded on a rebuilt schedule

        Returns:
            ReconcileResult describing what changed
        """
        live_by_id = {task.id: task for task in live_tasks}
        stored_by_id = {task.id: task for task in schedule.tasks}

        reconciled: list[ScheduledTask] = []
        added: list[str] = []
        updated: list[str] = []

        for stored in schedule.tasks:
            live = live_by_id.get(stored.id)
            if live is None:
                continue
            changes = self._drift(stored, live, today)
            if changes:
                updated.append(stored.id)
                reconciled.append(stored.model_copy(update=changes))
            else:
                reconciled.append(stored)

        for live in live_tasks:
            if live.id not in stored_by_id:
                added.append(live.id)
                reconciled.append(self._new_entry(live, today))

        removed = [task_id for task_id in stored_by_id if task_id not in live_by_id]

        if not (added or removed or updated):
            logger.checks("Schedule matches the task source; nothing to reconcile")
            return ReconcileResult(schedule=schedule, changed=False)

        for task_id in added:
            logger.changes(f"Added task '{task_id}'")
        for task_id in removed:
            logger.changes(f"Removed task '{task_id}'")
        for task_id in updated:
            logger.changes(f"Updated task '{task_id}'")

        build = self.builder.build(reconciled, today, now=now)
        schedule.tasks = build.schedule.tasks
        if now is not None:
            schedule.last_updated = now

        return ReconcileResult(
            schedule=schedule,
            changed=True,
            added=added,
            removed=removed,
            updated=updated,
            warnings=build.warnings,
        )

    def _drift(self, stored: ScheduledTask, live: Task, today: date) -> dict[str, Any]:
        """Field updates needed to bring ``stored`` up to date with ``live``."""
        changes: dict[str, Any] = {}
        for name in SOURCE_OWNED_FIELDS:
            live_value = getattr(live, name)
            if getattr(stored, name) != live_value:
                changes[name] = list(live_value) if isinstance(live_value, list) else live_value

        if live.is_completed:
            if live.completed_date is not None and live.completed_date != stored.completed_date:
                changes["completed_date"] = live.completed_date
            elif stored.completed_date is None:
                changes["completed_date"] = today
        elif stored.completed_date is not None and live.completed_date is None:
            # Reopened task
            changes["completed_date"] = None

        return changes

    def _new_entry(self, live: Task, today: date) -> ScheduledTask:
        entry = ScheduledTask.from_task(live)
        if entry.is_completed and entry.completed_date is None:
            entry.completed_date = today
        return entry
