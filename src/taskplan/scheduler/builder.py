"""Greedy list scheduler that turns a task list into a calendar schedule."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from taskplan.config import SchedulerConfig
from taskplan.graph import find_cycles, topological_order
from taskplan.logger import checks_enabled, get_logger
from taskplan.models import Schedule, ScheduledTask, Task

from .capacity import DailyCapacity

logger = get_logger()

# Sort position for tasks without a due date
NO_DUE_DATE = date.max

# Longest span a single task may occupy (ten years)
MAX_DURATION_DAYS = 3650


def _default_str_list() -> list[str]:
    return []


@dataclass
class BuildResult:
    """Schedule produced by a build plus any non-fatal problems found on the way."""

    schedule: Schedule
    warnings: list[str] = field(default_factory=_default_str_list)


class ScheduleBuilder:
    """Places tasks on calendar days, one at a time, in dependency order.

    This builder:
    1. Orders tasks topologically over their dependencies; ready tasks are taken
       by priority weight (highest first), then due date, then id
    2. Stamps completed tasks with their completion date and leaves them out of
       capacity accounting
    3. Starts every other task on the first day after its incomplete
       dependencies end (never before today) that still has start capacity
    4. Derives the end date from estimated hours and productive hours per day

    The result depends only on the tasks, the config and ``today``, so
    rebuilding an unchanged task set gives an identical schedule.
    """

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        self.config = config or SchedulerConfig()

    def build(
        self,
        tasks: Sequence[Task],
        today: date,
        now: datetime | None = None,
    ) -> BuildResult:
        """Build a schedule for ``tasks``.

        Args:
            tasks: Full task set; ScheduledTask instances are accepted and re-derived
            today: Earliest day any open task may start
            now: Timestamp recorded as the schedule's ``lastUpdated``

        Returns:
            BuildResult with the schedule (tasks in placement order) and warnings
        """
        warnings: list[str] = []
        tasks_by_id = self._index_tasks(tasks, warnings)
        self._check_dangling_dependencies(tasks_by_id, warnings)

        order = self._order_tasks(tasks_by_id, warnings)

        capacity = self._new_capacity()
        placed: dict[str, ScheduledTask] = {}

        for task_id in order:
            task = tasks_by_id[task_id]
            scheduled = ScheduledTask.from_task(task)
            if task.is_completed:
                finished = task.completed_date or today
                scheduled.completed_date = finished
                scheduled.start_date = finished
                scheduled.end_date = finished
                if checks_enabled():
                    logger.checks(f"  {task_id}: completed on {finished}")
                placed[task_id] = scheduled
                continue

            scheduled.blocked_by = [
                dep_id
                for dep_id in task.dependencies
                if dep_id != task_id
                and dep_id in tasks_by_id
                and not tasks_by_id[dep_id].is_completed
            ]
            earliest = self._earliest_start(scheduled, placed, today)
            start, within_horizon = capacity.find_slot(earliest)
            if not within_horizon:
                message = (
                    f"Task '{task_id}' found no free day within {capacity.horizon_days} days "
                    f"of {earliest}; placed on {start}"
                )
                logger.warning(message)
                warnings.append(message)
            capacity.reserve(start)

            duration = self.duration_days(task)
            if duration == MAX_DURATION_DAYS:
                message = (
                    f"Task '{task_id}' estimate of {task.estimated_hours} hours is too long; "
                    f"capped at {MAX_DURATION_DAYS} days"
                )
                logger.warning(message)
                warnings.append(message)
            scheduled.start_date = start
            scheduled.end_date = start + timedelta(days=duration - 1)
            if checks_enabled():
                logger.checks(
                    f"  {task_id}: {scheduled.start_date} -> {scheduled.end_date}"
                    f" (earliest {earliest}, priority {task.priority.value})"
                )
            placed[task_id] = scheduled

        schedule = Schedule(tasks=[placed[task_id] for task_id in order], last_updated=now)
        open_count = sum(1 for task in schedule.tasks if not task.is_completed)
        logger.changes(
            f"Scheduled {open_count} open task(s), {len(schedule.tasks) - open_count} completed"
        )
        busiest = capacity.busiest_days()
        if busiest:
            logger.debug(f"Busiest start day: {busiest[0][0]} ({busiest[0][1]} task(s))")
        return BuildResult(schedule=schedule, warnings=warnings)

    def duration_days(self, task: Task) -> int:
        """Whole working days needed for a task, between one and MAX_DURATION_DAYS."""
        hours = task.estimated_hours
        if hours is None or not math.isfinite(hours) or hours <= 0:
            hours = self.config.default_estimated_hours
        days = hours / self.config.productive_hours_per_day
        if days >= MAX_DURATION_DAYS:
            return MAX_DURATION_DAYS
        return max(1, math.ceil(days))

    def sort_key(self, task: Task) -> tuple[int, date, str]:
        """Tie-break key for tasks that are ready at the same time (smallest first)."""
        return (
            -self.config.priority_weight(task.priority.value),
            task.due_date or NO_DUE_DATE,
            task.id,
        )

    def _new_capacity(self) -> DailyCapacity:
        return DailyCapacity(self.config.max_tasks_per_day, self.config.horizon_days)

    def _index_tasks(self, tasks: Sequence[Task], warnings: list[str]) -> dict[str, Task]:
        tasks_by_id: dict[str, Task] = {}
        for task in tasks:
            if task.id in tasks_by_id:
                message = f"Duplicate task id '{task.id}'; keeping the first occurrence"
                logger.warning(message)
                warnings.append(message)
                continue
            tasks_by_id[task.id] = task
        return tasks_by_id

    def _check_dangling_dependencies(
        self, tasks_by_id: dict[str, Task], warnings: list[str]
    ) -> None:
        """Warn about dependencies on ids that are not in the task set.

        Such dependencies place no constraint on scheduling and never block.
        """
        for task in tasks_by_id.values():
            missing = [dep_id for dep_id in task.dependencies if dep_id not in tasks_by_id]
            if missing:
                message = (
                    f"Task '{task.id}' depends on unknown task(s) {', '.join(missing)}; ignored"
                )
                logger.warning(message)
                warnings.append(message)

    def _order_tasks(self, tasks_by_id: dict[str, Task], warnings: list[str]) -> list[str]:
        graph = {task_id: task.dependencies for task_id, task in tasks_by_id.items()}
        order, leftover = topological_order(
            graph, key=lambda task_id: self.sort_key(tasks_by_id[task_id])
        )
        if leftover:
            cyclic = {task_id: graph[task_id] for task_id in leftover}
            for cycle in find_cycles(cyclic):
                message = f"Circular dependency {' -> '.join(cycle)}; scheduling in priority order"
                logger.warning(message)
                warnings.append(message)
            order.extend(leftover)
        return order

    def _earliest_start(
        self, task: ScheduledTask, placed: dict[str, ScheduledTask], today: date
    ) -> date:
        """The day after the latest-ending incomplete dependency, but never before today."""
        earliest = today
        for dep_id in task.blocked_by:
            dependency = placed.get(dep_id)
            # Unplaced dependencies only occur inside a cycle
            if dependency is None or dependency.end_date is None:
                continue
            earliest = max(earliest, dependency.end_date + timedelta(days=1))
        return earliest
