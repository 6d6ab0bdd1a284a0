"""Reminder generation from a schedule."""

from __future__ import annotations

from datetime import date

from taskplan.config import SchedulerConfig
from taskplan.models import Reminder, ReminderType, Schedule, ScheduledTask

REMINDER_ICONS = {
    ReminderType.DEADLINE: "⏰",
    ReminderType.OVERDUE: "🚨",
    ReminderType.BLOCKED: "🔒",
}


class ReminderEngine:
    """Derives deadline, overdue and blocked reminders from a schedule.

    Evaluation has no side effects; the same schedule and day always give the
    same reminders. Completed tasks never raise reminders.
    """

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        self.config = config or SchedulerConfig()

    def evaluate(self, schedule: Schedule, today: date) -> list[Reminder]:
        """Collect reminders for every task in schedule order.

        A task can raise more than one reminder (e.g. overdue and blocked).
        """
        names = {task.id: task.name for task in schedule.tasks}
        reminders: list[Reminder] = []

        for task in schedule.tasks:
            if task.is_completed:
                continue

            due_reminder = self._due_reminder(task, today)
            if due_reminder is not None:
                reminders.append(due_reminder)

            if task.blocked_by:
                # Blockers missing from the schedule are named by id
                blockers = [names.get(blocker_id) or blocker_id for blocker_id in task.blocked_by]
                reminders.append(
                    Reminder(
                        type=ReminderType.BLOCKED,
                        task=task,
                        message=f"{_describe(task)} is blocked by: {', '.join(blockers)}",
                        blockers=blockers,
                    )
                )

        return reminders

    def _due_reminder(self, task: ScheduledTask, today: date) -> Reminder | None:
        if task.due_date is None:
            return None

        days_until_due = (task.due_date - today).days
        if days_until_due < 0:
            days_overdue = -days_until_due
            return Reminder(
                type=ReminderType.OVERDUE,
                task=task,
                message=f"{_describe(task)} is overdue by {_days(days_overdue)}!",
                days=days_overdue,
            )

        if days_until_due <= self.config.reminder_threshold_days:
            if days_until_due == 0:
                when = "today"
            elif days_until_due == 1:
                when = "tomorrow"
            else:
                when = f"in {days_until_due} days"
            return Reminder(
                type=ReminderType.DEADLINE,
                task=task,
                message=f"{_describe(task)} is due {when}!",
                days=days_until_due,
            )

        return None


def format_reminder(reminder: Reminder) -> str:
    """One-line console rendering of a reminder."""
    return f"{REMINDER_ICONS[reminder.type]} {reminder.message}"


def _describe(task: ScheduledTask) -> str:
    return f'Task "{task.name or task.id}" (ID: {task.id})'


def _days(count: int) -> str:
    return "1 day" if count == 1 else f"{count} days"
