"""Tests for reminder generation."""

from datetime import timedelta

from taskplan.config import SchedulerConfig
from taskplan.models import ReminderType, Schedule, ScheduledTask
from taskplan.scheduler import ReminderEngine, ScheduleBuilder, format_reminder
from tests.conftest import TODAY, make_task


def scheduled(task_id: str, **kwargs: object) -> ScheduledTask:
    blocked_by = kwargs.pop("blocked_by", [])
    task = ScheduledTask.from_task(make_task(task_id, **kwargs))  # type: ignore[arg-type]
    task.blocked_by = list(blocked_by)  # type: ignore[call-overload]
    return task


class TestDueReminders:
    """Deadline and overdue reminders."""

    def test_due_tomorrow_emits_one_deadline_reminder(self) -> None:
        schedule = Schedule(tasks=[scheduled("a", due=TODAY + timedelta(days=1))])

        reminders = ReminderEngine(SchedulerConfig(reminder_threshold_days=2)).evaluate(
            schedule, TODAY
        )

        assert len(reminders) == 1
        assert reminders[0].type == ReminderType.DEADLINE
        assert reminders[0].days == 1
        assert "due tomorrow" in reminders[0].message

    def test_due_yesterday_emits_one_overdue_reminder(self) -> None:
        schedule = Schedule(tasks=[scheduled("a", due=TODAY - timedelta(days=1))])

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert len(reminders) == 1
        assert reminders[0].type == ReminderType.OVERDUE
        assert reminders[0].days_overdue == 1
        assert "overdue by 1 day!" in reminders[0].message

    def test_due_today_is_a_deadline(self) -> None:
        schedule = Schedule(tasks=[scheduled("a", name="Ship it", due=TODAY)])

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert [r.type for r in reminders] == [ReminderType.DEADLINE]
        assert reminders[0].message == 'Task "Ship it" (ID: a) is due today!'

    def test_threshold_boundary(self) -> None:
        schedule = Schedule(
            tasks=[
                scheduled("edge", due=TODAY + timedelta(days=2)),
                scheduled("beyond", due=TODAY + timedelta(days=3)),
                scheduled("undated"),
            ]
        )

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert [r.task.id for r in reminders] == ["edge"]
        assert "due in 2 days" in reminders[0].message

    def test_completed_tasks_are_skipped(self) -> None:
        schedule = Schedule(
            tasks=[
                scheduled(
                    "done",
                    status="completed",
                    due=TODAY - timedelta(days=4),
                    blocked_by=["x"],
                )
            ]
        )

        assert ReminderEngine().evaluate(schedule, TODAY) == []


class TestBlockedReminders:
    """Blocked reminders name their blockers."""

    def test_blockers_named_with_id_fallback(self) -> None:
        schedule = Schedule(
            tasks=[
                scheduled("a", name="Write handlers"),
                scheduled("b", blocked_by=["a", "ghost"]),
            ]
        )

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert len(reminders) == 1
        assert reminders[0].type == ReminderType.BLOCKED
        assert reminders[0].blockers == ["Write handlers", "ghost"]
        assert reminders[0].message.endswith("is blocked by: Write handlers, ghost")

    def test_task_can_be_overdue_and_blocked(self) -> None:
        schedule = Schedule(
            tasks=[
                scheduled("a"),
                scheduled("b", due=TODAY - timedelta(days=3), blocked_by=["a"]),
            ]
        )

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert [(r.task.id, r.type) for r in reminders] == [
            ("b", ReminderType.OVERDUE),
            ("b", ReminderType.BLOCKED),
        ]
        assert reminders[0].days == 3

    def test_reminders_from_built_schedule(self, builder: ScheduleBuilder) -> None:
        tasks = [
            make_task("123", priority="high", due=TODAY + timedelta(days=1)),
            make_task("124", deps=["123"], due=TODAY + timedelta(days=3)),
        ]
        schedule = builder.build(tasks, TODAY).schedule

        reminders = ReminderEngine().evaluate(schedule, TODAY)

        assert [(r.task.id, r.type) for r in reminders] == [
            ("123", ReminderType.DEADLINE),
            ("124", ReminderType.BLOCKED),
        ]


def test_format_reminder_adds_icon() -> None:
    schedule = Schedule(tasks=[scheduled("a", due=TODAY - timedelta(days=2))])
    reminder = ReminderEngine().evaluate(schedule, TODAY)[0]

    assert format_reminder(reminder) == f"🚨 {reminder.message}"
    assert reminder.message.endswith("is overdue by 2 days!")
