"""Scheduler package - dependency-aware task scheduling.

This package provides:
- ScheduleBuilder: greedy list scheduler with per-day start capacity
- Reconciler: resyncs a stored schedule with the live task list
- ReminderEngine: deadline, overdue and blocked reminders
- Monitor: periodic reconcile-and-remind loop
- SchedulerService: one-shot operations wired to a task source and a store
"""

from .builder import BuildResult, ScheduleBuilder
from .capacity import DailyCapacity
from .monitor import Monitor, MonitorState
from .reconciler import Reconciler, ReconcileResult
from .reminders import ReminderEngine, format_reminder
from .service import SchedulerService

__all__ = [
    "BuildResult",
    "DailyCapacity",
    "Monitor",
    "MonitorState",
    "ReconcileResult",
    "Reconciler",
    "ReminderEngine",
    "ScheduleBuilder",
    "SchedulerService",
    "format_reminder",
]
