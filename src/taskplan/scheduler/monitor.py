"""Periodic reconcile-and-remind loop."""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

from taskplan.exceptions import MonitorBusyError, TaskplanError
from taskplan.logger import get_logger
from taskplan.models import Reminder

from .reminders import format_reminder

if TYPE_CHECKING:
    from .service import SchedulerService

logger = get_logger()

SECONDS_PER_MINUTE = 60


class MonitorState(str, Enum):
    """Monitor states."""

    IDLE = "idle"
    RUNNING_CYCLE = "running-cycle"


def log_reminders(reminders: list[Reminder]) -> None:
    """Default reminder sink: one warning line per reminder."""
    if not reminders:
        logger.changes("No reminders to send.")
        return
    for reminder in reminders:
        logger.warning(format_reminder(reminder))


class Monitor:
    """Runs reconciliation followed by reminders on a fixed interval.

    The loop sleeps in the calling thread between cycles, so a cycle always
    finishes before the next one can begin. There is no stop condition other
    than ``max_cycles`` or the process being interrupted.
    """

    def __init__(
        self,
        service: SchedulerService,
        interval_minutes: int | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        on_reminders: Callable[[list[Reminder]], None] = log_reminders,
    ) -> None:
        """Initialize the monitor.

        Args:
            service: Service whose recalculate/reminders operations are run each cycle
            interval_minutes: Minutes between cycles (defaults to config.monitor_interval_minutes)
            sleep: Sleep function, replaceable for tests
            on_reminders: Receives the reminders produced by each cycle
        """
        self.service = service
        self.interval_minutes = interval_minutes or service.config.monitor_interval_minutes
        self.sleep = sleep
        self.on_reminders = on_reminders
        self.state = MonitorState.IDLE
        self.cycles_run = 0

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * SECONDS_PER_MINUTE

    def run_cycle(self) -> list[Reminder]:
        """Run one reconcile + remind cycle.

        Any error raised by the cycle is logged and the loop keeps going.

        Returns:
            Reminders emitted by this cycle (empty if the cycle failed)

        Raises:
            MonitorBusyError: If called while a cycle is already running
        """
        if self.state is MonitorState.RUNNING_CYCLE:
            raise MonitorBusyError("A monitor cycle is already running")

        self.state = MonitorState.RUNNING_CYCLE
        reminders: list[Reminder] = []
        try:
            result = self.service.recalculate()
            schedule = result.schedule if result is not None else None
            reminders = self.service.reminders(schedule)
            self.on_reminders(reminders)
        except TaskplanError as e:
            logger.error(f"Monitor cycle failed: {e}")
        except Exception:
            logger.exception("Monitor cycle failed unexpectedly")
        finally:
            self.cycles_run += 1
            self.state = MonitorState.IDLE
        return reminders

    def start(self, max_cycles: int | None = None) -> None:
        """Run a cycle immediately, then one every interval.

        Args:
            max_cycles: Stop after this many cycles (runs forever when None)
        """
        logger.changes(
            f"Starting schedule monitor (checking every {self.interval_minutes} minutes)"
        )
        started = self.cycles_run
        while True:
            self.run_cycle()
            if max_cycles is not None and self.cycles_run - started >= max_cycles:
                return
            self.sleep(self.interval_seconds)
            logger.changes(f"[{time.strftime('%H:%M:%S')}] Running scheduled check...")
