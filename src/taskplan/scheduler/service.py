"""High-level scheduling service."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from taskplan.config import SchedulerConfig
from taskplan.exceptions import SourceUnavailableError
from taskplan.graph import assert_acyclic
from taskplan.logger import get_logger
from taskplan.models import Reminder, Schedule, Task
from taskplan.sources import JsonFileTaskSource, TaskSource
from taskplan.store import ScheduleStore, utc_now

from .builder import BuildResult, ScheduleBuilder
from .reconciler import Reconciler, ReconcileResult
from .reminders import ReminderEngine

logger = get_logger()


class SchedulerService:
    """Wires the task source, builder, reconciler, reminders and store together.

    Each public method is one run-to-completion operation (generate, remind,
    recalculate, export, import). File-system problems are logged and reported
    through return values instead of exceptions.
    """

    def __init__(  # noqa: PLR0913 - collaborators are injected for testing
        self,
        config: SchedulerConfig,
        source: TaskSource,
        store: ScheduleStore | None = None,
        *,
        today: date | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the service.

        Args:
            config: Scheduler configuration
            source: Where live tasks are read from
            store: Snapshot store (defaults to one at config.schedule_path)
            today: Fixed scheduling date (defaults to the current date on every call)
            clock: Source of timestamps for ``lastUpdated``
        """
        self.config = config
        self.source = source
        self.clock = clock
        self.store = store or ScheduleStore(config.schedule_path, clock=clock)
        self.fixed_today = today
        self.builder = ScheduleBuilder(config)
        self.reconciler = Reconciler(self.builder)
        self.reminder_engine = ReminderEngine(config)

    @classmethod
    def from_config(
        cls, config: SchedulerConfig, *, today: date | None = None
    ) -> SchedulerService:
        """Create a service reading tasks from ``config.tasks_path``."""
        return cls(config, JsonFileTaskSource(config.tasks_path), today=today)

    def today(self) -> date:
        return self.fixed_today or date.today()  # noqa: DTZ011

    def fetch_tasks(self) -> list[Task]:
        """Read live tasks; an unavailable source counts as an empty task list."""
        tasks = self._read_source()
        return tasks if tasks is not None else []

    def build(self) -> BuildResult:
        """Build a fresh schedule from the task source without saving it."""
        return self.builder.build(self.fetch_tasks(), self.today(), now=self.clock())

    def generate(self) -> bool:
        """Build a fresh schedule from the task source and save it."""
        result = self.build()
        return self.store.save(result.schedule)

    def load_schedule(self) -> Schedule:
        """Return the saved schedule, building and saving one when none is usable."""
        schedule = self.store.load()
        if schedule is not None:
            return schedule

        logger.changes("No usable schedule snapshot; generating one from the task source")
        schedule = self.build().schedule
        self.store.save(schedule)
        return schedule

    def recalculate(self) -> ReconcileResult | None:
        """Reconcile the saved schedule with the task source, saving it if anything changed.

        Returns:
            ReconcileResult, or None if the changed schedule could not be saved
        """
        schedule = self.load_schedule()
        live_tasks = self._read_source()
        if live_tasks is None:
            # Reconciling against an empty list would delete every task
            logger.warning("Task source unavailable; schedule left unchanged")
            return ReconcileResult(schedule=schedule, changed=False)

        result = self.reconciler.reconcile(live_tasks, schedule, self.today(), now=self.clock())
        if not result.changed:
            logger.changes("No changes needed to the schedule")
            return result

        if not self.store.save(result.schedule):
            return None
        logger.changes("Schedule recalculated")
        return result

    def reminders(self, schedule: Schedule | None = None) -> list[Reminder]:
        """Reminders for ``schedule`` (defaults to the saved schedule)."""
        if schedule is None:
            schedule = self.load_schedule()
        return self.reminder_engine.evaluate(schedule, self.today())

    def export_schedule(self, path: Path | str) -> bool:
        return self.store.export_to(self.load_schedule(), path)

    def import_schedule(self, path: Path | str) -> bool:
        """Replace the saved schedule with the snapshot at ``path`` (no reconciliation)."""
        return self.store.import_from(path) is not None

    def check_dependencies(self) -> None:
        """Verify the live tasks have no circular dependencies.

        Raises:
            CircularDependencyError: Listing every cycle found
        """
        assert_acyclic({task.id: task.dependencies for task in self.fetch_tasks()})

    def _read_source(self) -> list[Task] | None:
        try:
            return self.source.list_tasks()
        except SourceUnavailableError as e:
            logger.warning(str(e))
            return None
