"""Daily start-capacity tracking."""

from collections import Counter
from datetime import date, timedelta

from taskplan.logger import debug_enabled, get_logger

logger = get_logger()


class DailyCapacity:
    """Counts how many tasks start on each calendar day.

    A day has capacity while fewer than ``max_per_day`` tasks start on it.
    Searching for a free day is bounded by ``horizon_days``; past the horizon
    the task is placed on the cap day regardless of load.
    """

    def __init__(self, max_per_day: int, horizon_days: int) -> None:
        """Initialize an empty ledger.

        Args:
            max_per_day: Maximum number of tasks allowed to start on one day
            horizon_days: Number of days scanned before giving up and force-placing
        """
        self.max_per_day = max_per_day
        self.horizon_days = horizon_days
        self._starts: Counter[date] = Counter()

    def has_capacity(self, day: date) -> bool:
        return self._starts[day] < self.max_per_day

    def find_slot(self, earliest: date) -> tuple[date, bool]:
        """Find the first day at or after ``earliest`` with capacity.

        Args:
            earliest: First day the task may start

        Returns:
            Tuple of (day, within_horizon). When every day in the horizon is full,
            returns the cap day (``earliest + horizon_days``) and False.
        """
        for offset in range(self.horizon_days):
            candidate = earliest + timedelta(days=offset)
            if self.has_capacity(candidate):
                if debug_enabled() and offset:
                    logger.debug(f"    Skipped {offset} full day(s) after {earliest}")
                return candidate, True
        return earliest + timedelta(days=self.horizon_days), False

    def reserve(self, day: date) -> None:
        """Record one more task starting on ``day``."""
        self._starts[day] += 1

    def busiest_days(self) -> list[tuple[date, int]]:
        """Days with reservations, busiest first (ties in calendar order)."""
        return sorted(self._starts.items(), key=lambda item: (-item[1], item[0]))
