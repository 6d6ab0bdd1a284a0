"""Schedule snapshot persistence, export and import.

Snapshots are JSON files of the form
``{"tasks": [...], "lastUpdated": "<ISO-8601>"}``. Writes replace the whole
file through a temporary file in the same directory, so a failed write never
leaves a half-written snapshot behind.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .exceptions import MalformedSnapshotError, PersistenceError
from .logger import get_logger
from .models import Schedule

logger = get_logger()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def read_snapshot(path: Path | str) -> Schedule:
    """Parse a schedule snapshot file.

    Args:
        path: Snapshot file to read

    Returns:
        The schedule exactly as stored

    Raises:
        PersistenceError: If the file cannot be read
        MalformedSnapshotError: If the file is not a valid snapshot
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceError(f"Cannot read schedule file {path}: {e}", path) from e

    try:
        return Schedule.from_json(text)
    except ValidationError as e:
        raise MalformedSnapshotError(
            f"Schedule file {path} is not a valid snapshot: {e.error_count()} error(s), "
            f"first: {e.errors()[0]['msg']}",
            path,
        ) from e


def write_snapshot(path: Path | str, schedule: Schedule) -> None:
    """Write a schedule snapshot, replacing the file atomically.

    Raises:
        PersistenceError: If the directory or file cannot be written
    """
    path = Path(path)
    payload = schedule.to_json()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise PersistenceError(f"Cannot write schedule file {path}: {e}", path) from e


class ScheduleStore:
    """Loads and saves the current schedule snapshot.

    Read and write failures are logged and reported through return values;
    nothing here raises for a file-system problem.
    """

    def __init__(self, path: Path | str, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize the store.

        Args:
            path: Location of the current schedule snapshot
            clock: Source of the ``lastUpdated`` timestamp stamped on save
        """
        self.path = Path(path)
        self.clock = clock

    def load(self) -> Schedule | None:
        """Return the saved schedule, or None when there is no usable snapshot.

        A missing, unreadable or malformed snapshot all yield None; the latter two
        are logged.
        """
        if not self.path.exists():
            logger.checks(f"No schedule snapshot at {self.path}")
            return None
        try:
            return read_snapshot(self.path)
        except MalformedSnapshotError as e:
            logger.warning(f"{e}; ignoring it")
        except PersistenceError as e:
            logger.warning(str(e))
        return None

    def save(self, schedule: Schedule) -> bool:
        """Stamp ``lastUpdated`` and overwrite the snapshot.

        Returns:
            True on success, False if the file could not be written
        """
        schedule.last_updated = self.clock()
        try:
            write_snapshot(self.path, schedule)
        except PersistenceError as e:
            logger.error(str(e))
            return False
        logger.changes(f"Schedule saved to {self.path}")
        return True

    def export_to(self, schedule: Schedule, path: Path | str) -> bool:
        """Write ``schedule`` verbatim to ``path``.

        Returns:
            True on success, False if the file could not be written
        """
        try:
            write_snapshot(path, schedule)
        except PersistenceError as e:
            logger.error(str(e))
            return False
        logger.changes(f"Schedule exported to {path}")
        return True

    def import_from(self, path: Path | str) -> Schedule | None:
        """Replace the current snapshot with the one stored at ``path``.

        No reconciliation is done; run the reconciler afterwards to resync
        against the task source.

        Returns:
            The imported schedule, or None if it could not be read or saved
        """
        path = Path(path)
        if not path.exists():
            logger.error(f"File not found: {path}")
            return None
        try:
            schedule = read_snapshot(path)
        except PersistenceError as e:
            logger.error(str(e))
            return None

        if not self.save(schedule):
            return None
        logger.changes(f"Schedule imported from {path}")
        return schedule
