"""Task sources: where the scheduler reads the live task list from.

The scheduler only ever reads from a source. Any object with a
``list_tasks()`` method returning Task models can be used.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .exceptions import SourceUnavailableError
from .logger import get_logger
from .models import Task

logger = get_logger()


class TaskSource(Protocol):
    """Protocol for task providers."""

    def list_tasks(self) -> list[Task]:
        """Return every task currently known to the provider.

        Raises:
            SourceUnavailableError: If the provider cannot be read
        """
        ...


class JsonFileTaskSource:
    """Reads tasks from a JSON file holding an array of task records.

    A missing file means there are no tasks yet. Records that do not validate
    are skipped with a warning so one bad entry does not hide the rest.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def list_tasks(self) -> list[Task]:
        if not self.path.exists():
            logger.checks(f"Task file {self.path} does not exist; no tasks")
            return []

        try:
            raw: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailableError(f"Cannot read task file {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SourceUnavailableError(f"Task file {self.path} is not valid JSON: {e}") from e

        # Accept both a bare list and {"tasks": [...]}
        if isinstance(raw, dict) and "tasks" in raw:
            raw = raw["tasks"]  # type: ignore[index]
        if not isinstance(raw, list):
            raise SourceUnavailableError(
                f"Task file {self.path} must contain a JSON array of tasks, "
                f"got {type(raw).__name__}"
            )

        return _validate_records(raw, origin=str(self.path))  # type: ignore[arg-type]


class InMemoryTaskSource:
    """Task source backed by a list in memory, for tests and embedding."""

    def __init__(self, tasks: Iterable[Task | dict[str, Any]] = ()) -> None:
        self._tasks: list[Task] = []
        self.set_tasks(tasks)

    def set_tasks(self, tasks: Iterable[Task | dict[str, Any]]) -> None:
        """Replace the whole task list."""
        self._tasks = [
            task.model_copy(deep=True) if isinstance(task, Task) else Task.model_validate(task)
            for task in tasks
        ]

    def update_task(self, task_id: str, **changes: Any) -> Task:
        """Change fields of one task, as an external tool editing the tracker would.

        Raises:
            KeyError: If no task has the given id
        """
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                data = task.model_dump()
                data.update(changes)
                updated = Task.model_validate(data)
                self._tasks[index] = updated
                return updated
        raise KeyError(task_id)

    def remove_task(self, task_id: str) -> None:
        self._tasks = [task for task in self._tasks if task.id != task_id]

    def list_tasks(self) -> list[Task]:
        return [task.model_copy(deep=True) for task in self._tasks]


def _validate_records(records: list[Any], origin: str) -> list[Task]:
    tasks: list[Task] = []
    seen_ids: set[str] = set()
    for index, record in enumerate(records):
        try:
            task = Task.model_validate(record)
        except ValidationError as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning(
                f"Skipping invalid task record #{index} (id={record_id!r}) in {origin}: "
                f"{e.error_count()} validation error(s)"
            )
            continue
        if task.id in seen_ids:
            logger.warning(f"Skipping duplicate task id '{task.id}' in {origin}")
            continue
        seen_ids.add(task.id)
        tasks.append(task)
    return tasks
