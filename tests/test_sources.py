"""Tests for task sources."""

import json
from pathlib import Path

import pytest

from taskplan.exceptions import SourceUnavailableError
from taskplan.models import TaskStatus
from taskplan.sources import InMemoryTaskSource, JsonFileTaskSource
from tests.conftest import make_task


class TestJsonFileTaskSource:
    """Reading tasks from a JSON file."""

    def test_missing_file_has_no_tasks(self, tmp_path: Path) -> None:
        assert JsonFileTaskSource(tmp_path / "tasks.json").list_tasks() == []

    def test_reads_array(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "1", "name": "A", "priority": "high"},
                    {"id": "2", "name": "B", "dependencies": ["1"]},
                ]
            )
        )

        tasks = JsonFileTaskSource(path).list_tasks()

        assert [t.id for t in tasks] == ["1", "2"]
        assert tasks[1].dependencies == ["1"]

    def test_reads_tasks_key(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps({"tasks": [{"id": "1"}]}))

        assert [t.id for t in JsonFileTaskSource(path).list_tasks()] == ["1"]

    def test_invalid_json_is_unavailable(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text("[{")

        with pytest.raises(SourceUnavailableError):
            JsonFileTaskSource(path).list_tasks()

    def test_invalid_utf8_is_unavailable(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_bytes(b'[{"id": "1", "name": "\xff\xfe"}]')

        with pytest.raises(SourceUnavailableError, match="Cannot read task file"):
            JsonFileTaskSource(path).list_tasks()

    def test_non_finite_hours_record_is_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text('[{"id": "1", "estimatedHours": NaN}, {"id": "2", "estimatedHours": 3}]')

        tasks = JsonFileTaskSource(path).list_tasks()

        assert [t.id for t in tasks] == ["2"]

    def test_record_without_id_is_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": None, "name": "orphan"}, {"id": "2"}]))

        tasks = JsonFileTaskSource(path).list_tasks()

        assert [t.id for t in tasks] == ["2"]

    def test_wrong_top_level_type_is_unavailable(self, tmp_path: Path) -> None:
        path = tmp_path / "tasks.json"
        path.write_text('"tasks"')

        with pytest.raises(SourceUnavailableError, match="JSON array"):
            JsonFileTaskSource(path).list_tasks()

    def test_invalid_record_is_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": "1", "status": "someday"}, {"id": "2"}]))

        tasks = JsonFileTaskSource(path).list_tasks()

        assert [t.id for t in tasks] == ["2"]
        assert "Skipping invalid task record #0" in caplog.text

    def test_duplicate_id_is_skipped(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(json.dumps([{"id": "1", "name": "first"}, {"id": "1", "name": "second"}]))

        tasks = JsonFileTaskSource(path).list_tasks()

        assert [t.name for t in tasks] == ["first"]
        assert "duplicate task id '1'" in caplog.text


class TestInMemoryTaskSource:
    """The in-memory source used by tests and embedding code."""

    def test_accepts_dicts_and_models(self) -> None:
        source = InMemoryTaskSource([{"id": "1"}, make_task("2")])

        assert [t.id for t in source.list_tasks()] == ["1", "2"]

    def test_list_returns_copies(self) -> None:
        source = InMemoryTaskSource([make_task("1")])

        source.list_tasks()[0].name = "changed"

        assert source.list_tasks()[0].name == "Task 1"

    def test_update_task(self) -> None:
        source = InMemoryTaskSource([make_task("1")])

        updated = source.update_task("1", status="completed")

        assert updated.status == TaskStatus.COMPLETED
        assert source.list_tasks()[0].is_completed

    def test_update_unknown_task_raises(self) -> None:
        with pytest.raises(KeyError):
            InMemoryTaskSource().update_task("missing", status="completed")

    def test_remove_task(self) -> None:
        source = InMemoryTaskSource([make_task("1"), make_task("2")])

        source.remove_task("1")

        assert [t.id for t in source.list_tasks()] == ["2"]
