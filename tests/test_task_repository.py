# tests/test_task_repository.py

from __future__ import annotations

from pathlib import Path

from taskminder.tasks.task_models import Priority, Task
from taskminder.tasks.task_repository import TaskRepository
from taskminder.tasks.task_store import TaskStore


def test_repository_is_storage_only(tmp_path: Path) -> None:
    repo = TaskRepository(TaskStore(tmp_path / "tasks.sqlite3"))

    # Plain insert returns nothing; the id comes from insert_and_return_id or a read.
    assert repo.insert(Task(id=0, title="Buy milk", due_date=10**13)) is None
    task_id = repo.insert_and_return_id(Task(id=0, title="Expired", priority=Priority.MEDIUM, due_date=1))

    assert [t.title for t in repo.list_all_tasks()] == ["Buy milk", "Expired"]
    got = repo.get_task_by_id_once(task_id)
    assert got is not None and got.priority == Priority.MEDIUM

    assert repo.update(Task(id=task_id, title="Renamed", priority=Priority.MEDIUM)) is True
    assert repo.delete(Task(id=task_id, title="Renamed")) is True
    assert repo.get_task_by_id_once(task_id) is None


def test_repository_live_views(tmp_path: Path) -> None:
    repo = TaskRepository(TaskStore(tmp_path / "tasks.sqlite3"))
    with repo.get_all_tasks().subscribe() as all_sub, repo.get_tasks_by_priority(Priority.LOW).subscribe() as low:
        repo.insert(Task(id=0, title="a"))
        repo.insert(Task(id=0, title="b", priority=Priority.HIGH))

        assert [t.title for t in all_sub.latest] == ["a", "b"]
        assert [t.title for t in low.latest] == ["a"]
