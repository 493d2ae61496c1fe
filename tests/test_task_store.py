# tests/test_task_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

from taskminder.tasks.task_models import Priority, Task
from taskminder.tasks.task_store import TaskStore


def test_insert_get_update_delete(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")

    task_id = store.insert(Task(id=0, title="Buy milk", priority=Priority.MEDIUM, due_date=1_000))
    assert task_id > 0

    got = store.get_by_id(task_id)
    assert got == Task(id=task_id, title="Buy milk", priority=Priority.MEDIUM, due_date=1_000)

    assert store.update(Task(id=task_id, title="Buy oat milk", priority=Priority.HIGH, is_completed=True))
    got2 = store.get_by_id(task_id)
    assert got2 is not None
    assert got2.title == "Buy oat milk"
    assert got2.due_date is None
    assert got2.is_completed is True

    assert store.delete(got2)
    assert store.get_by_id(task_id) is None
    assert store.count_tasks() == 0


def test_missing_rows_are_tolerated(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")

    assert store.get_by_id(42) is None
    assert store.update(Task(id=42, title="ghost")) is False
    assert store.delete(Task(id=42, title="ghost")) is False
    assert store.count_tasks() == 0


def test_insert_with_existing_id_replaces_row(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    task_id = store.insert(Task(id=0, title="first"))

    assert store.insert(Task(id=task_id, title="second", priority=Priority.HIGH)) == task_id
    assert store.count_tasks() == 1
    got = store.get_by_id(task_id)
    assert got is not None and got.title == "second"


def test_ids_are_not_reused_after_delete(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    a = store.insert(Task(id=0, title="a"))
    store.delete(Task(id=a, title="a"))
    b = store.insert(Task(id=0, title="b"))
    assert b > a


def test_list_all_is_ordered_by_id(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    ids = [store.insert(Task(id=0, title=t)) for t in ("c", "a", "b")]
    assert [t.id for t in store.list_all()] == sorted(ids)


def test_list_by_priority_orders_by_due_date_with_undated_last(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    no_due = store.insert(Task(id=0, title="someday", priority=Priority.HIGH))
    late = store.insert(Task(id=0, title="late", priority=Priority.HIGH, due_date=3_000))
    early = store.insert(Task(id=0, title="early", priority=Priority.HIGH, due_date=1_000))
    store.insert(Task(id=0, title="other", priority=Priority.LOW, due_date=500))

    assert [t.id for t in store.list_by_priority(Priority.HIGH)] == [early, late, no_due]
    assert [t.title for t in store.list_by_priority(Priority.LOW)] == ["other"]
    assert store.list_by_priority(Priority.MEDIUM) == []


def test_live_view_emits_on_every_effective_write(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    seen: list[tuple[Task, ...]] = []

    sub = store.get_all().subscribe(seen.append)
    assert seen == [()]

    task_id = store.insert(Task(id=0, title="x"))
    store.update(Task(id=task_id, title="y"))
    store.update(Task(id=999, title="nope"))  # no row: no emission
    store.delete(Task(id=task_id, title="y"))

    assert [[t.title for t in snap] for snap in seen] == [[], ["x"], ["y"], []]
    assert sub.version == 4

    sub.cancel()
    store.insert(Task(id=0, title="after cancel"))
    assert len(seen) == 4


def test_priority_live_view_only_shows_its_priority(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.sqlite3")
    with store.get_by_priority(Priority.HIGH).subscribe() as sub:
        store.insert(Task(id=0, title="low", priority=Priority.LOW))
        store.insert(Task(id=0, title="high", priority=Priority.HIGH, due_date=10))
        assert [t.title for t in sub.latest] == ["high"]
    assert not sub.active


def test_schema_migration_adds_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute("CREATE TABLE tasks (id INTEGER PRIMARY KEY AUTOINCREMENT, title TEXT NOT NULL)")
    conn.execute("INSERT INTO tasks(title) VALUES ('legacy')")
    conn.commit()
    conn.close()

    store = TaskStore(db)
    (legacy,) = store.list_all()
    assert legacy.title == "legacy"
    assert legacy.priority == Priority.LOW
    assert legacy.due_date is None
    assert legacy.is_completed is False


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    task_id = TaskStore(db).insert(Task(id=0, title="durable", due_date=5))
    again = TaskStore(db).get_by_id(task_id)
    assert again is not None and again.due_date == 5
