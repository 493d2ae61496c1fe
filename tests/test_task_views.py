# tests/test_task_views.py

from __future__ import annotations

from datetime import datetime

import pytest

from taskminder.tasks.task_models import Priority, Task
from taskminder.tasks.task_views import (
    filter_by_priority,
    format_due,
    format_task_line,
    parse_due,
    search_tasks,
    sort_by_title,
)

TASKS = [
    Task(id=1, title="Buy milk", priority=Priority.LOW),
    Task(id=2, title="call Mom", priority=Priority.HIGH),
    Task(id=3, title="Answer mail", priority=Priority.MEDIUM),
]


def test_search_is_case_insensitive() -> None:
    assert [t.id for t in search_tasks(TASKS, "MIL")] == [1]
    assert [t.id for t in search_tasks(TASKS, "m")] == [1, 2, 3]
    assert search_tasks(TASKS, "") == TASKS
    assert search_tasks(TASKS, "zzz") == []


def test_sort_by_title() -> None:
    assert [t.id for t in sort_by_title(TASKS)] == [3, 1, 2]
    assert [t.id for t in sort_by_title(TASKS, descending=True)] == [2, 1, 3]


def test_filter_by_priority() -> None:
    assert [t.id for t in filter_by_priority(TASKS, Priority.HIGH)] == [2]
    assert filter_by_priority(TASKS, None) == TASKS


def test_parse_due_relative() -> None:
    assert parse_due("+90s", 1_000) == 91_000
    assert parse_due("+15m", 0) == 15 * 60_000
    assert parse_due("+2h", 0) == 2 * 3_600_000
    assert parse_due("+1d", 0) == 86_400_000


def test_parse_due_absolute_is_local_time() -> None:
    expected = int(datetime(2026, 1, 31, 9, 0).astimezone().timestamp() * 1000)
    assert parse_due("2026-01-31 09:00", 0) == expected
    assert parse_due("2026-01-31T09:00", 0) == expected


def test_parse_due_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_due("tomorrow-ish", 0)


def test_format_helpers() -> None:
    due = parse_due("2026-01-31 09:00", 0)
    assert format_due(None) == "-"
    assert format_due(due) == "2026-01-31 09:00"

    line = format_task_line(Task(id=4, title="x", priority=Priority.HIGH, due_date=due, is_completed=True))
    assert line == "[x] #4 (high) x  due: 2026-01-31 09:00"
