# src/taskminder/tasks/task_views.py

from __future__ import annotations

"""
In-memory views over a task snapshot: search, sort, filter, and the one-line rendering
used by the console. These never touch the store; they work on whatever snapshot the
caller already holds.
"""

import re
from collections.abc import Iterable
from datetime import datetime

from .task_models import Priority, Task

_RELATIVE_RE = re.compile(r"^\+(\d+)\s*([smhd])$", re.IGNORECASE)
_UNIT_MS = {"s": 1_000, "m": 60_000, "h": 3_600_000, "d": 86_400_000}
_ABSOLUTE_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d")


def search_tasks(tasks: Iterable[Task], query: str) -> list[Task]:
    """Case-insensitive substring match on the title. Empty query returns everything."""
    q = (query or "").strip().casefold()
    if not q:
        return list(tasks)
    return [t for t in tasks if q in (t.title or "").casefold()]


def sort_by_title(tasks: Iterable[Task], *, descending: bool = False) -> list[Task]:
    return sorted(tasks, key=lambda t: t.title or "", reverse=descending)


def filter_by_priority(tasks: Iterable[Task], priority: Priority | None) -> list[Task]:
    if priority is None:
        return list(tasks)
    return [t for t in tasks if t.priority == priority]


def format_due(due_ms: int | None) -> str:
    if due_ms is None:
        return "-"
    return datetime.fromtimestamp(due_ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task_line(task: Task) -> str:
    done = "x" if task.is_completed else " "
    return f"[{done}] #{task.id} ({task.priority.name.lower()}) {task.title}  due: {format_due(task.due_date)}"


def parse_due(text: str, now_ms: int) -> int:
    """
    Parse a due date into epoch ms.

    Accepts a relative offset (+90s, +15m, +2h, +1d) or a local date/time
    ("YYYY-MM-DD HH:MM", "YYYY-MM-DDTHH:MM", "YYYY-MM-DD").
    """
    s = (text or "").strip()
    m = _RELATIVE_RE.match(s)
    if m:
        return int(now_ms) + int(m.group(1)) * _UNIT_MS[m.group(2).lower()]

    for fmt in _ABSOLUTE_FORMATS:
        try:
            dt = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return int(dt.astimezone().timestamp() * 1000)

    raise ValueError(f"unrecognized due date: {text!r}")
