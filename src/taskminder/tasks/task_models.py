# src/taskminder/tasks/task_models.py

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum


def now_ms() -> int:
    """Wall clock as epoch milliseconds (the unit used for due dates and job run times)."""
    return int(time.time() * 1000)


class Priority(IntEnum):
    """Task priority. Stored as its integer value."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @classmethod
    def from_db(cls, raw: int | None) -> Priority:
        if raw is None:
            return cls.LOW
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            return cls.LOW

    @classmethod
    def parse(cls, text: str) -> Priority:
        """Accept "0".."2" or a (prefix of a) name: low / med / medium / high."""
        s = (text or "").strip().lower()
        if s.isdigit():
            return cls(int(s))
        for p in cls:
            if p.name.lower().startswith(s) and s:
                return p
        raise ValueError(f"unknown priority: {text!r}")


@dataclass(frozen=True, slots=True)
class Task:
    id: int
    title: str
    priority: Priority = Priority.LOW
    due_date: int | None = None  # epoch ms
    is_completed: bool = False
