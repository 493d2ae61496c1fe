# src/taskminder/tasks/task_repository.py

from __future__ import annotations

from .live_query import LiveQuery
from .task_models import Priority, Task
from .task_store import TaskStore


class TaskRepository:
    """
    Storage-only facade over TaskStore.

    It never talks to the reminder scheduler; the caller (TaskService) decides whether a write
    should be followed by scheduling. That keeps this layer testable without notifications.
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def insert(self, task: Task) -> None:
        self._store.insert(task)

    def insert_and_return_id(self, task: Task) -> int:
        return self._store.insert(task)

    def update(self, task: Task) -> bool:
        return self._store.update(task)

    def delete(self, task: Task) -> bool:
        return self._store.delete(task)

    def get_task_by_id_once(self, task_id: int) -> Task | None:
        return self._store.get_by_id(task_id)

    def list_all_tasks(self) -> list[Task]:
        return self._store.list_all()

    def get_all_tasks(self) -> LiveQuery:
        return self._store.get_all()

    def get_tasks_by_priority(self, priority: Priority) -> LiveQuery:
        return self._store.get_by_priority(priority)
