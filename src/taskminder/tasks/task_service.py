# src/taskminder/tasks/task_service.py

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any

from ..core.ports import Clock
from ..reminders.reminder_scheduler import ReminderScheduler
from .live_query import SnapshotListener, Subscription
from .task_models import Priority, Task, now_ms as _wall_now_ms
from .task_repository import TaskRepository

logger = logging.getLogger(__name__)

_UNDO_HISTORY = 20


@dataclass(frozen=True, slots=True)
class DeletedTask:
    task: Task
    deleted_at: int  # epoch ms


class TaskService:
    """
    Command surface the UI calls into.

    Every write goes to the repository first; scheduling is a separate, explicit second step
    taken only for due dates strictly in the future. The repository itself never schedules.
    """

    def __init__(
        self,
        repository: TaskRepository,
        scheduler: ReminderScheduler,
        *,
        clock: Clock | None = None,
        reschedule_on_undo: bool = True,
        cancel_on_delete: bool = True,
        undo_window_seconds: float = 30.0,
    ) -> None:
        self._repo = repository
        self._scheduler = scheduler
        self._clock: Clock = clock or _wall_now_ms
        self.reschedule_on_undo = reschedule_on_undo
        self.cancel_on_delete = cancel_on_delete
        self.undo_window_ms = int(max(0.0, float(undo_window_seconds)) * 1000)

        self._deleted: deque[DeletedTask] = deque(maxlen=_UNDO_HISTORY)
        self._deleted_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def now(self) -> int:
        return self._clock()

    # ---- scheduling step ----

    def _schedule_if_future(self, task_id: int, title: str, due_date: int | None) -> bool:
        if due_date is None:
            return False
        return self._scheduler.schedule(task_id, title, due_date, now=self._clock())

    # ---- commands ----

    def add_task(self, title: str, priority: Priority = Priority.LOW, due_date: int | None = None) -> int:
        if not title or not title.strip():
            raise ValueError("title is required")

        task = Task(id=0, title=title.strip(), priority=Priority(priority), due_date=due_date)
        task_id = self._repo.insert_and_return_id(task)
        self._schedule_if_future(task_id, task.title, due_date)
        logger.info("Task added id=%s", task_id)
        return task_id

    def update_task(self, task: Task) -> bool:
        """
        Overwrite the task by id and bring its reminder in line with the new due date.

        Returns False (and schedules nothing) if the task no longer exists.
        """
        if not task.title or not task.title.strip():
            raise ValueError("title is required")

        if not self._repo.update(task):
            logger.info("Task update ignored, task vanished id=%s", task.id)
            return False

        if not self._schedule_if_future(task.id, task.title, task.due_date):
            # No future due date any more: a reminder queued for the old state would be wrong.
            self._scheduler.cancel(task.id)
        logger.info("Task updated id=%s", task.id)
        return True

    def set_completed(self, task_id: int, completed: bool = True) -> bool:
        task = self._repo.get_task_by_id_once(task_id)
        if task is None:
            return False
        return self.update_task(replace(task, is_completed=bool(completed)))

    def delete_task(self, task: Task) -> None:
        deleted = self._repo.delete(task)
        if self.cancel_on_delete:
            self._scheduler.cancel(task.id)
        if deleted:
            with self._deleted_lock:
                self._deleted.append(DeletedTask(task=task, deleted_at=self._clock()))
            logger.info("Task deleted id=%s", task.id)

    def undo_delete(self, task: Task) -> int:
        """Re-insert a deleted task under its original id."""
        task_id = self._repo.insert_and_return_id(task)
        with self._deleted_lock:
            for entry in list(self._deleted):
                if entry.task.id == task_id:
                    self._deleted.remove(entry)
        if self.reschedule_on_undo:
            self._schedule_if_future(task_id, task.title, task.due_date)
        logger.info("Task restored id=%s", task_id)
        return task_id

    def undo_last_delete(self, now: int | None = None) -> Task | None:
        """Restore the most recent delete if it is still inside the undo window."""
        if now is None:
            now = self._clock()
        with self._deleted_lock:
            while self._deleted and now - self._deleted[0].deleted_at > self.undo_window_ms:
                self._deleted.popleft()
            if not self._deleted:
                return None
            entry = self._deleted.pop()
        self.undo_delete(entry.task)
        return entry.task

    # ---- reads ----

    def get_task_once(self, task_id: int) -> Task | None:
        return self._repo.get_task_by_id_once(task_id)

    def list_tasks(self) -> list[Task]:
        return self._repo.list_all_tasks()

    def subscribe_all_tasks(self, listener: SnapshotListener | None = None) -> Subscription:
        return self._repo.get_all_tasks().subscribe(listener)

    def subscribe_by_priority(
        self, priority: Priority, listener: SnapshotListener | None = None
    ) -> Subscription:
        return self._repo.get_tasks_by_priority(priority).subscribe(listener)

    # ---- background dispatch ----

    def launch(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        Run a command off the caller's thread (fire-and-forget).

        One worker: commands run in submission order. Failures are logged, not raised.
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="task-cmd")
            fut = self._executor.submit(fn, *args, **kwargs)
        fut.add_done_callback(_log_failure)
        return fut

    def close(self) -> None:
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)


def _log_failure(fut: Future) -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        logger.error("Background task command failed", exc_info=exc)
