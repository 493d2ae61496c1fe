# src/taskminder/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..notifications.dispatcher import NotificationDispatcher
from ..reminders.job_queue import SqliteJobQueue
from ..reminders.reminder_scheduler import ReminderScheduler
from ..reminders.reminder_worker import ReminderExecutor
from ..tasks.live_query import Subscription
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Process-wide services, built once by the composition root and passed around by reference.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    job_queue: SqliteJobQueue
    scheduler: ReminderScheduler
    dispatcher: NotificationDispatcher
    executor: ReminderExecutor
    service: TaskService

    # Live view held by the console; commands read its latest snapshot.
    all_tasks: Subscription | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)
