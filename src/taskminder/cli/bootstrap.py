# src/taskminder/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store, job queue, scheduler, notifications).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Clock, NotificationBackend, PermissionGate
from ..core.state import AppState
from ..notifications.backends import create_backend
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.permissions import SettingsPermissionGate
from ..reminders.job_queue import SqliteJobQueue
from ..reminders.reminder_scheduler import REMINDER_JOB_KIND, ReminderScheduler
from ..reminders.reminder_worker import ReminderExecutor
from ..tasks.task_models import now_ms
from ..tasks.task_repository import TaskRepository
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.jobs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    backend: NotificationBackend | None = None,
    permission: PermissionGate | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the notification side) injectable makes the app easy to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    clock = clock or now_ms

    if backend is None:
        backend = create_backend(
            getattr(settings, "notification_backend", "console"),
            app_name=getattr(settings, "app_name", "taskminder"),
        )
    if permission is None:
        permission = SettingsPermissionGate(
            bool(getattr(settings, "notifications_enabled", True)),
            can_prompt=bool(getattr(settings, "prompt_for_permission", False)),
        )

    task_store = TaskStore(settings.tasks_db_path)
    job_queue = SqliteJobQueue(settings.jobs_db_path, clock=clock)
    scheduler = ReminderScheduler(job_queue, clock=clock)
    dispatcher = NotificationDispatcher(backend, permission)
    executor = ReminderExecutor(dispatcher)
    service = TaskService(
        TaskRepository(task_store),
        scheduler,
        clock=clock,
        reschedule_on_undo=bool(getattr(settings, "reschedule_on_undo", True)),
        cancel_on_delete=bool(getattr(settings, "cancel_on_delete", True)),
        undo_window_seconds=float(getattr(settings, "undo_window_seconds", 30.0)),
    )

    return AppState(
        settings=settings,
        task_store=task_store,
        job_queue=job_queue,
        scheduler=scheduler,
        dispatcher=dispatcher,
        executor=executor,
        service=service,
    )


def job_handlers(state: AppState) -> dict[str, ReminderExecutor]:
    """Job kind -> handler map for the job runner."""
    return {REMINDER_JOB_KIND: state.executor}
