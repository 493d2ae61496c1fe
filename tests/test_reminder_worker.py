# tests/test_reminder_worker.py

from __future__ import annotations

from taskminder.core.ports import JobResult
from taskminder.notifications.dispatcher import NotificationDispatcher
from taskminder.notifications.permissions import AlwaysGranted, SettingsPermissionGate
from taskminder.reminders.reminder_worker import ReminderExecutor

from .fakes import ExplodingBackend, RecordingBackend


def test_fired_job_posts_reminder_from_payload() -> None:
    backend = RecordingBackend()
    executor = ReminderExecutor(NotificationDispatcher(backend, AlwaysGranted()))

    result = executor.run({"taskId": 12, "taskTitle": "Call Mom"})

    assert result == JobResult.SUCCESS
    (n,) = backend.posted
    assert n.id == 12
    assert n.title == "Task Reminder"
    assert n.body == 'Reminder: "Call Mom" is due!'
    assert n.channel_id == "todo_reminder_channel"


def test_missing_fields_use_defaults() -> None:
    backend = RecordingBackend()
    executor = ReminderExecutor(NotificationDispatcher(backend, AlwaysGranted()))

    assert executor.run({}) == JobResult.SUCCESS
    (n,) = backend.posted
    assert n.id == 0
    assert n.body == 'Reminder: "Your task" is due!'


def test_garbage_task_id_falls_back_to_zero() -> None:
    backend = RecordingBackend()
    executor = ReminderExecutor(NotificationDispatcher(backend, AlwaysGranted()))

    executor.run({"taskId": "not-a-number", "taskTitle": "x"})
    assert backend.posted[0].id == 0


def test_no_permission_still_reports_success() -> None:
    backend = RecordingBackend()
    executor = ReminderExecutor(NotificationDispatcher(backend, SettingsPermissionGate(False)))

    assert executor.run({"taskId": 1, "taskTitle": "quiet"}) == JobResult.SUCCESS
    assert backend.posted == []


def test_delivery_failure_still_reports_success() -> None:
    executor = ReminderExecutor(NotificationDispatcher(ExplodingBackend(), AlwaysGranted()))
    assert executor.run({"taskId": 1, "taskTitle": "x"}) == JobResult.SUCCESS


def test_same_task_replaces_its_notification_slot() -> None:
    backend = RecordingBackend()
    executor = ReminderExecutor(NotificationDispatcher(backend, AlwaysGranted()))

    executor.run({"taskId": 5, "taskTitle": "first"})
    executor.run({"taskId": 5, "taskTitle": "second"})
    executor.run({"taskId": 6, "taskTitle": "other"})

    assert len(backend.posted) == 3
    assert set(backend.active) == {5, 6}
    assert backend.active[5].body == 'Reminder: "second" is due!'
