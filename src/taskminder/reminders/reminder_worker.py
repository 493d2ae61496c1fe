# src/taskminder/reminders/reminder_worker.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.ports import JobResult
from ..notifications.dispatcher import NotificationDispatcher
from .reminder_scheduler import PAYLOAD_TASK_ID, PAYLOAD_TASK_TITLE

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Task Reminder"
DEFAULT_TASK_TITLE = "Your task"


def reminder_body(task_title: str) -> str:
    return f'Reminder: "{task_title}" is due!'


class ReminderExecutor:
    """
    The unit of work that runs when a reminder job fires.

    The payload is the source of truth: the task may have been edited or deleted since the
    job was submitted, and the payload already carries everything needed to render the alert.
    The executor always reports success, so delivery problems never cause a job retry.
    """

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self._dispatcher = dispatcher

    def run(self, payload: Mapping[str, Any]) -> JobResult:
        try:
            task_id = int(payload.get(PAYLOAD_TASK_ID) or 0)
        except (TypeError, ValueError):
            task_id = 0
        raw_title = payload.get(PAYLOAD_TASK_TITLE)
        task_title = str(raw_title) if raw_title else DEFAULT_TASK_TITLE

        try:
            self._dispatcher.notify(task_id, REMINDER_TITLE, reminder_body(task_title))
        except Exception:
            logger.exception("Reminder delivery failed task_id=%s", task_id)
        else:
            logger.info("Reminder fired task_id=%s", task_id)
        return JobResult.SUCCESS
