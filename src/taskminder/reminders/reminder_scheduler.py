# src/taskminder/reminders/reminder_scheduler.py

from __future__ import annotations

import logging

from ..core.ports import Clock, DurableJobQueue, PendingJob
from ..tasks.task_models import now_ms as _wall_now_ms

logger = logging.getLogger(__name__)

REMINDER_JOB_KIND = "reminder"

PAYLOAD_TASK_ID = "taskId"
PAYLOAD_TASK_TITLE = "taskTitle"


def reminder_key(task_id: int) -> str:
    """Unique job key for a task's reminder. One pending reminder per key."""
    return f"task_reminder_{int(task_id)}"


class ReminderScheduler:
    """
    Turns a task's due timestamp into a deferred job on the durable queue.

    Nothing is scheduled for a due time that is now or already past. Scheduling the same
    task id again replaces its pending job (the queue is keyed by reminder_key()).
    """

    def __init__(self, queue: DurableJobQueue, *, clock: Clock | None = None) -> None:
        self._queue = queue
        self._clock: Clock = clock or _wall_now_ms

    def schedule(
        self,
        task_id: int,
        task_title: str,
        due_timestamp: int,
        now: int | None = None,
    ) -> bool:
        """Returns True if a job was submitted."""
        if now is None:
            now = self._clock()
        delay = int(due_timestamp) - int(now)
        if delay <= 0:
            logger.debug("Reminder not scheduled task_id=%s delay_ms=%s (not in the future)", task_id, delay)
            return False

        self._queue.submit(
            reminder_key(task_id),
            {PAYLOAD_TASK_ID: int(task_id), PAYLOAD_TASK_TITLE: task_title},
            delay,
            kind=REMINDER_JOB_KIND,
            now_ms=now,
        )
        logger.info("Reminder scheduled task_id=%s in %.1fs", task_id, delay / 1000.0)
        return True

    def cancel(self, task_id: int) -> bool:
        cancelled = self._queue.cancel(reminder_key(task_id))
        if cancelled:
            logger.info("Reminder cancelled task_id=%s", task_id)
        return cancelled

    def pending_job(self, task_id: int) -> PendingJob | None:
        return self._queue.get_pending(reminder_key(task_id))
