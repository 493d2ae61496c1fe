# tests/test_reminder_scheduler.py

from __future__ import annotations

from taskminder.reminders.reminder_scheduler import (
    PAYLOAD_TASK_ID,
    PAYLOAD_TASK_TITLE,
    REMINDER_JOB_KIND,
    ReminderScheduler,
    reminder_key,
)

from .fakes import FakeClock, FakeJobQueue


def test_reminder_key_format() -> None:
    assert reminder_key(7) == "task_reminder_7"


def test_future_due_date_submits_one_keyed_job() -> None:
    clock = FakeClock(start_ms=1_000)
    queue = FakeJobQueue()
    scheduler = ReminderScheduler(queue, clock=clock)

    # Due in one hour.
    assert scheduler.schedule(7, "Pay rent", 1_000 + 3_600_000) is True

    (job,) = queue.submitted
    assert job.key == "task_reminder_7"
    assert job.delay_ms == 3_600_000
    assert job.kind == REMINDER_JOB_KIND
    assert job.payload == {PAYLOAD_TASK_ID: 7, PAYLOAD_TASK_TITLE: "Pay rent"}


def test_past_or_present_due_date_schedules_nothing() -> None:
    queue = FakeJobQueue()
    scheduler = ReminderScheduler(queue, clock=FakeClock(start_ms=10_000))

    assert scheduler.schedule(7, "Late", 9_999) is False
    assert scheduler.schedule(7, "Now", 10_000) is False
    assert queue.submitted == []
    assert queue.jobs == {}


def test_explicit_now_overrides_clock() -> None:
    queue = FakeJobQueue()
    scheduler = ReminderScheduler(queue, clock=FakeClock(start_ms=0))

    assert scheduler.schedule(1, "t", 5_000, now=4_000) is True
    assert queue.submitted[0].delay_ms == 1_000
    assert queue.submitted[0].now_ms == 4_000


def test_rescheduling_same_task_replaces_pending_job() -> None:
    clock = FakeClock(start_ms=0)
    queue = FakeJobQueue()
    scheduler = ReminderScheduler(queue, clock=clock)

    scheduler.schedule(3, "old title", 60_000)
    scheduler.schedule(3, "new title", 120_000)

    assert list(queue.jobs) == ["task_reminder_3"]
    job = scheduler.pending_job(3)
    assert job is not None
    assert job.run_at == 120_000
    assert job.payload[PAYLOAD_TASK_TITLE] == "new title"


def test_cancel_removes_pending_job() -> None:
    queue = FakeJobQueue()
    scheduler = ReminderScheduler(queue, clock=FakeClock(start_ms=0))
    scheduler.schedule(4, "t", 1_000)

    assert scheduler.cancel(4) is True
    assert scheduler.pending_job(4) is None
    assert scheduler.cancel(4) is False
