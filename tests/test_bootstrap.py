# tests/test_bootstrap.py

from __future__ import annotations

import logging
from pathlib import Path

from taskminder.cli.bootstrap import job_handlers
from taskminder.config import Settings
from taskminder.logging_setup import _ConsoleNoiseFilter
from taskminder.reminders.reminder_scheduler import REMINDER_JOB_KIND


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKMINDER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKMINDER_NOTIFICATION_BACKEND", "Notify-Send")
    monkeypatch.setenv("TASKMINDER_RESCHEDULE_ON_UNDO", "no")
    monkeypatch.setenv("TASKMINDER_JOB_BATCH_LIMIT", "not-a-number")
    monkeypatch.delenv("TASKMINDER_TASKS_DB_PATH", raising=False)
    monkeypatch.delenv("TASKMINDER_JOBS_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.jobs_db_path == s.tasks_db_path
    assert s.notification_backend == "notify-send"
    assert s.reschedule_on_undo is False
    assert s.job_batch_limit == 32


def test_state_shares_one_database(state, settings) -> None:
    assert settings.tasks_db_path.exists()
    assert state.job_queue.count_pending() == 0
    assert job_handlers(state) == {REMINDER_JOB_KIND: state.executor}


def test_end_to_end_reminder_fires_from_queue(state, backend, clock) -> None:
    task_id = state.service.add_task("Water plants", due_date=clock.now + 60_000)

    # Not due yet.
    assert state.job_queue.list_due(now_ms=clock.now) == []

    clock.advance(60_000)
    (job,) = state.job_queue.list_due(now_ms=clock.now)
    state.job_queue.try_claim(job.key, generation=job.generation)
    state.executor.run(job.payload)
    state.job_queue.complete(job.key, generation=job.generation)

    (n,) = backend.posted
    assert n.id == task_id
    assert n.body == 'Reminder: "Water plants" is due!'
    assert state.job_queue.stats() == {}


def test_console_filter_keeps_runner_quiet() -> None:
    f = _ConsoleNoiseFilter()

    def rec(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert f.filter(rec("taskminder.tasks.task_service", logging.INFO))
    assert not f.filter(rec("taskminder.reminders.job_runner", logging.INFO))
    assert f.filter(rec("taskminder.reminders.job_runner", logging.WARNING))
    assert not f.filter(rec("urllib3", logging.WARNING))
