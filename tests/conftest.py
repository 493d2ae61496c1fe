# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskminder.cli.bootstrap import create_initial_state
from taskminder.core.state import AppState
from taskminder.notifications.permissions import SettingsPermissionGate

from .fakes import FakeClock, RecordingBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskminder-test",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        jobs_db_path=tmp_path / "tasks.sqlite3",
        # Notifications
        notification_backend="console",
        notifications_enabled=True,
        prompt_for_permission=False,
        # Task commands
        undo_window_seconds=30.0,
        reschedule_on_undo=True,
        cancel_on_delete=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture()
def permission() -> SettingsPermissionGate:
    return SettingsPermissionGate(True)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    backend: RecordingBackend,
    permission: SettingsPermissionGate,
    clock: FakeClock,
) -> Iterator[AppState]:
    """
    AppState wired with deterministic fakes.

    NOTE: We keep the real SQLite task store and job queue here because
    their correctness is part of what we want to test.
    """
    st = create_initial_state(settings=settings, backend=backend, permission=permission, clock=clock)
    yield st
    st.service.close()
