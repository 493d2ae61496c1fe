# src/taskminder/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every key has a working default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKMINDER"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path
    jobs_db_path: Path

    # ---- Notifications ----
    notification_backend: str  # "console" | "notify-send"
    notifications_enabled: bool
    prompt_for_permission: bool

    # ---- Reminder job runner ----
    job_poll_interval_seconds: float
    job_retry_delay_seconds: float
    job_timeout_seconds: float
    job_batch_limit: int

    # ---- Task commands ----
    undo_window_seconds: float
    reschedule_on_undo: bool
    cancel_on_delete: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskminder") or "taskminder"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskminder"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        # Same file by default: one durable store for rows and deferred jobs.
        jobs_db_path = _env_path(_k("JOBS_DB_PATH"), tasks_db_path)

        notification_backend = _env(_k("NOTIFICATION_BACKEND"), "console").strip().lower() or "console"
        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), True)
        prompt_for_permission = _env_bool(_k("PROMPT_FOR_PERMISSION"), False)

        job_poll_interval_seconds = _env_float(_k("JOB_POLL_INTERVAL_SECONDS"), 1.0)
        job_retry_delay_seconds = _env_float(_k("JOB_RETRY_DELAY_SECONDS"), 60.0)
        job_timeout_seconds = _env_float(_k("JOB_TIMEOUT_SECONDS"), 30.0)
        job_batch_limit = _env_int(_k("JOB_BATCH_LIMIT"), 32)

        undo_window_seconds = _env_float(_k("UNDO_WINDOW_SECONDS"), 30.0)
        reschedule_on_undo = _env_bool(_k("RESCHEDULE_ON_UNDO"), True)
        cancel_on_delete = _env_bool(_k("CANCEL_ON_DELETE"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            jobs_db_path=jobs_db_path,
            notification_backend=notification_backend,
            notifications_enabled=notifications_enabled,
            prompt_for_permission=prompt_for_permission,
            job_poll_interval_seconds=job_poll_interval_seconds,
            job_retry_delay_seconds=job_retry_delay_seconds,
            job_timeout_seconds=job_timeout_seconds,
            job_batch_limit=job_batch_limit,
            undo_window_seconds=undo_window_seconds,
            reschedule_on_undo=reschedule_on_undo,
            cancel_on_delete=cancel_on_delete,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
