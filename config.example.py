# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file,
which is gitignored). Every variable has a working default; nothing is required.

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKMINDER_APP_NAME": "App display name, also used as the desktop notification app name (default: taskminder).",
    "TASKMINDER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKMINDER_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true). Off => reminder runner only.",
    # Paths (gitignored)
    "TASKMINDER_DATA_DIR": "Local data directory (default: .local/taskminder). Holds taskminder.log.",
    "TASKMINDER_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TASKMINDER_JOBS_DB_PATH": "Deferred reminder jobs SQLite path (default: same file as the tasks DB).",
    # Notifications
    "TASKMINDER_NOTIFICATION_BACKEND": "console | notify-send (default: console; falls back to console).",
    "TASKMINDER_NOTIFICATIONS_ENABLED": "Permission to show notifications (true/false, default: true).",
    "TASKMINDER_PROMPT_FOR_PERMISSION": "Grant a denied permission when asked at startup (default: false).",
    # Reminder job runner
    "TASKMINDER_JOB_POLL_INTERVAL_SECONDS": "How often due jobs are polled (default: 1.0).",
    "TASKMINDER_JOB_RETRY_DELAY_SECONDS": "Delay before a crashed job is retried (default: 60).",
    "TASKMINDER_JOB_TIMEOUT_SECONDS": "Time budget for one job run (default: 30).",
    "TASKMINDER_JOB_BATCH_LIMIT": "Max due jobs handled per poll (default: 32).",
    # Task commands
    "TASKMINDER_UNDO_WINDOW_SECONDS": "How long /undo can restore a deleted task (default: 30).",
    "TASKMINDER_RESCHEDULE_ON_UNDO": "Re-create the reminder when a delete is undone (default: true).",
    "TASKMINDER_CANCEL_ON_DELETE": "Cancel the pending reminder when a task is deleted (default: true).",
}
