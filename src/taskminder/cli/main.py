# src/taskminder/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder job runner in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state, job_handlers
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..reminders.job_runner import JobRunnerThread, start_job_runner_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.service.close()
    except Exception:
        logger.exception("Task command worker did not shut down cleanly.")

    sub = getattr(state, "all_tasks", None)
    if sub is not None:
        sub.cancel()

    # TaskStore and SqliteJobQueue use short-lived sqlite connections per call.
    state.task_store.close()
    state.job_queue.close()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskminder")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskminder"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    # Ask once at startup; a denial only means reminders fire silently.
    state.dispatcher.request_permission_if_needed()
    state.dispatcher.ensure_channel_registered()

    # Jobs a previous process was running when it died.
    state.job_queue.requeue_stale()

    runner: JobRunnerThread | None = start_job_runner_in_background(
        state.job_queue,
        job_handlers(state),
        interval_seconds=settings.job_poll_interval_seconds,
        retry_delay_seconds=settings.job_retry_delay_seconds,
        timeout_seconds=settings.job_timeout_seconds,
        batch_limit=settings.job_batch_limit,
    )

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        # With the console up, Ctrl+C stays a KeyboardInterrupt so input() returns.
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Not on the main thread, or the platform lacks SIGTERM.
        logger.debug("Signal handlers not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the reminder runner only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
