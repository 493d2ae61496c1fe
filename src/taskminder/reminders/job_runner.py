# src/taskminder/reminders/job_runner.py

from __future__ import annotations

"""
Deferred job runner.

A small polling loop that:
- fetches due jobs from the durable queue,
- claims them (generation-guarded, so cancelled or superseded jobs never run),
- runs the handler for the job's kind in a worker thread under a time budget,
- completes the job, or pushes it back on RETRY / crash.

The loop owns no state; everything lives in the queue table, so a restarted process
picks up exactly where the old one stopped.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass

from ..core.ports import Clock, JobHandler, JobResult, PendingJob
from ..tasks.task_models import now_ms as _wall_now_ms
from .job_queue import SqliteJobQueue

logger = logging.getLogger(__name__)


async def run_job(
        queue: SqliteJobQueue,
        handlers: Mapping[str, JobHandler],
        job: PendingJob,
        *,
        now_ms: int,
        retry_delay_seconds: float = 60.0,
        timeout_seconds: float = 30.0,
) -> JobResult | None:
    """
    Claim and run a single job. Returns None if the job could not be claimed.
    """
    if not queue.try_claim(job.key, generation=job.generation):
        return None

    handler = handlers.get(job.kind)
    if handler is None:
        logger.warning("No handler for job kind=%s key=%s; dropping", job.kind, job.key)
        queue.complete(job.key, generation=job.generation)
        return JobResult.FAILURE

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(handler.run, job.payload),
            timeout=max(0.1, float(timeout_seconds)),
        )
    except asyncio.TimeoutError:
        logger.error("Job timed out key=%s after %.1fs", job.key, timeout_seconds)
        queue.complete(job.key, generation=job.generation)
        return JobResult.FAILURE
    except Exception:
        logger.exception("Job handler crashed key=%s", job.key)
        result = JobResult.RETRY

    if result == JobResult.RETRY:
        run_at = int(now_ms + max(1.0, float(retry_delay_seconds)) * 1000)
        queue.backoff(job.key, generation=job.generation, run_at=run_at)
        logger.info("Job %s -> retry at %s", job.key, run_at)
        return result

    queue.complete(job.key, generation=job.generation)
    logger.info("Job %s -> %s", job.key, result.value)
    return result


async def run_job_runner(
        queue: SqliteJobQueue,
        handlers: Mapping[str, JobHandler],
        *,
        interval_seconds: float = 1.0,
        retry_delay_seconds: float = 60.0,
        timeout_seconds: float = 30.0,
        batch_limit: int = 32,
        clock: Clock | None = None,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling runner.

    Every interval_seconds:
    - fetch pending jobs with run_at <= now
    - run each one (see run_job)

    To stop the runner, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    now_fn: Clock = clock or _wall_now_ms

    while stop_event is None or not stop_event.is_set():
        now = now_fn()

        try:
            jobs = queue.list_due(now_ms=now, limit=batch_limit)
        except Exception:
            logger.exception("list_due failed")
            jobs = []

        for job in jobs:
            try:
                await run_job(
                    queue,
                    handlers,
                    job,
                    now_ms=now,
                    retry_delay_seconds=retry_delay_seconds,
                    timeout_seconds=timeout_seconds,
                )
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("run_job failed key=%s", job.key)

        if jobs:
            logger.debug("Job runner pass done: %d job(s)", len(jobs))

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class JobRunnerThread:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Job runner loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_job_runner_in_background(
        queue: SqliteJobQueue,
        handlers: Mapping[str, JobHandler],
        *,
        interval_seconds: float = 1.0,
        retry_delay_seconds: float = 60.0,
        timeout_seconds: float = 30.0,
        batch_limit: int = 32,
) -> JobRunnerThread | None:
    """
    Start the job runner in a background thread with its own event loop,
    so the blocking console REPL can run in parallel.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_job_runner(
                    queue,
                    handlers,
                    interval_seconds=interval_seconds,
                    retry_delay_seconds=retry_delay_seconds,
                    timeout_seconds=timeout_seconds,
                    batch_limit=batch_limit,
                    stop_event=stop_event,
                )
            )
        except Exception:
            logger.exception("Job runner crashed.")
        finally:
            with contextlib.suppress(RuntimeError):
                loop.close()

    t = threading.Thread(target=runner, name="job-runner", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Job runner thread did not initialize properly.")
        return None

    logger.info("Job runner background thread started.")
    return JobRunnerThread(thread=t, loop=loop, stop_event=stop_event)
