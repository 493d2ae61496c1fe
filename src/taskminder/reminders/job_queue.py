# src/taskminder/reminders/job_queue.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.ports import Clock, JobPayload, PendingJob
from ..tasks.task_models import now_ms as _wall_now_ms

logger = logging.getLogger(__name__)


class SqliteJobQueue:
    """
    Durable deferred-job table (SQLite).

    Rows are keyed by `key` (PRIMARY KEY), which is what makes "one live job per key" hold:
    submit() is an upsert that overwrites payload and run time and bumps `generation`.

    A job's life:
      submit   -> pending
      claim    -> running   (only if still pending with the expected generation)
      complete -> row removed (only if the generation did not change while running)
      backoff  -> pending again with a later run_at

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "jobs.sqlite3", *, clock: Clock | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock: Clock = clock or _wall_now_ms
        self._ensure_schema()
        try:
            total = self.count_pending()
        except sqlite3.Error:
            total = -1
        logger.info("SqliteJobQueue ready db=%s pending=%s", self._db_path, total)

    def close(self) -> None:
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS deferred_jobs (
                    key TEXT PRIMARY KEY,
                    kind TEXT NOT NULL DEFAULT 'reminder',
                    payload TEXT NOT NULL DEFAULT '{}',
                    run_at INTEGER NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    generation INTEGER NOT NULL DEFAULT 1,
                    attempts INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_jobs_status_run_at ON deferred_jobs(status, run_at)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _payload_to_str(payload: JobPayload | None) -> str:
        return json.dumps(payload or {}, ensure_ascii=False)

    @staticmethod
    def _str_to_payload(s: str | None) -> JobPayload:
        if not s:
            return {}
        try:
            val = json.loads(s)
        except ValueError:
            logger.warning("Undecodable job payload; using {}")
            return {}
        return val if isinstance(val, dict) else {}

    def _row_to_job(self, row: sqlite3.Row) -> PendingJob:
        return PendingJob(
            key=str(row["key"]),
            kind=str(row["kind"] or "reminder"),
            payload=self._str_to_payload(row["payload"]),
            run_at=int(row["run_at"]),
            generation=int(row["generation"]),
        )

    # ---- DurableJobQueue ----

    def submit(
        self,
        key: str,
        payload: JobPayload,
        delay_ms: int,
        *,
        kind: str = "reminder",
        now_ms: int | None = None,
    ) -> None:
        """
        Persist a job to run no earlier than now + delay_ms.

        Same key -> the earlier job (pending or running) is superseded.
        """
        if not key:
            raise ValueError("key is required")
        now = self._clock() if now_ms is None else int(now_ms)
        run_at = now + max(0, int(delay_ms))
        ts = time.time()

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO deferred_jobs(key, kind, payload, run_at, status, generation,
                                          attempts, created_at, updated_at)
                VALUES (?, ?, ?, ?, 'pending', 1, 0, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    kind = excluded.kind,
                    payload = excluded.payload,
                    run_at = excluded.run_at,
                    status = 'pending',
                    generation = deferred_jobs.generation + 1,
                    attempts = 0,
                    updated_at = excluded.updated_at
                """,
                (key, kind, self._payload_to_str(payload), run_at, ts, ts),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Job submitted key=%s kind=%s run_at=%s", key, kind, run_at)

    def cancel(self, key: str) -> bool:
        """Drop a pending job. A job that is already running is left to finish."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM deferred_jobs WHERE key = ? AND status = 'pending'",
                (key,),
            )
            conn.commit()
            removed = cur.rowcount == 1
        finally:
            conn.close()
        if removed:
            logger.debug("Job cancelled key=%s", key)
        return removed

    def get_pending(self, key: str) -> PendingJob | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM deferred_jobs WHERE key = ? AND status = 'pending'",
                (key,),
            )
            row = cur.fetchone()
            return self._row_to_job(row) if row else None
        finally:
            conn.close()

    # ---- runner API ----

    def count_pending(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM deferred_jobs WHERE status = 'pending'")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def list_pending(self, *, limit: int = 100) -> list[PendingJob]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM deferred_jobs
                WHERE status = 'pending'
                ORDER BY run_at ASC, key ASC
                    LIMIT ?
                """,
                (int(limit),),
            )
            return [self._row_to_job(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def list_due(self, *, now_ms: int, limit: int = 32) -> list[PendingJob]:
        """Pending jobs whose run_at <= now_ms, oldest first."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM deferred_jobs
                WHERE status = 'pending'
                  AND run_at <= ?
                ORDER BY run_at ASC, key ASC
                    LIMIT ?
                """,
                (int(now_ms), int(limit)),
            )
            return [self._row_to_job(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def try_claim(self, key: str, *, generation: int) -> bool:
        """
        Atomically transitions pending -> running for exactly this generation.

        Returns False if the job was cancelled or superseded in the meantime.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE deferred_jobs
                SET status = 'running', attempts = attempts + 1, updated_at = ?
                WHERE key = ?
                  AND status = 'pending'
                  AND generation = ?
                """,
                (time.time(), key, int(generation)),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def complete(self, key: str, *, generation: int) -> bool:
        """Remove a finished job unless it was re-submitted while it ran."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM deferred_jobs WHERE key = ? AND generation = ? AND status = 'running'",
                (key, int(generation)),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def backoff(self, key: str, *, generation: int, run_at: int) -> bool:
        """Put a running job back to pending with a later run time."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE deferred_jobs
                SET status = 'pending', run_at = ?, updated_at = ?
                WHERE key = ?
                  AND generation = ?
                  AND status = 'running'
                """,
                (int(run_at), time.time(), key, int(generation)),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def requeue_stale(self) -> int:
        """
        Jobs left 'running' by a process that died mid-run go back to 'pending'.

        Call once at startup, before the runner starts.
        """
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "UPDATE deferred_jobs SET status = 'pending', updated_at = ? WHERE status = 'running'",
                (time.time(),),
            )
            conn.commit()
            n = int(cur.rowcount)
        finally:
            conn.close()
        if n:
            logger.info("Requeued %s stale running job(s)", n)
        return n

    def stats(self) -> dict[str, Any]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT status, COUNT(*) AS n FROM deferred_jobs GROUP BY status")
            return {str(r["status"]): int(r["n"]) for r in cur.fetchall()}
        finally:
            conn.close()
