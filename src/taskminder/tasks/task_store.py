# src/taskminder/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from collections.abc import Callable
from pathlib import Path

from .live_query import LiveQuery
from .task_models import Priority, Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store with live views.

    The schema is migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection
    - writes are serialized by a store-level lock, and every effective write republishes
      the live queries that currently have subscribers
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._live_lock = threading.Lock()
        self._live: list[LiveQuery] = []
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            # AUTOINCREMENT: ids of deleted rows are never handed out again.
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    priority INTEGER NOT NULL DEFAULT 0,
                    due_date INTEGER,
                    is_completed INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("priority", "INTEGER NOT NULL DEFAULT 0")
            add_col("due_date", "INTEGER")
            add_col("is_completed", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_priority_due ON tasks(priority, due_date)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            priority=Priority.from_db(row["priority"]),
            due_date=int(row["due_date"]) if row["due_date"] is not None else None,
            is_completed=bool(row["is_completed"]),
        )

    def _select(self, sql: str, params: tuple = ()) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def _publish(self) -> None:
        with self._live_lock:
            queries = list(self._live)
        for q in queries:
            q.refresh()

    def _track(self, query: LiveQuery) -> None:
        with self._live_lock:
            if query not in self._live:
                self._live.append(query)

    def _untrack(self, query: LiveQuery) -> None:
        with self._live_lock:
            if query in self._live:
                self._live.remove(query)

    def _live_query(self, name: str, read: Callable[[], list[Task]]) -> LiveQuery:
        return LiveQuery(
            name,
            read,
            on_active=self._track,
            on_idle=self._untrack,
        )

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def insert(self, task: Task) -> int:
        """
        Persist a task and return its id.

        id == 0 -> a new id is generated.
        id  > 0 -> upsert: any row with that id is replaced (used by undo re-insert).
        """
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                if task.id > 0:
                    cur.execute(
                        """
                        INSERT OR REPLACE INTO tasks(id, title, priority, due_date, is_completed)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            int(task.id),
                            task.title,
                            int(task.priority),
                            task.due_date,
                            int(bool(task.is_completed)),
                        ),
                    )
                    task_id = int(task.id)
                else:
                    cur.execute(
                        """
                        INSERT INTO tasks(title, priority, due_date, is_completed)
                        VALUES (?, ?, ?, ?)
                        """,
                        (
                            task.title,
                            int(task.priority),
                            task.due_date,
                            int(bool(task.is_completed)),
                        ),
                    )
                    rowid = cur.lastrowid
                    if rowid is None:
                        raise RuntimeError("SQLite did not return lastrowid for tasks insert")
                    task_id = int(rowid)
                conn.commit()
            finally:
                conn.close()

        logger.debug(
            "Task inserted id=%s priority=%s due_date=%s",
            task_id,
            int(task.priority),
            task.due_date,
        )
        self._publish()
        return task_id

    def update(self, task: Task) -> bool:
        """
        Replace the row matching task.id.

        A vanished row is tolerated: nothing is written, nothing is published, False is returned.
        """
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                cur.execute(
                    """
                    UPDATE tasks
                    SET title = ?, priority = ?, due_date = ?, is_completed = ?
                    WHERE id = ?
                    """,
                    (
                        task.title,
                        int(task.priority),
                        task.due_date,
                        int(bool(task.is_completed)),
                        int(task.id),
                    ),
                )
                conn.commit()
                changed = cur.rowcount == 1
            finally:
                conn.close()

        if not changed:
            logger.debug("Task update skipped, no row id=%s", task.id)
            return False
        self._publish()
        return True

    def delete(self, task: Task) -> bool:
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.cursor()
                cur.execute("DELETE FROM tasks WHERE id = ?", (int(task.id),))
                conn.commit()
                changed = cur.rowcount == 1
            finally:
                conn.close()

        if not changed:
            logger.debug("Task delete skipped, no row id=%s", task.id)
            return False
        logger.debug("Task deleted id=%s", task.id)
        self._publish()
        return True

    def get_by_id(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_all(self) -> list[Task]:
        return self._select("SELECT * FROM tasks ORDER BY id ASC")

    def list_by_priority(self, priority: Priority) -> list[Task]:
        return self._select(
            """
            SELECT *
            FROM tasks
            WHERE priority = ?
            ORDER BY due_date IS NULL ASC, due_date ASC, id ASC
            """,
            (int(priority),),
        )

    def get_all(self) -> LiveQuery:
        """Live view of every task, ascending id."""
        return self._live_query("all", self.list_all)

    def get_by_priority(self, priority: Priority) -> LiveQuery:
        """Live view of one priority, ascending due date, tasks without a due date last."""
        p = Priority(priority)
        return self._live_query(f"priority={p.name.lower()}", lambda: self.list_by_priority(p))
