# src/taskminder/tasks/live_query.py

from __future__ import annotations

"""
Live (observable) task lists.

A LiveQuery wraps a read function. Subscribers get the current snapshot right away and a
fresh full snapshot every time the store publishes a change. Snapshots are immutable tuples,
so listeners can keep them without copying.

There is no diffing and no queue: a Subscription only remembers the latest snapshot, so a
consumer that falls behind simply sees the newest state next time it looks.
"""

import logging
import threading
from collections.abc import Callable

from .task_models import Task

logger = logging.getLogger(__name__)

Snapshot = tuple[Task, ...]
SnapshotListener = Callable[[Snapshot], None]


class Subscription:
    """Handle returned by LiveQuery.subscribe()."""

    def __init__(self, query: LiveQuery, listener: SnapshotListener | None) -> None:
        self._query = query
        self._listener = listener
        self._lock = threading.Lock()
        self._latest: Snapshot = ()
        self._version = 0
        self._active = True

    @property
    def latest(self) -> Snapshot:
        with self._lock:
            return self._latest

    @property
    def version(self) -> int:
        """Number of snapshots received so far."""
        with self._lock:
            return self._version

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._query._detach(self)

    def _deliver(self, snapshot: Snapshot) -> None:
        if not self._active:
            return
        with self._lock:
            self._latest = snapshot
            self._version += 1
        if self._listener is None:
            return
        try:
            self._listener(snapshot)
        except Exception:
            logger.exception("Snapshot listener failed query=%s", self._query.name)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()


class LiveQuery:
    """
    A continuously-updated view over the task store.

    `on_active` fires when the first subscriber arrives and `on_idle` when the last one
    leaves, so the owner only refreshes queries somebody is listening to.
    """

    def __init__(
        self,
        name: str,
        read: Callable[[], list[Task]],
        *,
        on_active: Callable[[LiveQuery], None] | None = None,
        on_idle: Callable[[LiveQuery], None] | None = None,
    ) -> None:
        self.name = name
        self._read = read
        self._on_active = on_active
        self._on_idle = on_idle
        self._subs: list[Subscription] = []
        self._lock = threading.Lock()
        # Serializes read+deliver so an older snapshot never overwrites a newer one.
        self._publish_lock = threading.RLock()

    def snapshot(self) -> Snapshot:
        return tuple(self._read())

    def subscribe(self, listener: SnapshotListener | None = None) -> Subscription:
        sub = Subscription(self, listener)
        with self._lock:
            first = not self._subs
            self._subs.append(sub)
        if first and self._on_active is not None:
            self._on_active(self)
        with self._publish_lock:
            sub._deliver(self.snapshot())
        return sub

    def refresh(self) -> None:
        """Re-run the query and publish the result to every active subscriber."""
        with self._publish_lock:
            with self._lock:
                subs = list(self._subs)
            if not subs:
                return
            snap = self.snapshot()
            for sub in subs:
                sub._deliver(snap)

    def _detach(self, sub: Subscription) -> None:
        with self._lock:
            if sub not in self._subs:
                return
            self._subs.remove(sub)
            idle = not self._subs
        if idle and self._on_idle is not None:
            self._on_idle(self)
