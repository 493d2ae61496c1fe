# src/taskminder/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the job facility, notification delivery and permission checks swappable
and makes testing possible without a desktop session or a long-running process.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

Clock = Callable[[], int]
# Returns "now" as epoch milliseconds.

JobPayload = dict[str, Any]


class JobResult(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class PendingJob:
    key: str
    kind: str
    payload: JobPayload
    run_at: int  # epoch ms
    generation: int


class DurableJobQueue(Protocol):
    """
    Deferred work that outlives the process.

    One pending job per key: submitting again under the same key replaces the earlier job.
    """

    def submit(
            self,
            key: str,
            payload: JobPayload,
            delay_ms: int,
            *,
            kind: str = "reminder",
            now_ms: int | None = None,
    ) -> None: ...

    def cancel(self, key: str) -> bool: ...
    def get_pending(self, key: str) -> PendingJob | None: ...


class JobHandler(Protocol):
    """Runs one fired job. Called from a worker thread; must not block on the user."""
    def run(self, payload: Mapping[str, Any]) -> JobResult: ...


class NotificationBackend(Protocol):
    """
    Delivery side of notifications (console, desktop, ...).

    post() uses notification.id as the slot: posting the same id again replaces, not stacks.
    """

    def register_channel(self, channel: Any) -> None: ...
    def post(self, notification: Any) -> None: ...


class PermissionGate(Protocol):
    """Does the process currently hold permission to show user-visible notifications?"""
    def is_granted(self) -> bool: ...
    def request(self) -> bool: ...
