# src/taskminder/notifications/backends.py

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import threading
from datetime import datetime
from typing import TextIO

from .models import DisplayPriority, Notification, NotificationChannel

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotificationBackend:
    """
    Prints notifications to a stream (stdout by default).

    Keeps a slot table keyed by notification id, so a second post for the same id
    replaces the first one instead of adding another entry.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._channels: dict[str, NotificationChannel] = {}
        self._active: dict[int, Notification] = {}

    @property
    def active(self) -> dict[int, Notification]:
        with self._lock:
            return dict(self._active)

    def register_channel(self, channel: NotificationChannel) -> None:
        with self._lock:
            self._channels[channel.id] = channel

    def post(self, notification: Notification) -> None:
        with self._lock:
            replaced = notification.id in self._active
            self._active[notification.id] = notification
            channel = self._channels.get(notification.channel_id)

        stream = self._stream or sys.stdout
        label = channel.name if channel else notification.channel_id
        mark = "!" if notification.priority >= DisplayPriority.HIGH else "-"
        print(
            f"\n[{_ts_local()}] [{label}]{mark} {notification.title}: {notification.body}",
            file=stream,
            flush=True,
        )
        logger.debug("Console notification posted id=%s replaced=%s", notification.id, replaced)

    def dismiss(self, notification_id: int) -> bool:
        with self._lock:
            return self._active.pop(int(notification_id), None) is not None


class NotifySendBackend:
    """
    Desktop notifications through the freedesktop `notify-send` tool.

    The server-side id returned by `--print-id` is remembered per slot and passed back
    with `--replace-id`, so re-notifying a task updates its bubble.
    """

    def __init__(self, *, app_name: str = "taskminder", executable: str = "notify-send") -> None:
        self._app_name = app_name
        self._executable = executable
        self._lock = threading.Lock()
        self._server_ids: dict[int, str] = {}
        self._channels: dict[str, NotificationChannel] = {}

    @staticmethod
    def is_available(executable: str = "notify-send") -> bool:
        return shutil.which(executable) is not None

    def register_channel(self, channel: NotificationChannel) -> None:
        with self._lock:
            self._channels[channel.id] = channel

    def _build_command(self, notification: Notification, replace_id: str | None) -> list[str]:
        urgency = "critical" if notification.priority >= DisplayPriority.HIGH else "normal"
        with self._lock:
            channel = self._channels.get(notification.channel_id)
        cmd = [
            self._executable,
            f"--app-name={self._app_name}",
            f"--urgency={urgency}",
            "--icon=dialog-information",
            "--print-id",
        ]
        if channel is not None:
            cmd.append(f"--category={channel.id}")
        if replace_id:
            cmd.append(f"--replace-id={replace_id}")
        cmd += [notification.title, notification.body]
        return cmd

    def post(self, notification: Notification) -> None:
        with self._lock:
            replace_id = self._server_ids.get(notification.id)

        proc = subprocess.run(
            self._build_command(notification, replace_id),
            capture_output=True,
            text=True,
            timeout=10.0,
            check=True,
        )
        server_id = (proc.stdout or "").strip()
        if server_id.isdigit():
            with self._lock:
                self._server_ids[notification.id] = server_id
        logger.debug("notify-send posted id=%s server_id=%s", notification.id, server_id or "?")


def create_backend(name: str, *, app_name: str = "taskminder"):
    """Pick a backend by configured name; falls back to console when notify-send is missing."""
    key = (name or "console").strip().lower()
    if key in ("notify-send", "notify_send", "desktop"):
        if NotifySendBackend.is_available():
            return NotifySendBackend(app_name=app_name)
        logger.warning("notify-send not found on PATH; using console notifications.")
    elif key != "console":
        logger.warning("Unknown notification backend %r; using console.", name)
    return ConsoleNotificationBackend()
