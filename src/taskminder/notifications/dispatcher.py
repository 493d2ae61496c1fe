# src/taskminder/notifications/dispatcher.py

from __future__ import annotations

import logging
import threading

from ..core.ports import NotificationBackend, PermissionGate
from .models import REMINDER_CHANNEL, DisplayPriority, Notification, NotificationChannel

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Creates and shows task reminder notifications.

    It handles:
    - channel setup (once per process, before the first post),
    - the runtime permission check (before every post),
    - delivery through the configured backend.

    Suppression because of a missing permission is silent: callers run in the background
    and have nobody to tell.
    """

    def __init__(
        self,
        backend: NotificationBackend,
        permission: PermissionGate,
        *,
        channel: NotificationChannel = REMINDER_CHANNEL,
    ) -> None:
        self._backend = backend
        self._permission = permission
        self._channel = channel
        self._channel_lock = threading.Lock()
        self._channel_registered = False

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    def ensure_channel_registered(self) -> None:
        with self._channel_lock:
            if self._channel_registered:
                return
            self._backend.register_channel(self._channel)
            self._channel_registered = True
        logger.debug("Notification channel registered id=%s", self._channel.id)

    def request_permission_if_needed(self) -> bool:
        if self._permission.is_granted():
            return True
        granted = self._permission.request()
        if not granted:
            logger.info("Notification permission not granted; reminders will be silent.")
        return granted

    def notify(self, notification_id: int, title: str, body: str) -> None:
        if not self._permission.is_granted():
            logger.debug("Notification suppressed (no permission) id=%s", notification_id)
            return

        self.ensure_channel_registered()
        self._backend.post(
            Notification(
                id=int(notification_id),
                channel_id=self._channel.id,
                title=title,
                body=body,
                priority=DisplayPriority.HIGH,
                auto_cancel=True,
            )
        )
