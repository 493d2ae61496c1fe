# src/taskminder/notifications/permissions.py

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class AlwaysGranted:
    """Platforms where posting notifications needs no runtime permission."""

    def is_granted(self) -> bool:
        return True

    def request(self) -> bool:
        return True


class SettingsPermissionGate:
    """
    Boolean capability taken from configuration.

    request() can flip a denied gate to granted only when prompting is allowed
    (the console asks once at startup); otherwise it just reports the current state.
    """

    def __init__(self, granted: bool, *, can_prompt: bool = False) -> None:
        self._granted = bool(granted)
        self._can_prompt = bool(can_prompt)
        self._lock = threading.Lock()

    def is_granted(self) -> bool:
        with self._lock:
            return self._granted

    def request(self) -> bool:
        with self._lock:
            if not self._granted and self._can_prompt:
                self._granted = True
                logger.info("Notification permission granted on request.")
            return self._granted

    def revoke(self) -> None:
        with self._lock:
            self._granted = False
