# src/taskminder/notifications/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Importance(IntEnum):
    LOW = 2
    DEFAULT = 3
    HIGH = 4


class DisplayPriority(IntEnum):
    LOW = -1
    DEFAULT = 0
    HIGH = 1


@dataclass(frozen=True, slots=True)
class NotificationChannel:
    """A category of notifications, registered once per process before the first post."""

    id: str
    name: str
    description: str
    importance: Importance = Importance.HIGH
    lights: bool = True
    vibration: bool = True


REMINDER_CHANNEL = NotificationChannel(
    id="todo_reminder_channel",
    name="Task Reminders",
    description="Notifications for task reminders",
)


@dataclass(frozen=True, slots=True)
class Notification:
    id: int  # slot: same id replaces the previous notification
    channel_id: str
    title: str
    body: str
    priority: DisplayPriority = DisplayPriority.HIGH
    auto_cancel: bool = True  # dismissed when tapped/acknowledged
