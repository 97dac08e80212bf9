"""
Notification helper functions.

Notifications are team-wide: they live in the file store next to the files
whose uploads produce them, newest first.
"""

from teamfocuz.models import Notification, NotificationSeverity
from teamfocuz.state import (
    AddNotification,
    MarkAllNotificationsRead,
    MarkNotificationRead,
    get_file_store,
)


def create_notification(
    message: str, severity: NotificationSeverity = NotificationSeverity.INFO
) -> Notification:
    """
    Create a notification.

    Args:
        message: Human-readable message
        severity: info, success, warning or error

    Returns:
        Notification: the created notification
    """
    state = get_file_store().dispatch(
        AddNotification(message=message, severity=severity)
    )
    return state.notifications[0]


def get_notifications(limit: int = 20, unread_only: bool = False) -> list[Notification]:
    notifications = get_file_store().notifications
    if unread_only:
        notifications = [n for n in notifications if not n.read]
    return notifications[: max(0, limit)]


def get_unread_count() -> int:
    return get_file_store().unread_count()


def mark_as_read(notification_id: str) -> None:
    """Mark one notification as read; raises RecordNotFound for unknown ids."""
    get_file_store().dispatch(MarkNotificationRead(notification_id=notification_id))


def mark_all_as_read() -> int:
    """Mark every notification as read and return how many were unread."""
    store = get_file_store()
    unread = store.unread_count()
    store.dispatch(MarkAllNotificationsRead())
    return unread
