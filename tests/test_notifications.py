"""Tests for the notification helpers."""
import pytest

from teamfocuz.errors import RecordNotFound
from teamfocuz.models import NotificationSeverity
from teamfocuz.notifications import (
    create_notification,
    get_notifications,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
)


def test_seeded_notification(app):
    with app.app_context():
        notes = get_notifications()
        assert len(notes) == 1
        assert notes[0].id == "1"
        assert get_unread_count() == 1


def test_create_is_newest_first(app):
    with app.app_context():
        note = create_notification("Report ready", NotificationSeverity.SUCCESS)
        assert note.severity is NotificationSeverity.SUCCESS
        assert get_notifications()[0].id == note.id
        assert get_unread_count() == 2


def test_limit_and_unread_only(app):
    with app.app_context():
        for i in range(3):
            create_notification(f"note {i}")
        assert len(get_notifications(limit=2)) == 2
        mark_as_read("1")
        unread = get_notifications(unread_only=True)
        assert "1" not in [n.id for n in unread]
        assert len(unread) == 3


def test_mark_all(app):
    with app.app_context():
        create_notification("another")
        assert mark_all_as_read() == 2
        assert get_unread_count() == 0
        assert mark_all_as_read() == 0


def test_mark_unknown(app):
    with app.app_context():
        with pytest.raises(RecordNotFound):
            mark_as_read("does-not-exist")
