"""
Demo data for the in-memory stores.

Seeds the four team accounts (one per role), three sample uploads and the
notification announcing the pending voice file. Ids are the short numeric
strings used by the demo so links stay stable across restarts.
"""
from datetime import datetime, timezone

from teamfocuz.models import FileType, ReviewStatus, UserRole, utcnow
from teamfocuz.state import AddFile, AddNotification, AddUser, FileStore, UserStore


def _date(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


DEMO_USERS = (
    AddUser(
        user_id="1",
        username="admin",
        email="admin@teamfocuz.com",
        role=UserRole.ADMIN,
        name="System Administrator",
        created_at=_date(2024, 1, 1),
    ),
    AddUser(
        user_id="2",
        username="veditor",
        email="editor@teamfocuz.com",
        role=UserRole.VIDEO_EDITOR,
        name="Alex Johnson",
        created_at=_date(2024, 1, 15),
    ),
    AddUser(
        user_id="3",
        username="swriter",
        email="writer@teamfocuz.com",
        role=UserRole.SCRIPT_WRITER,
        name="Sarah Chen",
        created_at=_date(2024, 1, 20),
    ),
    AddUser(
        user_id="4",
        username="vartist",
        email="voice@teamfocuz.com",
        role=UserRole.VOICE_ARTIST,
        name="Michael Rodriguez",
        created_at=_date(2024, 2, 1),
    ),
)

DEMO_FILES = (
    AddFile(
        file_id="1",
        filename="project_intro.mp4",
        original_name="Project Introduction Video.mp4",
        type=FileType.VIDEO,
        size=157286400,
        uploaded_by="2",
        uploaded_by_name="Alex Johnson",
        upload_date=_date(2024, 12, 1),
        status=ReviewStatus.APPROVED,
        mime_type="video/mp4",
        notify=False,
    ),
    AddFile(
        file_id="2",
        filename="episode_1_script.pdf",
        original_name="Episode 1 Script - Final Draft.pdf",
        type=FileType.SCRIPT,
        size=2048000,
        uploaded_by="3",
        uploaded_by_name="Sarah Chen",
        upload_date=_date(2024, 12, 2),
        status=ReviewStatus.APPROVED,
        mime_type="application/pdf",
        notify=False,
    ),
    AddFile(
        file_id="3",
        filename="narration_sample.mp3",
        original_name="Narration Sample - Take 1.mp3",
        type=FileType.VOICE,
        size=5242880,
        uploaded_by="4",
        uploaded_by_name="Michael Rodriguez",
        upload_date=_date(2024, 12, 3),
        status=ReviewStatus.PENDING,
        mime_type="audio/mp3",
        notify=False,
    ),
)


def seed_demo_data(user_store: UserStore, file_store: FileStore) -> None:
    """Load the demo team into empty stores. No-op if users already exist."""
    if user_store.count():
        return
    for action in DEMO_USERS:
        user_store.dispatch(action)
    for action in DEMO_FILES:
        file_store.dispatch(action)
    file_store.dispatch(
        AddNotification(
            notification_id="1",
            message="New voice file uploaded by Michael Rodriguez",
            timestamp=utcnow(),
        )
    )
