"""
Domain models for the TeamFocuz dashboard.

Records are immutable dataclasses. The stores in ``teamfocuz.state`` never
mutate a record in place; they build a replacement with
``dataclasses.replace`` so that an update touches exactly the fields it names.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from flask_login import UserMixin


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class UserRole(Enum):
    """
    Enumeration for user roles in the system.

    - ADMIN: reviews files, manages users and reads reports
    - VIDEO_EDITOR: uploads video files
    - SCRIPT_WRITER: uploads script documents
    - VOICE_ARTIST: uploads voice recordings
    """

    ADMIN = "admin"
    VIDEO_EDITOR = "video_editor"
    SCRIPT_WRITER = "script_writer"
    VOICE_ARTIST = "voice_artist"

    @property
    def display_name(self) -> str:
        """Get human-readable role name."""
        names = {
            "admin": "Administrator",
            "video_editor": "Video Editor",
            "script_writer": "Script Writer",
            "voice_artist": "Voice Artist",
        }
        return names[self.value]

    @classmethod
    def parse(cls, value) -> "UserRole | None":
        """Return the role for ``value`` (enum, value or NAME), else None."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        raw = str(value).strip()
        for role in cls:
            if raw == role.value or raw.upper() == role.name:
                return role
        return None


class FileType(Enum):
    VIDEO = "video"
    SCRIPT = "script"
    VOICE = "voice"

    @property
    def plural_key(self) -> str:
        """Key used for this type in aggregated statistics."""
        return {"video": "videos", "script": "scripts", "voice": "voices"}[self.value]


class ReviewStatus(Enum):
    """
    Review status of an uploaded file.

    - PENDING: waiting for an administrator (initial state)
    - APPROVED: accepted by an administrator
    - REJECTED: refused by an administrator
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationSeverity(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class User(UserMixin):
    """
    A team account.

    Implements the Flask-Login user protocol through ``UserMixin``; the
    session stores ``id`` and the user loader resolves it from the user store.
    """

    id: str
    username: str
    email: str
    role: UserRole
    name: str
    created_at: datetime = field(default_factory=utcnow)
    last_login: datetime | None = None
    avatar: str | None = None

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def get_display_name(self) -> str:
        return self.name or self.username

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "role_name": self.role.display_name,
            "name": self.name,
            "avatar": self.avatar,
            "created_at": _iso(self.created_at),
            "last_login": _iso(self.last_login),
        }


@dataclass(frozen=True)
class UploadedFile:
    """
    Metadata for one uploaded asset.

    Only ``status`` ever changes after creation, and only from PENDING.
    """

    id: str
    filename: str
    original_name: str
    type: FileType
    size: int
    uploaded_by: str
    uploaded_by_name: str
    upload_date: datetime
    mime_type: str
    status: ReviewStatus = ReviewStatus.PENDING
    notes: str | None = None

    @property
    def month_key(self) -> str:
        """Calendar month of the upload in UTC, formatted ``YYYY-MM``."""
        moment = self.upload_date
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.strftime("%Y-%m")

    @property
    def is_pending(self) -> bool:
        return self.status == ReviewStatus.PENDING

    def __repr__(self) -> str:
        return f"<UploadedFile {self.id} {self.filename} ({self.status.value})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "original_name": self.original_name,
            "type": self.type.value,
            "size": self.size,
            "uploaded_by": self.uploaded_by,
            "uploaded_by_name": self.uploaded_by_name,
            "upload_date": _iso(self.upload_date),
            "status": self.status.value,
            "mime_type": self.mime_type,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MonthlyStats:
    """Upload counts for one calendar month. Derived, never stored."""

    month: str
    videos: int = 0
    scripts: int = 0
    voices: int = 0
    total: int = 0

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "videos": self.videos,
            "scripts": self.scripts,
            "voices": self.voices,
            "total": self.total,
        }


@dataclass(frozen=True)
class Notification:
    id: str
    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO
    timestamp: datetime = field(default_factory=utcnow)
    read: bool = False

    def __repr__(self) -> str:
        return f"<Notification {self.id} {self.severity.value} read={self.read}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "message": self.message,
            "type": self.severity.value,
            "timestamp": _iso(self.timestamp),
            "read": self.read,
        }
