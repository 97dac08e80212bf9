"""
In-memory state containers for users, files and notifications.

Every change is expressed as an action object. A pure reducer maps
``(state, action)`` to a new state, and the owning store swaps the new state
in under a lock. Views never touch module-level state: they receive the
stores through ``current_app.extensions`` (see ``get_user_store`` and
``get_file_store``).

Usage:
    store = get_file_store()
    store.dispatch(UpdateFileStatus(file_id="3", status=ReviewStatus.APPROVED))
"""
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import uuid4

from flask import current_app

from teamfocuz.errors import (
    DuplicateUsername,
    InvalidStatusTransition,
    RecordNotFound,
)
from teamfocuz.models import (
    FileType,
    Notification,
    NotificationSeverity,
    ReviewStatus,
    UploadedFile,
    User,
    UserRole,
    utcnow,
)

USER_STORE_KEY = "teamfocuz.user_store"
FILE_STORE_KEY = "teamfocuz.file_store"


def new_id() -> str:
    return uuid4().hex


# ---------------------------------------------------------------------------
# User directory
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserState:
    users: tuple[User, ...] = ()


@dataclass(frozen=True)
class AddUser:
    username: str
    email: str
    role: UserRole
    name: str
    avatar: str | None = None
    user_id: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None


@dataclass(frozen=True)
class UpdateUser:
    user_id: str
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteUser:
    user_id: str


@dataclass(frozen=True)
class RecordLogin:
    user_id: str
    at: datetime | None = None


_EDITABLE_USER_FIELDS = {"username", "email", "role", "name", "avatar"}


def _find_user(users, user_id: str) -> User:
    for user in users:
        if user.id == user_id:
            return user
    raise RecordNotFound("User", user_id)


def _ensure_unique_username(users, username: str, exclude_id: str | None = None):
    wanted = username.strip().lower()
    for user in users:
        if user.id != exclude_id and user.username.lower() == wanted:
            raise DuplicateUsername(username)


def reduce_users(state: UserState, action) -> UserState:
    """Apply one user action and return the resulting state."""
    if isinstance(action, AddUser):
        _ensure_unique_username(state.users, action.username)
        user = User(
            id=action.user_id or new_id(),
            username=action.username.strip(),
            email=action.email.strip(),
            role=action.role,
            name=action.name.strip(),
            created_at=action.created_at or utcnow(),
            last_login=action.last_login,
            avatar=action.avatar,
        )
        return replace(state, users=state.users + (user,))

    if isinstance(action, UpdateUser):
        current = _find_user(state.users, action.user_id)
        changes = {
            k: v for k, v in action.changes.items() if k in _EDITABLE_USER_FIELDS
        }
        if "username" in changes:
            _ensure_unique_username(
                state.users, changes["username"], exclude_id=current.id
            )
        updated = replace(current, **changes)
        return replace(
            state,
            users=tuple(updated if u.id == current.id else u for u in state.users),
        )

    if isinstance(action, DeleteUser):
        _find_user(state.users, action.user_id)
        return replace(
            state, users=tuple(u for u in state.users if u.id != action.user_id)
        )

    if isinstance(action, RecordLogin):
        current = _find_user(state.users, action.user_id)
        updated = replace(current, last_login=action.at or utcnow())
        return replace(
            state,
            users=tuple(updated if u.id == current.id else u for u in state.users),
        )

    raise TypeError(f"Unsupported user action: {type(action).__name__}")


# ---------------------------------------------------------------------------
# File registry and notifications
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileState:
    files: tuple[UploadedFile, ...] = ()
    notifications: tuple[Notification, ...] = ()


@dataclass(frozen=True)
class AddFile:
    filename: str
    original_name: str
    type: FileType
    size: int
    uploaded_by: str
    uploaded_by_name: str
    mime_type: str
    notes: str | None = None
    file_id: str | None = None
    upload_date: datetime | None = None
    status: ReviewStatus = ReviewStatus.PENDING
    notify: bool = True


@dataclass(frozen=True)
class UpdateFileStatus:
    file_id: str
    status: ReviewStatus


@dataclass(frozen=True)
class DeleteFile:
    file_id: str


@dataclass(frozen=True)
class AddNotification:
    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO
    notification_id: str | None = None
    timestamp: datetime | None = None
    read: bool = False


@dataclass(frozen=True)
class MarkNotificationRead:
    notification_id: str


@dataclass(frozen=True)
class MarkAllNotificationsRead:
    pass


def _find_file(files, file_id: str) -> UploadedFile:
    for record in files:
        if record.id == file_id:
            return record
    raise RecordNotFound("File", file_id)


def _prepend_notification(state: FileState, action: AddNotification) -> FileState:
    note = Notification(
        id=action.notification_id or new_id(),
        message=action.message,
        severity=action.severity,
        timestamp=action.timestamp or utcnow(),
        read=action.read,
    )
    return replace(state, notifications=(note,) + state.notifications)


def reduce_files(state: FileState, action) -> FileState:
    """Apply one file/notification action and return the resulting state."""
    if isinstance(action, AddFile):
        record = UploadedFile(
            id=action.file_id or new_id(),
            filename=action.filename,
            original_name=action.original_name,
            type=action.type,
            size=int(action.size),
            uploaded_by=action.uploaded_by,
            uploaded_by_name=action.uploaded_by_name,
            upload_date=action.upload_date or utcnow(),
            mime_type=action.mime_type,
            status=action.status,
            notes=action.notes,
        )
        state = replace(state, files=state.files + (record,))
        if action.notify:
            state = _prepend_notification(
                state,
                AddNotification(
                    message=f"New {record.type.value} file uploaded by "
                    f"{record.uploaded_by_name}"
                ),
            )
        return state

    if isinstance(action, UpdateFileStatus):
        current = _find_file(state.files, action.file_id)
        if (
            current.status != ReviewStatus.PENDING
            or action.status == ReviewStatus.PENDING
        ):
            raise InvalidStatusTransition(current.status, action.status)
        updated = replace(current, status=action.status)
        return replace(
            state,
            files=tuple(updated if f.id == current.id else f for f in state.files),
        )

    if isinstance(action, DeleteFile):
        _find_file(state.files, action.file_id)
        return replace(
            state, files=tuple(f for f in state.files if f.id != action.file_id)
        )

    if isinstance(action, AddNotification):
        return _prepend_notification(state, action)

    if isinstance(action, MarkNotificationRead):
        if not any(n.id == action.notification_id for n in state.notifications):
            raise RecordNotFound("Notification", action.notification_id)
        return replace(
            state,
            notifications=tuple(
                replace(n, read=True) if n.id == action.notification_id else n
                for n in state.notifications
            ),
        )

    if isinstance(action, MarkAllNotificationsRead):
        return replace(
            state,
            notifications=tuple(replace(n, read=True) for n in state.notifications),
        )

    raise TypeError(f"Unsupported file action: {type(action).__name__}")


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class Store:
    """Holds one state value and applies actions through a reducer."""

    def __init__(self, reducer, initial_state):
        self._reducer = reducer
        self._state = initial_state
        self._lock = threading.Lock()

    @property
    def state(self):
        return self._state

    def dispatch(self, action):
        """Apply ``action`` and return the new state.

        The reducer raises on invalid actions, in which case the state is
        left untouched.
        """
        with self._lock:
            self._state = self._reducer(self._state, action)
            return self._state


class UserStore(Store):
    def __init__(self, initial_state: UserState | None = None):
        super().__init__(reduce_users, initial_state or UserState())

    def all(self) -> list[User]:
        return list(self.state.users)

    def get(self, user_id) -> User | None:
        if user_id is None:
            return None
        for user in self.state.users:
            if user.id == str(user_id):
                return user
        return None

    def find_by_username(self, username: str) -> User | None:
        if not username:
            return None
        for user in self.state.users:
            if user.username == username:
                return user
        return None

    def count(self) -> int:
        return len(self.state.users)


class FileStore(Store):
    def __init__(self, initial_state: FileState | None = None):
        super().__init__(reduce_files, initial_state or FileState())

    @property
    def files(self) -> list[UploadedFile]:
        return list(self.state.files)

    @property
    def notifications(self) -> list[Notification]:
        return list(self.state.notifications)

    def get(self, file_id) -> UploadedFile | None:
        for record in self.state.files:
            if record.id == str(file_id):
                return record
        return None

    def files_for(self, user: User) -> list[UploadedFile]:
        """Files visible to ``user``: everything for admins, own uploads otherwise."""
        if user.is_admin():
            return self.files
        return [f for f in self.state.files if f.uploaded_by == user.id]

    def recent(self, limit: int = 5, files=None) -> list[UploadedFile]:
        """Newest uploads first."""
        source = self.files if files is None else list(files)
        return sorted(source, key=lambda f: f.upload_date, reverse=True)[:limit]

    def search(
        self,
        term: str = "",
        status: str = "all",
        file_type: str = "all",
        files=None,
    ) -> list[UploadedFile]:
        """Filter by a case-insensitive name/uploader term, status and type."""
        source = self.files if files is None else list(files)
        needle = (term or "").strip().lower()
        results = []
        for record in source:
            if needle and not (
                needle in record.original_name.lower()
                or needle in record.uploaded_by_name.lower()
            ):
                continue
            if status and status != "all" and record.status.value != status:
                continue
            if file_type and file_type != "all" and record.type.value != file_type:
                continue
            results.append(record)
        return results

    def unread_count(self) -> int:
        return sum(1 for n in self.state.notifications if not n.read)


def init_stores(app) -> tuple[UserStore, FileStore]:
    """Create fresh stores and register them on the application."""
    users = UserStore()
    files = FileStore()
    app.extensions[USER_STORE_KEY] = users
    app.extensions[FILE_STORE_KEY] = files
    return users, files


def get_user_store(app=None) -> UserStore:
    return (app or current_app).extensions[USER_STORE_KEY]


def get_file_store(app=None) -> FileStore:
    return (app or current_app).extensions[FILE_STORE_KEY]
