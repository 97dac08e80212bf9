"""
Role-based permission tables and checking utilities.

This module provides the navigation table (route -> permitted roles), the
upload capability table (role -> accepted file kinds) and the decorators
that enforce them on views.
"""
import os
from dataclasses import dataclass
from enum import Enum
from functools import wraps

from flask import flash, redirect, request, url_for
from flask_login import current_user

from teamfocuz.models import FileType, UserRole

CONTRIBUTOR_ROLES = frozenset(
    {UserRole.VIDEO_EDITOR, UserRole.SCRIPT_WRITER, UserRole.VOICE_ARTIST}
)
ALL_ROLES = frozenset(UserRole)
ADMIN_ONLY = frozenset({UserRole.ADMIN})


@dataclass(frozen=True)
class NavItem:
    name: str
    endpoint: str
    path: str
    roles: frozenset

    def to_dict(self) -> dict:
        return {"name": self.name, "endpoint": self.endpoint, "path": self.path}


# Declaration order is display order.
NAVIGATION: tuple[NavItem, ...] = (
    NavItem("Dashboard", "main.dashboard", "/dashboard", ALL_ROLES),
    NavItem("Upload Files", "main.upload", "/upload", CONTRIBUTOR_ROLES),
    NavItem("All Files", "admin.files", "/files", ADMIN_ONLY),
    NavItem("Manage Users", "admin.users", "/users", ADMIN_ONLY),
    NavItem("Monthly Reports", "admin.reports", "/reports", ADMIN_ONLY),
)

_ROUTE_ROLES = {item.endpoint: item.roles for item in NAVIGATION}


class RouteDecision(Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_DEFAULT = "redirect_default"


def permitted_routes(role) -> list[NavItem]:
    """Navigation items visible to ``role``, in declaration order.

    Unknown roles (or None) get an empty list.
    """
    parsed = UserRole.parse(role)
    if parsed is None:
        return []
    return [item for item in NAVIGATION if parsed in item.roles]


def check_route(endpoint: str, user) -> RouteDecision:
    """Decide whether ``user`` may open the view registered as ``endpoint``.

    Anonymous users are sent to login. Endpoints that are not part of the
    navigation table are open to any authenticated user.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return RouteDecision.REDIRECT_LOGIN
    roles = _ROUTE_ROLES.get(endpoint)
    if roles is None:
        return RouteDecision.ALLOW
    role = UserRole.parse(getattr(user, "role", None))
    if role is None or role not in roles:
        return RouteDecision.REDIRECT_DEFAULT
    return RouteDecision.ALLOW


def require_route(endpoint: str):
    """
    Decorator to enforce the navigation table on a view.

    Usage:
        @main_bp.route("/upload")
        @require_route("main.upload")
        def upload():
            ...

    Anonymous users are redirected to the login page (with ``next``);
    users whose role is not permitted are redirected to the dashboard.
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            decision = check_route(endpoint, current_user)
            if decision is RouteDecision.REDIRECT_LOGIN:
                return redirect(url_for("auth.login", next=request.path))
            if decision is RouteDecision.REDIRECT_DEFAULT:
                flash("You do not have access to that page.", "warning")
                return redirect(url_for("main.dashboard"))
            return f(*args, **kwargs)

        return decorated_function

    return decorator


@dataclass(frozen=True)
class UploadRule:
    file_type: FileType
    extensions: tuple[str, ...]
    mime_types: tuple[str, ...]
    label: str

    @property
    def accept_attr(self) -> str:
        """Value for an ``<input type=file accept=...>`` attribute."""
        return ",".join(self.extensions)


UPLOAD_RULES: dict[UserRole, UploadRule] = {
    UserRole.VIDEO_EDITOR: UploadRule(
        file_type=FileType.VIDEO,
        extensions=(".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm"),
        mime_types=(
            "video/mp4",
            "video/avi",
            "video/quicktime",
            "video/x-ms-wmv",
            "video/x-flv",
            "video/webm",
        ),
        label="Video Files (MP4, AVI, MOV, WMV, FLV, WebM)",
    ),
    UserRole.SCRIPT_WRITER: UploadRule(
        file_type=FileType.SCRIPT,
        extensions=(".pdf", ".doc", ".docx", ".txt"),
        mime_types=(
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "text/plain",
        ),
        label="Document Files (PDF, DOC, DOCX, TXT)",
    ),
    UserRole.VOICE_ARTIST: UploadRule(
        file_type=FileType.VOICE,
        extensions=(".mp3", ".wav", ".aac", ".flac", ".ogg"),
        mime_types=(
            "audio/mp3",
            "audio/mpeg",
            "audio/wav",
            "audio/aac",
            "audio/flac",
            "audio/ogg",
        ),
        label="Audio Files (MP3, WAV, AAC, FLAC, OGG)",
    ),
}

# Browsers send this when they cannot tell the type.
_GENERIC_MIME_TYPES = {"", "application/octet-stream"}


def upload_rule_for(role) -> UploadRule | None:
    """Upload capability for ``role``; None when the role cannot upload."""
    parsed = UserRole.parse(role)
    if parsed is None:
        return None
    return UPLOAD_RULES.get(parsed)


def accepts(rule: UploadRule, filename: str, mime_type: str | None) -> bool:
    """Check a file against an upload rule.

    A listed MIME type is accepted outright. Without a useful MIME type the
    file extension decides.
    """
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime in rule.mime_types:
        return True
    if mime in _GENERIC_MIME_TYPES:
        ext = os.path.splitext(filename or "")[1].lower()
        return ext in rule.extensions
    return False
