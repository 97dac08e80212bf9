"""
Domain exceptions raised by the in-memory stores and the upload tracker.

Views translate these into flashes (HTML pages) or JSON error bodies (API).
"""


class TeamFocuzError(Exception):
    """Base class for all application errors."""

    status_code = 400


class RecordNotFound(TeamFocuzError):
    """A user, file, notification or upload job id does not exist."""

    status_code = 404

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class DuplicateUsername(TeamFocuzError):
    status_code = 409

    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken")
        self.username = username


class InvalidStatusTransition(TeamFocuzError):
    """Only pending files can be approved or rejected."""

    status_code = 409

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot change review status from {current.value} to {requested.value}"
        )
        self.current = current
        self.requested = requested


class UploadRejected(TeamFocuzError):
    """Upload refused before a job was created (role or file type)."""


class InvalidJobState(TeamFocuzError):
    status_code = 409
