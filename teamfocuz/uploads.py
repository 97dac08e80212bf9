"""
Simulated file uploads.

No bytes are stored. An upload becomes an ``UploadJob`` that is pending until
its scheduled completion time (``due_at``); the first poll at or after that
time completes it by registering one file record per staged file. Pending
jobs can be cancelled. There are no background threads: every request sweeps
the tracker (``complete_due``) before its view runs, so a due upload lands in
the registry whether or not anyone polls its job. Finished jobs are dropped
after ``UPLOAD_JOB_RETENTION`` seconds.
"""
import re
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum

import structlog
from flask import current_app

from teamfocuz.errors import InvalidJobState, RecordNotFound, UploadRejected
from teamfocuz.models import FileType, User, utcnow
from teamfocuz.permissions import accepts, upload_rule_for
from teamfocuz.state import AddFile, FileStore, new_id

logger = structlog.get_logger(__name__)

UPLOAD_TRACKER_KEY = "teamfocuz.upload_tracker"

_WHITESPACE = re.compile(r"\s+")
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def normalize_filename(name: str) -> str:
    """Stored filename: whitespace runs become ``_`` and the result is lowercased."""
    return _WHITESPACE.sub("_", name or "").lower()


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``157286400`` -> ``"150 MB"``."""
    if not size or size <= 0:
        return "0 Bytes"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[exponent]}"


class JobState(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class StagedFile:
    original_name: str
    size: int
    mime_type: str

    def to_dict(self) -> dict:
        return {
            "original_name": self.original_name,
            "size": self.size,
            "mime_type": self.mime_type,
        }


@dataclass(frozen=True)
class UploadJob:
    id: str
    user_id: str
    uploader_name: str
    file_type: FileType
    files: tuple[StagedFile, ...]
    created_at: datetime
    due_at: datetime
    state: JobState = JobState.PENDING
    file_ids: tuple[str, ...] = field(default_factory=tuple)
    finished_at: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.state is not JobState.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "file_type": self.file_type.value,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "due_at": self.due_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "files": [f.to_dict() for f in self.files],
            "file_ids": list(self.file_ids),
        }


class UploadTracker:
    """Owns upload jobs and completes them into a ``FileStore``.

    Pending jobs complete once ``due_at`` has passed, either when their own
    id is polled or when ``complete_due`` sweeps them (every request does).
    Finished jobs are forgotten ``retention`` after they finished.
    """

    def __init__(
        self,
        file_store: FileStore,
        delay_seconds: float = 2.0,
        retention_seconds: float = 3600.0,
    ):
        self.file_store = file_store
        self.delay = timedelta(seconds=max(0.0, float(delay_seconds)))
        self.retention = timedelta(seconds=max(0.0, float(retention_seconds)))
        self._jobs: dict[str, UploadJob] = {}
        # Reentrant: get() is also called while poll/cancel hold the lock
        self._lock = threading.RLock()

    def count(self) -> int:
        with self._lock:
            return len(self._jobs)

    def get(self, job_id: str) -> UploadJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise RecordNotFound("Upload job", job_id)
        return job

    def jobs_for(self, user_id: str) -> list[UploadJob]:
        with self._lock:
            return [j for j in self._jobs.values() if j.user_id == user_id]

    def start(
        self, user: User, staged: list[StagedFile], now: datetime | None = None
    ) -> UploadJob:
        """Validate staged files against the user's upload rule and schedule a job."""
        rule = upload_rule_for(user.role)
        if rule is None:
            raise UploadRejected(f"{user.role.display_name} accounts cannot upload")
        if not staged:
            raise UploadRejected("No files selected")
        refused = [
            f.original_name
            for f in staged
            if not accepts(rule, f.original_name, f.mime_type)
        ]
        if refused:
            raise UploadRejected(
                f"Unsupported file type: {', '.join(refused)}. Accepted: {rule.label}"
            )

        created = now or utcnow()
        job = UploadJob(
            id=new_id(),
            user_id=user.id,
            uploader_name=user.name,
            file_type=rule.file_type,
            files=tuple(staged),
            created_at=created,
            due_at=created + self.delay,
        )
        with self._lock:
            self._prune(created)
            self._jobs[job.id] = job
        logger.info(
            "upload_started",
            job_id=job.id,
            user_id=user.id,
            file_count=len(staged),
            due_at=job.due_at.isoformat(),
        )
        return job

    def _complete(self, job: UploadJob, moment: datetime) -> UploadJob:
        """Register the job's files. Caller holds the lock."""
        file_ids = []
        for staged in job.files:
            file_id = new_id()
            self.file_store.dispatch(
                AddFile(
                    file_id=file_id,
                    filename=normalize_filename(staged.original_name),
                    original_name=staged.original_name,
                    type=job.file_type,
                    size=staged.size,
                    uploaded_by=job.user_id,
                    uploaded_by_name=job.uploader_name,
                    mime_type=staged.mime_type,
                    upload_date=moment,
                )
            )
            file_ids.append(file_id)
        job = replace(
            job,
            state=JobState.COMPLETED,
            file_ids=tuple(file_ids),
            finished_at=moment,
        )
        self._jobs[job.id] = job
        logger.info("upload_completed", job_id=job.id, file_ids=file_ids)
        return job

    def _prune(self, moment: datetime) -> int:
        """Forget finished jobs older than the retention window. Caller holds the lock."""
        cutoff = moment - self.retention
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.is_finished
            and job.finished_at is not None
            and job.finished_at <= cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        return len(expired)

    def poll(self, job_id: str, now: datetime | None = None) -> UploadJob:
        """Return the job, completing it first if its time has come."""
        moment = now or utcnow()
        with self._lock:
            job = self.get(job_id)
            if job.state is not JobState.PENDING or moment < job.due_at:
                return job
            return self._complete(job, moment)

    def complete_due(self, now: datetime | None = None) -> list[UploadJob]:
        """Complete every pending job whose time has come, then prune old ones."""
        moment = now or utcnow()
        with self._lock:
            due = [
                job
                for job in self._jobs.values()
                if job.state is JobState.PENDING and job.due_at <= moment
            ]
            completed = [self._complete(job, moment) for job in due]
            self._prune(moment)
        return completed

    def cancel(self, job_id: str, now: datetime | None = None) -> UploadJob:
        """Cancel a pending job. Cancelling twice is a no-op."""
        with self._lock:
            job = self.get(job_id)
            if job.state is JobState.CANCELLED:
                return job
            if job.state is JobState.COMPLETED:
                raise InvalidJobState("Upload already completed")
            job = replace(job, state=JobState.CANCELLED, finished_at=now or utcnow())
            self._jobs[job.id] = job
        logger.info("upload_cancelled", job_id=job.id)
        return job


def staged_from_request_files(storages) -> list[StagedFile]:
    """Build staged descriptors from werkzeug ``FileStorage`` objects.

    The stream is read only to measure it; content is discarded.
    """
    staged = []
    for storage in storages:
        if not storage or not storage.filename:
            continue
        size = storage.content_length or 0
        if not size:
            stream = storage.stream
            stream.seek(0, 2)
            size = stream.tell()
            stream.seek(0)
        staged.append(
            StagedFile(
                original_name=storage.filename,
                size=int(size),
                mime_type=storage.mimetype or "application/octet-stream",
            )
        )
    return staged


def init_upload_tracker(app, file_store: FileStore) -> UploadTracker:
    """Create the tracker and settle due uploads before every request."""
    tracker = UploadTracker(
        file_store,
        delay_seconds=app.config.get("UPLOAD_SIMULATED_DELAY", 2.0),
        retention_seconds=app.config.get("UPLOAD_JOB_RETENTION", 3600),
    )
    app.extensions[UPLOAD_TRACKER_KEY] = tracker

    @app.before_request
    def settle_due_uploads():
        tracker.complete_due()

    return tracker


def get_upload_tracker(app=None) -> UploadTracker:
    return (app or current_app).extensions[UPLOAD_TRACKER_KEY]
