"""
Tests for the simulated upload jobs and the upload page.
"""
from datetime import datetime, timedelta, timezone
from io import BytesIO
from unittest.mock import patch

import pytest

from teamfocuz.errors import InvalidJobState, RecordNotFound, UploadRejected
from teamfocuz.models import FileType, ReviewStatus
from teamfocuz.state import FileStore
from teamfocuz.uploads import (
    JobState,
    StagedFile,
    UploadTracker,
    format_file_size,
    normalize_filename,
)

T0 = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)


class TestHelpers:
    def test_normalize_filename(self):
        assert normalize_filename("Episode 2  Final Cut.MP4") == "episode_2_final_cut.mp4"
        assert normalize_filename("tab\tname.txt") == "tab_name.txt"

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (2048000, "1.95 MB"),
            (5242880, "5 MB"),
            (157286400, "150 MB"),
            (3 * 1024**3, "3 GB"),
        ],
    )
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected


class TestUploadTracker:
    @pytest.fixture()
    def store(self):
        return FileStore()

    @pytest.fixture()
    def delayed(self, store):
        return UploadTracker(store, delay_seconds=2)

    def test_start_creates_pending_job(self, delayed, user_store):
        editor = user_store.get("2")
        job = delayed.start(
            editor, [StagedFile("My Clip.mp4", 100, "video/mp4")], now=T0
        )
        assert job.state is JobState.PENDING
        assert job.file_type is FileType.VIDEO
        assert job.due_at == T0 + timedelta(seconds=2)

    def test_poll_before_due_keeps_pending(self, delayed, store, user_store):
        job = delayed.start(
            user_store.get("2"), [StagedFile("a.mp4", 1, "video/mp4")], now=T0
        )
        polled = delayed.poll(job.id, now=T0 + timedelta(seconds=1))
        assert polled.state is JobState.PENDING
        assert store.files == []

    def test_poll_when_due_completes_once(self, delayed, store, user_store):
        editor = user_store.get("2")
        job = delayed.start(
            editor,
            [
                StagedFile("My Clip.mp4", 100, "video/mp4"),
                StagedFile("Other.webm", 200, "video/webm"),
            ],
            now=T0,
        )
        done = delayed.poll(job.id, now=T0 + timedelta(seconds=2))
        assert done.state is JobState.COMPLETED
        assert len(done.file_ids) == 2
        assert len(store.files) == 2

        record = store.get(done.file_ids[0])
        assert record.filename == "my_clip.mp4"
        assert record.original_name == "My Clip.mp4"
        assert record.status is ReviewStatus.PENDING
        assert record.uploaded_by == editor.id
        assert record.uploaded_by_name == "Alex Johnson"

        again = delayed.poll(job.id, now=T0 + timedelta(minutes=5))
        assert again.file_ids == done.file_ids
        assert len(store.files) == 2

    def test_completion_notifies(self, delayed, store, user_store):
        job = delayed.start(
            user_store.get("4"), [StagedFile("take.mp3", 9, "audio/mpeg")], now=T0
        )
        delayed.poll(job.id, now=T0 + timedelta(seconds=3))
        assert store.notifications[0].message == (
            "New voice file uploaded by Michael Rodriguez"
        )

    def test_cancel_pending(self, delayed, store, user_store):
        job = delayed.start(
            user_store.get("3"), [StagedFile("s.pdf", 1, "application/pdf")], now=T0
        )
        cancelled = delayed.cancel(job.id)
        assert cancelled.state is JobState.CANCELLED
        assert delayed.poll(job.id, now=T0 + timedelta(hours=1)).state is (
            JobState.CANCELLED
        )
        assert store.files == []
        assert delayed.cancel(job.id).state is JobState.CANCELLED

    def test_cancel_completed_fails(self, delayed, user_store):
        job = delayed.start(
            user_store.get("3"), [StagedFile("s.pdf", 1, "application/pdf")], now=T0
        )
        delayed.poll(job.id, now=T0 + timedelta(seconds=2))
        with pytest.raises(InvalidJobState):
            delayed.cancel(job.id)

    def test_admin_cannot_upload(self, delayed, user_store):
        with pytest.raises(UploadRejected):
            delayed.start(user_store.get("1"), [StagedFile("a.mp4", 1, "video/mp4")])

    def test_wrong_type_rejected(self, delayed, user_store):
        with pytest.raises(UploadRejected, match="Unsupported file type"):
            delayed.start(
                user_store.get("2"), [StagedFile("script.pdf", 1, "application/pdf")]
            )

    def test_no_files_rejected(self, delayed, user_store):
        with pytest.raises(UploadRejected):
            delayed.start(user_store.get("2"), [])

    def test_unknown_job(self, delayed):
        with pytest.raises(RecordNotFound):
            delayed.poll("missing")

    def test_jobs_for_user(self, delayed, user_store):
        delayed.start(user_store.get("2"), [StagedFile("a.mp4", 1, "video/mp4")])
        assert len(delayed.jobs_for("2")) == 1
        assert delayed.jobs_for("3") == []

    def test_complete_due_finishes_unpolled_jobs(self, delayed, store, user_store):
        editor = user_store.get("2")
        first = delayed.start(editor, [StagedFile("a.mp4", 1, "video/mp4")], now=T0)
        second = delayed.start(editor, [StagedFile("b.mp4", 1, "video/mp4")], now=T0)
        assert delayed.complete_due(now=T0 + timedelta(seconds=1)) == []
        assert store.files == []

        completed = delayed.complete_due(now=T0 + timedelta(seconds=2))
        assert {job.id for job in completed} == {first.id, second.id}
        assert sorted(f.original_name for f in store.files) == ["a.mp4", "b.mp4"]

        polled = delayed.poll(first.id, now=T0 + timedelta(seconds=3))
        assert polled.file_ids == delayed.get(first.id).file_ids
        assert len(store.files) == 2

    def test_complete_due_skips_cancelled(self, delayed, store, user_store):
        job = delayed.start(
            user_store.get("3"), [StagedFile("s.pdf", 1, "application/pdf")], now=T0
        )
        delayed.cancel(job.id, now=T0)
        assert delayed.complete_due(now=T0 + timedelta(minutes=1)) == []
        assert store.files == []

    def test_finished_jobs_are_pruned(self, store, user_store):
        tracker = UploadTracker(store, delay_seconds=0, retention_seconds=60)
        editor = user_store.get("2")
        for _ in range(50):
            job = tracker.start(editor, [StagedFile("a.mp4", 1, "video/mp4")], now=T0)
            tracker.poll(job.id, now=T0)
        assert tracker.count() == 50

        tracker.complete_due(now=T0 + timedelta(seconds=59))
        assert tracker.count() == 50
        tracker.complete_due(now=T0 + timedelta(seconds=60))
        assert tracker.count() == 0
        # files outlive their jobs
        assert len(store.files) == 50

    def test_start_prunes_and_keeps_pending(self, store, user_store):
        tracker = UploadTracker(store, delay_seconds=600, retention_seconds=60)
        writer = user_store.get("3")
        old = tracker.start(writer, [StagedFile("s.pdf", 1, "application/pdf")], now=T0)
        tracker.cancel(old.id, now=T0)
        waiting = tracker.start(
            writer, [StagedFile("t.pdf", 1, "application/pdf")], now=T0
        )

        later = T0 + timedelta(minutes=5)
        tracker.start(writer, [StagedFile("u.pdf", 1, "application/pdf")], now=later)
        with pytest.raises(RecordNotFound):
            tracker.get(old.id)
        assert tracker.get(waiting.id).state is JobState.PENDING
        assert tracker.count() == 2


class TestUploadPage:
    """Upload flow through the HTML pages (no simulated delay in tests)."""

    def test_upload_page_shows_accepted_types(self, client, auth):
        auth.login("vartist")
        response = client.get("/upload")
        assert response.status_code == 200
        assert b"Audio Files (MP3, WAV, AAC, FLAC, OGG)" in response.data
        assert b"Narration Sample - Take 1.mp3" in response.data

    def test_upload_registers_file(self, client, auth, file_store):
        auth.login("veditor")
        response = client.post(
            "/upload",
            data={"files": (BytesIO(b"x" * 2048), "Behind The Scenes.mp4", "video/mp4")},
            content_type="multipart/form-data",
            follow_redirects=True,
        )
        assert response.status_code == 200
        assert b"1 file uploaded successfully." in response.data
        names = [f.original_name for f in file_store.files]
        assert "Behind The Scenes.mp4" in names
        record = next(f for f in file_store.files if f.original_name == names[-1])
        assert record.filename == "behind_the_scenes.mp4"
        assert record.size == 2048
        assert record.uploaded_by == "2"

    def test_upload_wrong_type_is_refused(self, client, auth, file_store):
        auth.login("veditor")
        response = client.post(
            "/upload",
            data={"files": (BytesIO(b"%PDF"), "script.pdf", "application/pdf")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 400
        assert b"Unsupported file type" in response.data
        assert len(file_store.files) == 3

    def test_upload_without_files(self, client, auth):
        auth.login("swriter")
        response = client.post(
            "/upload", data={}, content_type="multipart/form-data"
        )
        assert response.status_code == 400
        assert b"No files selected" in response.data

    def test_pending_job_page_and_cancel(self, app, client, auth, tracker, file_store):
        tracker.delay = timedelta(minutes=10)
        auth.login("swriter")
        response = client.post(
            "/upload",
            data={"files": (BytesIO(b"draft"), "draft.txt", "text/plain")},
            content_type="multipart/form-data",
        )
        assert response.status_code == 302
        job_url = response.location
        page = client.get(job_url)
        assert page.status_code == 200
        assert b"Uploading 1 file" in page.data
        assert b'http-equiv="refresh"' in page.data

        job_id = job_url.rstrip("/").rsplit("/", 1)[-1]
        response = client.post(f"/upload/jobs/{job_id}/cancel", follow_redirects=True)
        assert b"Upload cancelled." in response.data
        assert tracker.get(job_id).state is JobState.CANCELLED
        assert len(file_store.files) == 3

    def test_other_users_job_is_hidden(self, client, auth, tracker, user_store):
        job = tracker.start(
            user_store.get("3"), [StagedFile("s.pdf", 1, "application/pdf")]
        )
        auth.login("veditor")
        response = client.get(f"/upload/jobs/{job.id}", follow_redirects=True)
        assert b"Upload not found." in response.data

    def test_due_upload_lands_without_polling(self, client, auth, tracker):
        auth.login("veditor")
        job = client.post(
            "/api/uploads",
            data={"files": (BytesIO(b"x"), "clip.mp4", "video/mp4")},
            content_type="multipart/form-data",
        ).get_json()["job"]

        # any later request settles the job, even one that never names it
        files = client.get("/api/files").get_json()["files"]
        names = [f["original_name"] for f in files]
        assert "clip.mp4" in names
        assert tracker.get(job["id"]).state is JobState.COMPLETED

    def test_rejected_upload_is_logged(self, client, auth):
        auth.login("veditor")
        with patch("teamfocuz.main.routes.logger") as logger:
            client.post(
                "/upload",
                data={"files": (BytesIO(b"%PDF"), "script.pdf", "application/pdf")},
                content_type="multipart/form-data",
            )
        event = logger.warning.call_args.args[0]
        assert event == "upload_rejected"
        assert logger.warning.call_args.kwargs["user_id"] == "2"
