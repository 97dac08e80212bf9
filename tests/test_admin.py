"""
Tests for the administrator pages.

Covers file review, user management and the monthly reports page.
"""
import json

from teamfocuz.models import ReviewStatus, UserRole


class TestAdminAccess:
    """Admin pages are restricted to the admin role."""

    def test_pages_require_auth(self, client):
        for path in ("/files", "/users", "/reports", "/reports/export"):
            response = client.get(path, follow_redirects=False)
            assert response.status_code == 302
            assert "/auth/login" in response.location

    def test_contributor_bounced_with_message(self, client, auth):
        auth.login("vartist")
        response = client.get("/reports", follow_redirects=True)
        assert response.status_code == 200
        assert b"You do not have access to that page." in response.data

    def test_admin_pages_load(self, admin_client):
        for path, marker in (
            ("/files", b"All Files"),
            ("/users", b"Manage Users"),
            ("/reports", b"Monthly Reports"),
        ):
            response = admin_client.get(path)
            assert response.status_code == 200
            assert marker in response.data


class TestFileReview:
    def test_list_and_filter(self, admin_client):
        response = admin_client.get("/files?status=pending")
        assert b"Narration Sample - Take 1.mp3" in response.data
        assert b"Project Introduction Video.mp4" not in response.data

    def test_search_by_uploader(self, admin_client):
        response = admin_client.get("/files?search=alex")
        assert b"Project Introduction Video.mp4" in response.data
        assert b"Episode 1 Script" not in response.data

    def test_approve(self, admin_client, file_store):
        response = admin_client.post("/files/3/approve", follow_redirects=True)
        assert b"File approved." in response.data
        assert file_store.get("3").status is ReviewStatus.APPROVED

    def test_reject(self, admin_client, file_store):
        admin_client.post("/files/3/reject")
        assert file_store.get("3").status is ReviewStatus.REJECTED

    def test_second_review_is_refused(self, admin_client, file_store):
        admin_client.post("/files/3/approve")
        response = admin_client.post("/files/3/reject", follow_redirects=True)
        assert b"Cannot change review status" in response.data
        assert file_store.get("3").status is ReviewStatus.APPROVED

    def test_delete(self, admin_client, file_store):
        response = admin_client.post("/files/1/delete", follow_redirects=True)
        assert b"File deleted." in response.data
        assert file_store.get("1") is None

    def test_contributor_cannot_review(self, client, auth, file_store):
        auth.login("veditor")
        response = client.post("/files/3/approve")
        assert response.status_code == 302
        assert file_store.get("3").status is ReviewStatus.PENDING


class TestUserManagement:
    def test_users_listed(self, admin_client):
        response = admin_client.get("/users")
        for name in (b"System Administrator", b"Alex Johnson", b"Sarah Chen"):
            assert name in response.data

    def test_create_user(self, admin_client, user_store):
        response = admin_client.post(
            "/users/new",
            data={
                "username": "vartist2",
                "name": "Priya Patel",
                "email": "priya@teamfocuz.com",
                "role": "voice_artist",
                "avatar": "",
            },
            follow_redirects=True,
        )
        assert b"User vartist2 created." in response.data
        created = user_store.find_by_username("vartist2")
        assert created.role is UserRole.VOICE_ARTIST

    def test_create_duplicate_username(self, admin_client, user_store):
        response = admin_client.post(
            "/users/new",
            data={
                "username": "veditor",
                "name": "Copy",
                "email": "copy@teamfocuz.com",
                "role": "video_editor",
            },
        )
        assert response.status_code == 200
        assert b"already taken" in response.data
        assert user_store.count() == 4

    def test_create_invalid_email(self, admin_client, user_store):
        admin_client.post(
            "/users/new",
            data={
                "username": "broken",
                "name": "Broken",
                "email": "not-an-email",
                "role": "script_writer",
            },
        )
        assert user_store.find_by_username("broken") is None

    def test_edit_user(self, admin_client, user_store):
        page = admin_client.get("/users/3/edit")
        assert b"swriter" in page.data
        admin_client.post(
            "/users/3/edit",
            data={
                "username": "swriter",
                "name": "Sarah C. Chen",
                "email": "writer@teamfocuz.com",
                "role": "script_writer",
            },
        )
        assert user_store.get("3").name == "Sarah C. Chen"

    def test_admin_cannot_demote_self(self, admin_client, user_store):
        admin_client.post(
            "/users/1/edit",
            data={
                "username": "admin",
                "name": "System Administrator",
                "email": "admin@teamfocuz.com",
                "role": "video_editor",
            },
        )
        assert user_store.get("1").role is UserRole.ADMIN

    def test_delete_user(self, admin_client, user_store):
        response = admin_client.post("/users/4/delete", follow_redirects=True)
        assert b"User deleted." in response.data
        assert user_store.get("4") is None

    def test_cannot_delete_self(self, admin_client, user_store):
        response = admin_client.post("/users/1/delete", follow_redirects=True)
        assert b"You cannot delete your own account." in response.data
        assert user_store.get("1") is not None


class TestReports:
    def test_reports_page(self, admin_client):
        response = admin_client.get("/reports")
        assert b"2024-12" in response.data
        assert b"Top Contributors" in response.data
        assert b"Alex Johnson" in response.data

    def test_export_download(self, admin_client):
        response = admin_client.get("/reports/export")
        assert response.status_code == 200
        assert "teamfocuz-report-" in response.headers["Content-Disposition"]
        report = json.loads(response.data)
        assert report["monthlyStats"][0]["total"] == 3
        assert report["topContributors"][0] == {"name": "Alex Johnson", "count": 1}
