"""
Tests for authentication routes and the shared-password check.

Covers login, logout, session handling and redirects.
"""
from flask_login import current_user

from teamfocuz.auth.authentication import authenticate, check_password


class TestAuthenticate:
    """The credential check itself."""

    def test_valid_login_refreshes_last_login(self, app, user_store):
        with app.app_context():
            assert user_store.get("2").last_login is None
            user = authenticate(user_store, "veditor", "password123")
        assert user is not None
        assert user.id == "2"
        assert user.last_login is not None
        assert user_store.get("2").last_login == user.last_login

    def test_wrong_password(self, app, user_store):
        with app.app_context():
            assert authenticate(user_store, "veditor", "hunter2") is None
        assert user_store.get("2").last_login is None

    def test_unknown_username(self, app, user_store):
        with app.app_context():
            assert authenticate(user_store, "ghost", "password123") is None

    def test_username_is_exact(self, app, user_store):
        with app.app_context():
            assert authenticate(user_store, "VEDITOR", "password123") is None

    def test_password_comes_from_config(self, app, user_store):
        app.config["SHARED_PASSWORD"] = "letmein"
        with app.app_context():
            assert check_password("letmein")
            assert not check_password("password123")
            assert authenticate(user_store, "admin", "letmein") is not None


class TestLogin:
    """Test login functionality."""

    def test_login_page_loads(self, client):
        """GET /auth/login should load the login page."""
        response = client.get("/auth/login")
        assert response.status_code == 200
        assert b"Sign In" in response.data

    def test_successful_login(self, client):
        """Valid credentials should log user in and redirect to dashboard."""
        response = client.post(
            "/auth/login",
            data={"username": "swriter", "password": "password123"},
            follow_redirects=True,
        )
        assert response.status_code == 200
        assert b"Welcome back, Sarah Chen!" in response.data
        assert b"Good " in response.data

    def test_session_holds_user(self, client):
        with client:
            client.post(
                "/auth/login", data={"username": "admin", "password": "password123"}
            )
            client.get("/dashboard")
            assert current_user.is_authenticated
            assert current_user.id == "1"

    def test_invalid_password(self, client):
        """Invalid password should fail with error message."""
        response = client.post(
            "/auth/login",
            data={"username": "veditor", "password": "wrongpassword"},
            follow_redirects=True,
        )
        assert response.status_code == 200
        assert b"Invalid username or password." in response.data

    def test_failed_login_leaves_session_anonymous(self, client):
        with client:
            client.post(
                "/auth/login", data={"username": "veditor", "password": "nope"}
            )
            assert not current_user.is_authenticated
        response = client.get("/dashboard")
        assert response.status_code == 302
        assert "/auth/login" in response.location

    def test_nonexistent_user(self, client):
        """Login with non-existent username should fail."""
        response = client.post(
            "/auth/login",
            data={"username": "nonexistent", "password": "password123"},
            follow_redirects=True,
        )
        assert b"Invalid username or password." in response.data

    def test_missing_fields(self, client):
        response = client.post("/auth/login", data={}, follow_redirects=True)
        assert response.status_code == 200
        assert b"Invalid username or password." in response.data

    def test_next_parameter_is_honoured(self, client):
        response = client.post(
            "/auth/login?next=/reports",
            data={"username": "admin", "password": "password123"},
        )
        assert response.status_code == 302
        assert response.location.endswith("/reports")

    def test_external_next_is_ignored(self, client):
        response = client.post(
            "/auth/login?next=https://evil.example.com/",
            data={"username": "admin", "password": "password123"},
        )
        assert response.status_code == 302
        assert response.location.endswith("/dashboard")

    def test_authenticated_user_redirected_from_login(self, client, auth):
        """Already authenticated user should be redirected from login page."""
        auth.login()
        response = client.get("/auth/login", follow_redirects=False)
        assert response.status_code in (301, 302)
        assert "/dashboard" in response.location


class TestLogout:
    def test_logout_clears_session(self, client, auth):
        auth.login()
        response = auth.logout()
        assert b"You have been logged out." in response.data
        response = client.get("/dashboard")
        assert response.status_code == 302
        assert "/auth/login" in response.location


class TestRootAndUnknownPaths:
    def test_root_redirects_to_login(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert "/auth/login" in response.location

    def test_root_redirects_to_dashboard(self, client, auth):
        auth.login()
        response = client.get("/")
        assert response.location.endswith("/dashboard")

    def test_unknown_page_redirects(self, client, auth):
        response = client.get("/does-not-exist")
        assert response.status_code == 302
        assert "/auth/login" in response.location
        auth.login()
        response = client.get("/does-not-exist")
        assert response.location.endswith("/dashboard")
