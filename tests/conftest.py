import pytest

from config.settings import TestingConfig
from teamfocuz import create_app
from teamfocuz.state import get_file_store, get_user_store
from teamfocuz.uploads import get_upload_tracker

PASSWORD = "password123"


@pytest.fixture()
def app():
    # Fresh in-memory stores seeded with the demo team for every test
    flask_app = create_app(TestingConfig)
    flask_app.config.update(
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "RATELIMIT_ENABLED": False,
            "FORCE_HTTPS": False,
            "SHARED_PASSWORD": PASSWORD,
        }
    )
    yield flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth(client):
    class AuthActions:
        def login(self, username="veditor", password=PASSWORD, follow=True):
            return client.post(
                "/auth/login",
                data={"username": username, "password": password},
                follow_redirects=follow,
            )

        def logout(self):
            return client.get("/auth/logout", follow_redirects=True)

    return AuthActions()


@pytest.fixture()
def admin_client(client, auth):
    """Client logged in as the demo administrator."""
    auth.login("admin")
    return client


@pytest.fixture()
def user_store(app):
    return get_user_store(app)


@pytest.fixture()
def file_store(app):
    return get_file_store(app)


@pytest.fixture()
def tracker(app):
    return get_upload_tracker(app)
