"""
Credential check for the demo accounts.

Every account shares one configured password (``SHARED_PASSWORD``). This is a
placeholder gate for the dashboard, not an authentication system.
"""
import hmac

from flask import current_app

from teamfocuz.models import User
from teamfocuz.state import RecordLogin, UserStore


def check_password(password: str | None, expected: str | None = None) -> bool:
    if expected is None:
        expected = current_app.config.get("SHARED_PASSWORD", "")
    return hmac.compare_digest(
        (password or "").encode("utf-8"), (expected or "").encode("utf-8")
    )


def authenticate(store: UserStore, username: str, password: str) -> User | None:
    """
    Resolve a login attempt.

    Args:
        store: User directory to look the account up in
        username: Exact username
        password: Submitted password

    Returns:
        User: the account with ``last_login`` refreshed, or None when the
        username is unknown or the password does not match.
    """
    user = store.find_by_username((username or "").strip())
    if user is None or not check_password(password):
        return None
    store.dispatch(RecordLogin(user_id=user.id))
    return store.get(user.id)
