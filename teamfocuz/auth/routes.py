"""
Authentication routes for user login and logout.

The session holds only the logged-in user's id (Flask-Login); it is written
on login, read by the user loader on every request and cleared on logout.
"""
from urllib.parse import urlparse

import structlog
from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from teamfocuz.auth.authentication import authenticate
from teamfocuz.auth.forms import LoginForm
from teamfocuz.state import get_user_store

logger = structlog.get_logger(__name__)

# Create authentication blueprint
auth_bp = Blueprint("auth", __name__)


def _safe_next_page() -> str:
    """The ``next`` target when it stays on this site, else the dashboard."""
    next_page = request.args.get("next")
    if not next_page or urlparse(next_page).netloc != "" or not next_page.startswith("/"):
        return url_for("main.dashboard")
    return next_page


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    """Handle user login.

    Methods:
        GET: Display the login form.
        POST: Check the credentials and start a session.

    Form Data (POST):
        username (str): Account username.
        password (str): The shared placeholder password.
        remember_me (bool, optional): Whether to remember the session.

    Returns:
        Response: On GET or failed POST, renders the login template.
                 On successful POST, redirects to ``next`` or the dashboard.
    """
    # Redirect already authenticated users
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    form = LoginForm()

    if request.method == "POST":
        if form.validate_on_submit():
            user = authenticate(get_user_store(), form.username.data, form.password.data)
            if user is not None:
                login_user(user, remember=form.remember_me.data)
                logger.info("user_login", user_id=user.id, role=user.role.value)
                flash(f"Welcome back, {user.get_display_name()}!", "success")
                return redirect(_safe_next_page())

            logger.warning("user_login_failed", attempted_username=form.username.data)
            flash("Invalid username or password.", "danger")
        elif "csrf_token" in form.errors:
            flash(
                "Your session expired or the page was open too long. Please refresh and try again.",
                "warning",
            )
        else:
            flash("Invalid username or password.", "danger")

    return render_template("auth/login.html", title="Sign In", form=form)


@auth_bp.route("/logout")
@login_required
def logout():
    """
    Handle user logout.

    Logs out the current user and redirects to the login page.
    """
    user_id = current_user.id
    logout_user()
    logger.info("user_logout", user_id=user_id)
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.login"))
