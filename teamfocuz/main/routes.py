"""
Main application routes for the TeamFocuz dashboard.

This module handles the pages every team member sees: the landing redirect,
the dashboard and, for contributors, the upload page with its simulated
transfer jobs.
"""
import structlog
from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    url_for,
)
from flask_login import current_user

from teamfocuz.errors import InvalidJobState, RecordNotFound, UploadRejected
from teamfocuz.main.forms import UploadForm
from teamfocuz.models import utcnow
from teamfocuz.permissions import require_route, upload_rule_for
from teamfocuz.state import get_file_store, get_user_store
from teamfocuz.stats import dashboard_stats, greeting
from teamfocuz.uploads import JobState, get_upload_tracker, staged_from_request_files

logger = structlog.get_logger(__name__)

# Create main blueprint
main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    """Send visitors to the dashboard, or to login when signed out."""
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))
    return redirect(url_for("auth.login"))


@main_bp.route("/dashboard")
@require_route("main.dashboard")
def dashboard():
    """
    Dashboard with a greeting, role-specific stat cards and recent uploads.

    Returns:
        Response: Rendered dashboard template
    """
    now = utcnow()
    store = get_file_store()
    files = store.files
    cards = dashboard_stats(current_user, files, get_user_store().all(), now=now)
    recent = store.recent(limit=current_app.config.get("RECENT_FILES_LIMIT", 5))

    return render_template(
        "main/dashboard.html",
        title="Dashboard",
        greeting=greeting(now.hour),
        cards=cards,
        recent_files=recent,
        now=now,
    )


def _render_upload(form, job=None, status_code=200):
    store = get_file_store()
    own_files = store.recent(limit=len(store.files), files=store.files_for(current_user))
    return (
        render_template(
            "main/upload.html",
            title="Upload Files",
            form=form,
            rule=upload_rule_for(current_user.role),
            job=job,
            own_files=own_files,
        ),
        status_code,
    )


@main_bp.route("/upload", methods=["GET", "POST"])
@require_route("main.upload")
def upload():
    """
    Upload page for contributors.

    GET: Display the upload form and the user's own uploads.
    POST: Validate the selected files and start a simulated upload job,
          then redirect to the job page which completes it once due.
    """
    form = UploadForm()

    if form.validate_on_submit():
        staged = staged_from_request_files(form.files.data or [])
        try:
            job = get_upload_tracker().start(current_user, staged)
        except UploadRejected as e:
            logger.warning("upload_rejected", user_id=current_user.id, reason=str(e))
            flash(str(e), "danger")
            return _render_upload(form, status_code=400)
        return redirect(url_for("main.upload_job", job_id=job.id))

    return _render_upload(form)


def _own_job_or_redirect(job_id):
    try:
        job = get_upload_tracker().get(job_id)
    except RecordNotFound:
        job = None
    if job is None or job.user_id != current_user.id:
        logger.warning("upload_job_not_found", job_id=job_id, user_id=current_user.id)
        flash("Upload not found.", "warning")
        return None
    return job


@main_bp.route("/upload/jobs/<job_id>")
@require_route("main.upload")
def upload_job(job_id):
    """Show an upload job, completing it when its time has come."""
    if _own_job_or_redirect(job_id) is None:
        return redirect(url_for("main.upload"))

    job = get_upload_tracker().poll(job_id)
    if job.state is JobState.COMPLETED:
        count = len(job.file_ids)
        flash(
            f"{count} file{'s' if count != 1 else ''} uploaded successfully.",
            "success",
        )
        return redirect(url_for("main.upload"))
    return _render_upload(UploadForm(), job=job)


@main_bp.route("/upload/jobs/<job_id>/cancel", methods=["POST"])
@require_route("main.upload")
def cancel_upload_job(job_id):
    if _own_job_or_redirect(job_id) is None:
        return redirect(url_for("main.upload"))

    try:
        get_upload_tracker().cancel(job_id)
        flash("Upload cancelled.", "info")
    except InvalidJobState:
        logger.info("upload_cancel_too_late", job_id=job_id)
        flash("That upload has already completed.", "warning")
    return redirect(url_for("main.upload"))
