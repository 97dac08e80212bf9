"""
Administrator pages: file review, user management and monthly reports.

Every view here is restricted to the admin role through the navigation
table; other roles are redirected to the dashboard.
"""
import structlog
from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user

from teamfocuz.admin.forms import UserForm
from teamfocuz.api.reports import report_response
from teamfocuz.errors import DuplicateUsername, TeamFocuzError
from teamfocuz.models import FileType, ReviewStatus, utcnow
from teamfocuz.permissions import require_route
from teamfocuz.state import (
    AddUser,
    DeleteFile,
    DeleteUser,
    UpdateFileStatus,
    UpdateUser,
    get_file_store,
    get_user_store,
)
from teamfocuz.stats import (
    cached_monthly_stats,
    month_stats,
    top_contributors,
    totals_by_type,
)

logger = structlog.get_logger(__name__)

# Create admin blueprint
admin_bp = Blueprint("admin", __name__)


# ---------------------------------------------------------------------------
# File review
# ---------------------------------------------------------------------------


@admin_bp.route("/files")
@require_route("admin.files")
def files():
    """
    All files with search and filters.

    Query parameters:
        search: case-insensitive match on original name or uploader name
        status: all | pending | approved | rejected
        type: all | video | script | voice
    """
    store = get_file_store()
    filters = {
        "search": request.args.get("search", ""),
        "status": request.args.get("status", "all"),
        "type": request.args.get("type", "all"),
    }
    results = store.search(
        term=filters["search"], status=filters["status"], file_type=filters["type"]
    )
    return render_template(
        "admin/files.html",
        title="All Files",
        files=store.recent(limit=len(results), files=results),
        filters=filters,
        statuses=list(ReviewStatus),
        file_types=list(FileType),
    )


def _back_to_files():
    return redirect(url_for("admin.files"))


def _review(file_id: str, status: ReviewStatus):
    try:
        get_file_store().dispatch(UpdateFileStatus(file_id=file_id, status=status))
    except TeamFocuzError as e:
        flash(str(e), "warning")
        return _back_to_files()
    logger.info("file_status_updated", file_id=file_id, status=status.value)
    flash(f"File {status.value}.", "success")
    return _back_to_files()


@admin_bp.route("/files/<file_id>/approve", methods=["POST"])
@require_route("admin.files")
def approve_file(file_id):
    return _review(file_id, ReviewStatus.APPROVED)


@admin_bp.route("/files/<file_id>/reject", methods=["POST"])
@require_route("admin.files")
def reject_file(file_id):
    return _review(file_id, ReviewStatus.REJECTED)


@admin_bp.route("/files/<file_id>/delete", methods=["POST"])
@require_route("admin.files")
def delete_file(file_id):
    try:
        get_file_store().dispatch(DeleteFile(file_id=file_id))
    except TeamFocuzError as e:
        flash(str(e), "warning")
        return _back_to_files()
    logger.info("file_deleted", file_id=file_id)
    flash("File deleted.", "success")
    return _back_to_files()


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------


@admin_bp.route("/users")
@require_route("admin.users")
def users():
    """List every team account with its upload count."""
    file_store = get_file_store()
    counts: dict[str, int] = {}
    for record in file_store.files:
        counts[record.uploaded_by] = counts.get(record.uploaded_by, 0) + 1
    return render_template(
        "admin/users.html",
        title="Manage Users",
        users=get_user_store().all(),
        upload_counts=counts,
    )


@admin_bp.route("/users/new", methods=["GET", "POST"])
@require_route("admin.users")
def create_user():
    form = UserForm()
    if form.validate_on_submit():
        try:
            state = get_user_store().dispatch(AddUser(**form.to_changes()))
        except DuplicateUsername as e:
            form.username.errors.append(str(e))
        else:
            user = state.users[-1]
            logger.info("user_created", created_user_id=user.id, role=user.role.value)
            flash(f"User {user.username} created.", "success")
            return redirect(url_for("admin.users"))

    return render_template(
        "admin/user_form.html", title="Add User", form=form, editing=None
    )


@admin_bp.route("/users/<user_id>/edit", methods=["GET", "POST"])
@require_route("admin.users")
def edit_user(user_id):
    store = get_user_store()
    user = store.get(user_id)
    if user is None:
        flash("User not found.", "warning")
        return redirect(url_for("admin.users"))

    form = UserForm(obj=None if request.method == "POST" else user)
    if request.method == "GET":
        form.role.data = user.role.value

    if form.validate_on_submit():
        changes = form.to_changes()
        if user.id == current_user.id and changes["role"] != user.role:
            flash("You cannot change your own role.", "warning")
            changes["role"] = user.role
        try:
            store.dispatch(UpdateUser(user_id=user.id, changes=changes))
        except DuplicateUsername as e:
            form.username.errors.append(str(e))
        else:
            logger.info("user_updated", updated_user_id=user.id)
            flash(f"User {changes['username']} updated.", "success")
            return redirect(url_for("admin.users"))

    return render_template(
        "admin/user_form.html", title="Edit User", form=form, editing=user
    )


@admin_bp.route("/users/<user_id>/delete", methods=["POST"])
@require_route("admin.users")
def delete_user(user_id):
    if user_id == current_user.id:
        flash("You cannot delete your own account.", "warning")
        return redirect(url_for("admin.users"))
    try:
        get_user_store().dispatch(DeleteUser(user_id=user_id))
    except TeamFocuzError as e:
        flash(str(e), "warning")
        return redirect(url_for("admin.users"))
    logger.info("user_deleted", deleted_user_id=user_id)
    flash("User deleted.", "success")
    return redirect(url_for("admin.users"))


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@admin_bp.route("/reports")
@require_route("admin.reports")
def reports():
    """Overview cards, the monthly breakdown and the top contributors."""
    now = utcnow()
    files = get_file_store().files
    monthly = cached_monthly_stats(files)
    peak = max((m.total for m in monthly), default=0)
    return render_template(
        "admin/reports.html",
        title="Monthly Reports",
        monthly=monthly,
        peak=peak,
        this_month=month_stats(files, now.strftime("%Y-%m")),
        totals=totals_by_type(files),
        total_files=len(files),
        total_users=get_user_store().count(),
        contributors=top_contributors(
            files, current_app.config.get("TOP_CONTRIBUTORS_LIMIT", 5)
        ),
    )


@admin_bp.route("/reports/export")
@require_route("admin.reports")
def export_report():
    """Download the report as ``teamfocuz-report-YYYY-MM-DD.json``."""
    return report_response()
