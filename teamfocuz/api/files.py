"""
API endpoints for the file registry.

Contributors see only their own uploads; administrators see everything and
are the only ones who may review or delete files.
"""
import structlog
from flask import jsonify, request
from flask_login import current_user, login_required

from teamfocuz.api import api_admin_required, api_bp
from teamfocuz.error_utils import domain_error_response, error_response
from teamfocuz.errors import TeamFocuzError
from teamfocuz.models import ReviewStatus
from teamfocuz.state import DeleteFile, UpdateFileStatus, get_file_store

logger = structlog.get_logger(__name__)


@api_bp.route("/files", methods=["GET"])
@login_required
def list_files():
    """
    List files visible to the current user, newest first.

    Query parameters:
        search: case-insensitive match on original name or uploader name
        status: all | pending | approved | rejected (default: all)
        type: all | video | script | voice (default: all)

    Returns:
        {"files": [...], "total": int}
    """
    store = get_file_store()
    results = store.search(
        term=request.args.get("search", ""),
        status=request.args.get("status", "all"),
        file_type=request.args.get("type", "all"),
        files=store.files_for(current_user),
    )
    ordered = store.recent(limit=len(results), files=results)
    return jsonify({"files": [f.to_dict() for f in ordered], "total": len(ordered)})


@api_bp.route("/files/<file_id>", methods=["GET"])
@login_required
def get_file(file_id):
    record = get_file_store().get(file_id)
    if record is None or (
        not current_user.is_admin() and record.uploaded_by != current_user.id
    ):
        body, code = error_response("File not found", 404)
        return jsonify(body), code
    return jsonify(record.to_dict())


@api_bp.route("/files/<file_id>/status", methods=["POST"])
@api_admin_required
def update_file_status(file_id):
    """
    Approve or reject a pending file.

    Body:
        {"status": "approved" | "rejected"}

    Returns:
        The updated file record.
    """
    data = request.get_json(silent=True) or {}
    raw = str(data.get("status", "")).strip().lower()
    try:
        status = ReviewStatus(raw)
    except ValueError:
        body, code = error_response("status must be 'approved' or 'rejected'", 400)
        return jsonify(body), code

    store = get_file_store()
    try:
        store.dispatch(UpdateFileStatus(file_id=file_id, status=status))
    except TeamFocuzError as e:
        body, code = domain_error_response(logger, e, file_id=file_id)
        return jsonify(body), code

    logger.info("file_status_updated", file_id=file_id, status=status.value)
    return jsonify({"success": True, "file": store.get(file_id).to_dict()})


@api_bp.route("/files/<file_id>", methods=["DELETE"])
@api_admin_required
def delete_file(file_id):
    """Remove a file record."""
    try:
        get_file_store().dispatch(DeleteFile(file_id=file_id))
    except TeamFocuzError as e:
        body, code = domain_error_response(logger, e, file_id=file_id)
        return jsonify(body), code

    logger.info("file_deleted", file_id=file_id)
    return jsonify({"success": True, "message": "File deleted"})
