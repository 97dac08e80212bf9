"""
API endpoints for simulated uploads.

Mounts served by this module:

- POST /uploads
    - multipart field ``files`` (one or more); answers 202 with the pending job
- GET /uploads/<job_id>
    - polls the job; the first poll after its completion time registers the
      files and reports ``completed``
- POST /uploads/<job_id>/cancel
    - cancels a pending job
"""

import structlog
from flask import jsonify, request
from flask_login import current_user, login_required

from teamfocuz.api import api_bp, api_roles_required
from teamfocuz.error_utils import domain_error_response, error_response
from teamfocuz.errors import RecordNotFound, TeamFocuzError
from teamfocuz.permissions import CONTRIBUTOR_ROLES
from teamfocuz.state import get_file_store
from teamfocuz.uploads import (
    JobState,
    get_upload_tracker,
    staged_from_request_files,
)

logger = structlog.get_logger(__name__)


def _job_payload(job) -> dict:
    payload = job.to_dict()
    if job.state is JobState.COMPLETED:
        store = get_file_store()
        payload["uploaded"] = [
            store.get(file_id).to_dict()
            for file_id in job.file_ids
            if store.get(file_id) is not None
        ]
    return payload


def _owned_job(job_id):
    """The job if the current user may see it; raises RecordNotFound otherwise."""
    job = get_upload_tracker().get(job_id)
    if job.user_id != current_user.id and not current_user.is_admin():
        raise RecordNotFound("Upload job", job_id)
    return job


@api_bp.route("/uploads", methods=["POST"])
@api_roles_required(*CONTRIBUTOR_ROLES)
def start_upload():
    staged = staged_from_request_files(request.files.getlist("files"))
    try:
        job = get_upload_tracker().start(current_user, staged)
    except TeamFocuzError as e:
        body, code = domain_error_response(logger, e, user_id=current_user.id)
        return jsonify(body), code
    return jsonify({"success": True, "job": _job_payload(job)}), 202


@api_bp.route("/uploads/<job_id>", methods=["GET"])
@login_required
def poll_upload(job_id):
    try:
        _owned_job(job_id)
        job = get_upload_tracker().poll(job_id)
    except RecordNotFound:
        body, code = error_response("Upload job not found", 404)
        return jsonify(body), code
    return jsonify({"success": True, "job": _job_payload(job)})


@api_bp.route("/uploads/<job_id>/cancel", methods=["POST"])
@login_required
def cancel_upload(job_id):
    try:
        _owned_job(job_id)
        job = get_upload_tracker().cancel(job_id)
    except TeamFocuzError as e:
        body, code = domain_error_response(logger, e, job_id=job_id)
        return jsonify(body), code
    return jsonify({"success": True, "job": _job_payload(job)})
