"""
API endpoints for statistics and the exportable report (administrators only).
"""
import json

import structlog
from flask import Response, current_app, jsonify

from teamfocuz.api import api_admin_required, api_bp
from teamfocuz.models import utcnow
from teamfocuz.state import get_file_store, get_user_store
from teamfocuz.stats import (
    build_report,
    cached_monthly_stats,
    report_filename,
    top_contributors,
    totals_by_type,
)

logger = structlog.get_logger(__name__)


def report_response(now=None) -> Response:
    """The report as a downloadable ``application/json`` attachment."""
    now = now or utcnow()
    report = build_report(
        get_file_store().files,
        get_user_store().all(),
        now=now,
        limit=current_app.config.get("TOP_CONTRIBUTORS_LIMIT", 5),
    )
    filename = report_filename(now)
    logger.info("report_exported", filename=filename, total_files=report["totalFiles"])
    return Response(
        json.dumps(report, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@api_bp.route("/stats/monthly", methods=["GET"])
@api_admin_required
def monthly():
    """
    Monthly upload statistics.

    Returns:
        {
            "monthly": [{"month": "YYYY-MM", "videos": int, "scripts": int,
                         "voices": int, "total": int}],
            "totalByType": {"videos": int, "scripts": int, "voices": int},
            "topContributors": [{"name": str, "count": int}]
        }
    """
    files = get_file_store().files
    return jsonify(
        {
            "monthly": [s.to_dict() for s in cached_monthly_stats(files)],
            "totalByType": totals_by_type(files),
            "topContributors": [
                c.to_dict()
                for c in top_contributors(
                    files, current_app.config.get("TOP_CONTRIBUTORS_LIMIT", 5)
                )
            ],
        }
    )


@api_bp.route("/reports/export", methods=["GET"])
@api_admin_required
def export_report():
    return report_response()
