"""
API endpoints for team notifications.
"""

from flask import current_app, jsonify, request
from flask_login import login_required

# Import the shared blueprint instance
from teamfocuz.api import api_bp
from teamfocuz.errors import RecordNotFound
from teamfocuz.notifications import (
    get_notifications,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
)


@api_bp.route("/notifications", methods=["GET"])
@login_required
def list_notifications():
    """
    Get team notifications, newest first.

    Query parameters:
        limit: Maximum number of notifications (default: NOTIFICATIONS_PAGE_SIZE, max: 100)
        unread_only: Only return unread notifications (default: false)

    Returns:
        {
            "notifications": [
                {"id": str, "message": str, "type": str,
                 "timestamp": str, "read": bool}
            ],
            "unread_count": int,
            "total": int
        }
    """
    default_limit = current_app.config.get("NOTIFICATIONS_PAGE_SIZE", 20)
    try:
        limit = min(int(request.args.get("limit", default_limit)), 100)
    except ValueError:
        return jsonify({"success": False, "error": "limit must be an integer"}), 400
    unread_only = request.args.get("unread_only", "false").lower() == "true"

    notifications = get_notifications(limit=limit, unread_only=unread_only)

    return jsonify(
        {
            "notifications": [n.to_dict() for n in notifications],
            "unread_count": get_unread_count(),
            "total": len(notifications),
        }
    )


@api_bp.route("/notifications/unread-count", methods=["GET"])
@login_required
def unread_count():
    """
    Get count of unread notifications.

    Returns:
        {"count": int}
    """
    return jsonify({"count": get_unread_count()})


@api_bp.route("/notifications/<notification_id>/read", methods=["POST"])
@login_required
def mark_notification_read(notification_id):
    """
    Mark a notification as read.

    Returns:
        {"message": "Notification marked as read"}
    """
    try:
        mark_as_read(notification_id)
    except RecordNotFound:
        return jsonify({"success": False, "error": "Notification not found"}), 404

    return jsonify({"message": "Notification marked as read"})


@api_bp.route("/notifications/read-all", methods=["POST"])
@login_required
def mark_all_notifications_read():
    """
    Mark all notifications as read.

    Returns:
        {"message": "All notifications marked as read", "updated": int}
    """
    updated = mark_all_as_read()

    return jsonify({"message": "All notifications marked as read", "updated": updated})
