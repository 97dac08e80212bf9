"""Health and navigation endpoints for the API blueprint.

Mounts served by this module:

- GET /health
    - Purpose: liveness check used by load balancers and orchestration.
    - Parameters: none
- GET /navigation
    - Purpose: the sidebar entries the current user's role may open.
"""

from flask import jsonify
from flask_login import current_user, login_required

from teamfocuz.api import api_bp
from teamfocuz.permissions import permitted_routes


@api_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns a JSON payload with a short status message. No auth required.
    """
    return jsonify({"status": "healthy", "message": "TeamFocuz API is running"})


@api_bp.route("/navigation", methods=["GET"])
@login_required
def navigation():
    """Permitted navigation items, in display order."""
    return jsonify(
        {
            "role": current_user.role.value,
            "items": [item.to_dict() for item in permitted_routes(current_user.role)],
        }
    )
