"""
JSON API blueprint.

Route modules under ``teamfocuz.api`` import ``api_bp`` and register their
endpoints on it; the application factory imports them before registering
the blueprint.
"""
from functools import wraps

from flask import Blueprint, jsonify
from flask_login import current_user

from teamfocuz.models import UserRole

api_bp = Blueprint("api", __name__)


def api_roles_required(*roles: UserRole):
    """
    Decorator restricting an API endpoint to the given roles.

    Unlike the page decorators this never redirects: anonymous callers get
    401 and other roles get 403, both as JSON.
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return (
                    jsonify({"success": False, "error": "Authentication required"}),
                    401,
                )
            if current_user.role not in roles:
                return jsonify({"success": False, "error": "Permission denied"}), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator


api_admin_required = api_roles_required(UserRole.ADMIN)
