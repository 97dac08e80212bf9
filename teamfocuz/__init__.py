"""
Flask application factory and configuration.

This module contains the Flask application factory that initializes
and configures all extensions, blueprints, and application settings.
"""
import os

import structlog
from flask import Flask, jsonify, redirect, render_template, request, url_for
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager, current_user
from flask_talisman import Talisman
from flask_wtf.csrf import CSRFProtect

from config.settings import DevelopmentConfig, ProductionConfig, TestingConfig

# Make CSRFProtect available app-wide so routes can optionally exempt endpoints
csrf = CSRFProtect()

LIMITER_KEY = "teamfocuz.limiter"


def create_app(config_class=None):
    """
    Create and configure Flask application.

    This factory function creates a Flask application instance, builds fresh
    in-memory stores for it and configures all extensions, blueprints and
    security measures.

    Args:
        config_class: Configuration class to use. If None, will be determined
                     from FLASK_ENV environment variable.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Determine configuration class if not provided
    if config_class is None:
        env = os.environ.get("FLASK_ENV", "development")
        if env == "production":
            config_class = ProductionConfig
        elif env == "testing":
            config_class = TestingConfig
        else:
            config_class = DevelopmentConfig

    app.config.from_object(config_class)

    # Configure structured logging early (console only during tests)
    from teamfocuz.structured_logging import configure_structlog

    configure_structlog(app)

    # Application state
    init_state(app)

    # Initialize extensions
    init_extensions(app)

    # Register blueprints
    register_blueprints(app)
    apply_login_rate_limit(app)

    # Register error handlers
    register_error_handlers(app)

    # Register Jinja filters and globals
    register_template_filters(app)

    # Setup security headers (only in production or if explicitly enabled)
    if app.config.get("FORCE_HTTPS") or not app.debug:
        Talisman(
            app,
            force_https=app.config.get("FORCE_HTTPS", False),
            strict_transport_security=app.config.get("STRICT_TRANSPORT_SECURITY", True),
            content_security_policy=app.config.get("CONTENT_SECURITY_POLICY"),
            session_cookie_secure=app.config.get("SESSION_COOKIE_SECURE", True),
        )

    return app


def init_state(app):
    """
    Create the user directory, file registry and upload tracker.

    Args:
        app: Flask application instance
    """
    from teamfocuz.seed import seed_demo_data
    from teamfocuz.state import init_stores
    from teamfocuz.uploads import init_upload_tracker

    user_store, file_store = init_stores(app)
    if app.config.get("SEED_DEMO_DATA", True):
        seed_demo_data(user_store, file_store)
    init_upload_tracker(app, file_store)


def init_extensions(app):
    """
    Initialize Flask extensions.

    Args:
        app: Flask application instance
    """
    # Cache initialization
    from teamfocuz.cache import init_cache

    init_cache(app)

    # CORS for API access
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", [])}},
        supports_credentials=True,
    )

    # CSRF Protection
    csrf.init_app(app)

    # Rate limiting (can be disabled via RATELIMIT_ENABLED=False)
    if app.config.get("RATELIMIT_ENABLED", True):
        limiter = Limiter(
            key_func=get_remote_address,
            default_limits=[app.config.get("RATELIMIT_DEFAULT", "300 per hour")],
            storage_uri=app.config.get("RATELIMIT_STORAGE_URL"),
        )
        limiter.init_app(app)
        app.extensions[LIMITER_KEY] = limiter

    # User session management
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"
    login_manager.login_message = "Please log in to access this page."
    login_manager.login_message_category = "info"

    @login_manager.user_loader
    def load_user(user_id):
        """Load user by ID for Flask-Login."""
        from teamfocuz.state import get_user_store

        return get_user_store().get(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        """API clients get JSON, browsers go to the login page."""
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return redirect(url_for("auth.login", next=request.path))


def register_blueprints(flask_app):
    """
    Register Flask blueprints.

    Args:
        flask_app: Flask application instance
    """
    # API routes - All API endpoints are registered on the shared api_bp blueprint
    # Import modules to register their routes, then register the blueprint once
    from teamfocuz.api import api_bp

    import teamfocuz.api.files  # noqa: F401 - registers routes on api_bp
    import teamfocuz.api.health  # noqa: F401 - registers routes on api_bp
    import teamfocuz.api.notifications  # noqa: F401 - registers routes on api_bp
    import teamfocuz.api.reports  # noqa: F401 - registers routes on api_bp
    import teamfocuz.api.uploads  # noqa: F401 - registers routes on api_bp

    flask_app.register_blueprint(api_bp, url_prefix="/api")

    # Authentication routes
    from teamfocuz.auth.routes import auth_bp

    flask_app.register_blueprint(auth_bp, url_prefix="/auth")

    # Main web interface routes
    from teamfocuz.main.routes import main_bp

    flask_app.register_blueprint(main_bp)

    # Admin interface routes (paths are top level: /files, /users, /reports)
    from teamfocuz.admin.routes import admin_bp

    flask_app.register_blueprint(admin_bp)


def apply_login_rate_limit(app):
    """Apply RATELIMIT_LOGIN to credential submissions when limiting is on."""
    limiter = app.extensions.get(LIMITER_KEY)
    if limiter is None:
        return
    endpoint = "auth.login"
    app.view_functions[endpoint] = limiter.limit(
        app.config.get("RATELIMIT_LOGIN", "10 per minute"), methods=["POST"]
    )(app.view_functions[endpoint])


def register_template_filters(app: Flask) -> None:
    """
    Register custom Jinja template filters and context.

    Args:
        app: Flask application instance
    """
    from teamfocuz.permissions import permitted_routes
    from teamfocuz.uploads import format_file_size

    app.jinja_env.filters["filesize"] = format_file_size

    def format_datetime(value, fmt: str = "%b %d, %Y") -> str:
        """Format a datetime for display; empty string for None."""
        if value is None:
            return ""
        return value.strftime(fmt)

    app.jinja_env.filters["datetime"] = format_datetime

    def timeago(value) -> str:
        """Coarse relative time such as '3 days ago'."""
        if value is None:
            return ""
        from teamfocuz.models import utcnow

        seconds = int((utcnow() - value).total_seconds())
        if seconds < 60:
            return "just now"
        units = (
            ("year", 31536000),
            ("month", 2592000),
            ("day", 86400),
            ("hour", 3600),
            ("minute", 60),
        )
        for unit, size in units:
            if seconds >= size:
                count = seconds // size
                return f"{count} {unit}{'s' if count != 1 else ''} ago"
        return "just now"

    app.jinja_env.filters["timeago"] = timeago

    @app.context_processor
    def inject_navigation():
        """Provide the role-filtered sidebar and unread count to all templates."""
        if not current_user.is_authenticated:
            return {"navigation": [], "unread_notifications": 0}

        from teamfocuz.state import get_file_store

        return {
            "navigation": permitted_routes(current_user.role),
            "unread_notifications": get_file_store().unread_count(),
        }


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def register_error_handlers(app):
    """
    Register error handlers for common HTTP errors.

    Requests under /api/ get JSON bodies; pages render errors/<code>.html.

    Args:
        app: Flask application instance
    """
    from teamfocuz.error_utils import handle_api_exception, safe_log_error

    logger = structlog.get_logger(__name__)

    def _error(code: int, message: str):
        if _wants_json():
            return jsonify({"success": False, "error": message}), code
        return render_template(f"errors/{code}.html"), code

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return _error(400, "Bad request")

    @app.errorhandler(403)
    def forbidden(error):
        """Handle 403 Forbidden errors."""
        return _error(403, "Forbidden")

    @app.errorhandler(404)
    def not_found(error):
        """Unknown pages fall back to the dashboard (or login)."""
        if _wants_json():
            return jsonify({"success": False, "error": "Not found"}), 404
        if current_user.is_authenticated:
            return redirect(url_for("main.dashboard"))
        return redirect(url_for("auth.login"))

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        if _wants_json():
            return jsonify({"success": False, "error": "Method not allowed"}), 405
        return render_template("errors/400.html"), 405

    @app.errorhandler(413)
    def request_entity_too_large(error):
        """Handle 413 Request Entity Too Large errors."""
        return _error(413, "Upload too large")

    @app.errorhandler(429)
    def ratelimit_handler(error):
        """Handle 429 Too Many Requests errors."""
        return _error(429, "Too many requests")

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error.

        API callers get a sanitized body; the exception is logged in full.
        """
        if _wants_json():
            body, code = handle_api_exception(
                logger,
                "unhandled_api_error",
                status_code=500,
                endpoint=request.endpoint,
            )
            return jsonify(body), code
        safe_log_error(logger, "unhandled_page_error", endpoint=request.endpoint)
        return render_template("errors/500.html"), 500


__all__ = ["create_app", "csrf"]
