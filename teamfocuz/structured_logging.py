"""
Structured logging configuration using structlog.

This module provides the logging setup for the web process:
- Structured JSON output for easy parsing and analysis
- Context-aware logging (request path, endpoint, user id and role)
- Automatic log level filtering by component
- Clean human-readable console output in development and tests
- Size-based log rotation

Usage in Flask:
    from teamfocuz.structured_logging import configure_structlog
    configure_structlog(app)

Usage in code:
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("file_status_updated", file_id="3", status="approved")
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog
from pythonjsonlogger.json import JsonFormatter

# Module-level guard to avoid duplicate configuration
_STRUCTLOG_CONFIGURED = False


def _ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError:
        pass


def get_log_dir(instance_path: str, override: str | None = None) -> str:
    """Resolve the directory where log files will be stored.

    Order of preference:
    1) explicit override argument
    2) LOG_DIR env var
    3) <instance_path>/logs
    """
    base = override or os.environ.get("LOG_DIR")
    if not base:
        base = os.path.join(instance_path, "logs")
    _ensure_dir(base)
    return base


def _add_request_context(logger, method_name, event_dict):
    """Add Flask request context to log events."""
    try:
        from flask import has_request_context, request

        if has_request_context():
            event_dict["endpoint"] = request.endpoint
            event_dict["method"] = request.method
            event_dict["path"] = request.path
            event_dict["remote_addr"] = request.remote_addr

            from flask_login import current_user

            if current_user and current_user.is_authenticated:
                event_dict.setdefault("user_id", current_user.id)
                event_dict["username"] = current_user.username
                event_dict["role"] = current_user.role.value
    except RuntimeError:
        # Outside an application context
        pass
    return event_dict


def _filter_health_checks(logger, method_name, event_dict):
    """Filter out noisy health check and polling requests at INFO level."""
    if event_dict.get("level") in ("info", "warning"):
        endpoint = event_dict.get("endpoint") or ""
        path = event_dict.get("path") or ""

        noisy_patterns = [
            "/api/health",
            "/api/notifications/unread-count",
        ]

        for pattern in noisy_patterns:
            if pattern in path or pattern in endpoint:
                raise structlog.DropEvent

    return event_dict


def _censor_sensitive_data(logger, method_name, event_dict):
    """Remove or redact sensitive data from logs."""
    sensitive_keys = {
        "password",
        "secret",
        "token",
        "authorization",
        "cookie",
        "csrf_token",
    }

    for key in list(event_dict.keys()):
        if any(sens in key.lower() for sens in sensitive_keys):
            event_dict[key] = "***REDACTED***"

    return event_dict


def _build_json_handler(path: str, level: int) -> RotatingFileHandler:
    """Build a rotating file handler with JSON formatting."""
    # 10 MB per file, keep 5 backups
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _build_console_handler(
    level: int, use_colors: bool = True
) -> logging.StreamHandler:
    """Build a console handler with human-readable formatting."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_colors and sys.stderr.isatty():
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-8s] %(name)-25s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    return handler


def get_log_level(app_config: dict | None = None) -> int:
    """Determine log level from config or environment."""
    if app_config and "LOG_LEVEL" in app_config:
        level_name = str(app_config["LOG_LEVEL"])
    else:
        level_name = os.environ.get("LOG_LEVEL", "INFO")

    return getattr(logging, level_name.upper(), logging.INFO)


def configure_component_loggers(base_level: int) -> None:
    """Quiet third-party loggers unless running at DEBUG."""
    # Werkzeug (Flask's request logger) - suppress unless DEBUG
    logging.getLogger("werkzeug").setLevel(
        logging.DEBUG if base_level <= logging.DEBUG else logging.WARNING
    )
    logging.getLogger("flask_limiter").setLevel(logging.WARNING)


def configure_structlog(app) -> dict:
    """Configure structlog for the Flask application.

    Args:
        app: Flask app instance (must have .instance_path and .config)

    Returns:
        dict with keys: log_dir, app_log, error_log
    """
    global _STRUCTLOG_CONFIGURED

    # Never configure file logging in tests
    if app.config.get("TESTING"):
        if not _STRUCTLOG_CONFIGURED:
            structlog.configure(
                processors=[
                    structlog.processors.add_log_level,
                    structlog.processors.TimeStamper(fmt="iso"),
                    _censor_sensitive_data,
                    structlog.dev.ConsoleRenderer(),
                ],
                wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
                context_class=dict,
                logger_factory=structlog.PrintLoggerFactory(),
                cache_logger_on_first_use=True,
            )
            _STRUCTLOG_CONFIGURED = True
        return {"log_dir": "", "app_log": "", "error_log": ""}

    log_dir = get_log_dir(app.instance_path)
    app_log_path = os.path.join(log_dir, "app.json")
    error_log_path = os.path.join(log_dir, "error.json")

    level = get_log_level(app.config)

    if not _STRUCTLOG_CONFIGURED:
        root = logging.getLogger()
        root.setLevel(level)
        root.handlers.clear()

        root.addHandler(_build_json_handler(app_log_path, level))
        # Separate error log (WARNING and above only)
        root.addHandler(_build_json_handler(error_log_path, logging.WARNING))
        root.addHandler(_build_console_handler(level, use_colors=app.debug))

        configure_component_loggers(level)

        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_logger_name,
            structlog.processors.CallsiteParameterAdder(
                {
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                }
            ),
            _add_request_context,
            _filter_health_checks,
            _censor_sensitive_data,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        _STRUCTLOG_CONFIGURED = True

    logger = structlog.get_logger(__name__)
    logger.debug(
        "logging_configured",
        log_dir=log_dir,
        level=logging.getLevelName(level),
    )

    return {
        "log_dir": log_dir,
        "app_log": app_log_path,
        "error_log": error_log_path,
    }
