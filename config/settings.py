"""
Configuration settings for the Flask application.
This module contains all configuration classes for different environments.
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Base configuration class containing common settings.

    This class defines the default configuration that other
    environment-specific classes will inherit from.
    """

    # Security Configuration
    SECRET_KEY = (
        os.environ.get("SECRET_KEY") or "your-super-secret-key-change-in-production"
    )
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # 1 hour
    WTF_CSRF_SSL_STRICT = False  # Allow CSRF tokens over HTTP in development

    # Placeholder credential shared by every demo account
    SHARED_PASSWORD = os.environ.get("SHARED_PASSWORD", "password123")

    # Populate the in-memory stores with the demo team on startup
    SEED_DEMO_DATA = os.environ.get("SEED_DEMO_DATA", "true").lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    # Flask Configuration
    DEBUG = os.environ.get("FLASK_DEBUG", "False").lower() == "true"
    HOST = os.environ.get("FLASK_HOST", "0.0.0.0")
    PORT = int(os.environ.get("FLASK_PORT", 5000))

    # Session Configuration
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Upload Configuration (bytes are discarded, only metadata is kept)
    MAX_CONTENT_LENGTH = int(
        os.environ.get("MAX_CONTENT_LENGTH", 500 * 1024 * 1024)
    )  # Default 500MB
    UPLOAD_SIMULATED_DELAY = float(os.environ.get("UPLOAD_SIMULATED_DELAY", 2))
    # Finished upload jobs are forgotten after this many seconds
    UPLOAD_JOB_RETENTION = float(os.environ.get("UPLOAD_JOB_RETENTION", 3600))

    # Dashboard / report sizes
    RECENT_FILES_LIMIT = int(os.environ.get("RECENT_FILES_LIMIT", 5))
    TOP_CONTRIBUTORS_LIMIT = int(os.environ.get("TOP_CONTRIBUTORS_LIMIT", 5))
    NOTIFICATIONS_PAGE_SIZE = int(os.environ.get("NOTIFICATIONS_PAGE_SIZE", 20))

    # Caching (monthly statistics keyed by content hash)
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get("CACHE_DEFAULT_TIMEOUT", 300))
    CACHE_KEY_PREFIX = "teamfocuz:"

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rate Limiting Configuration
    RATELIMIT_STORAGE_URL = os.environ.get("RATELIMIT_STORAGE_URL", "memory://")
    RATELIMIT_DEFAULT = "300 per hour"
    RATELIMIT_LOGIN = os.environ.get("RATELIMIT_LOGIN", "10 per minute")

    # Security Headers (Talisman)
    FORCE_HTTPS = False  # Set to True in production
    STRICT_TRANSPORT_SECURITY = True
    CONTENT_SECURITY_POLICY = {
        "default-src": "'self'",
        "script-src": "'self' 'unsafe-inline' cdn.jsdelivr.net",
        "style-src": "'self' 'unsafe-inline' cdn.jsdelivr.net",
        "img-src": "'self' data: https:",
        "font-src": "'self' cdn.jsdelivr.net",
    }

    # CORS origins allowed to call the JSON API
    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if o.strip()
    ]


class DevelopmentConfig(Config):
    """
    Development environment configuration.

    This configuration is used during local development.
    It includes debug mode and relaxed security settings.
    """

    DEBUG = True
    SESSION_COOKIE_SECURE = False  # Allow HTTP in development
    FORCE_HTTPS = False
    # Disable rate limiting in development to avoid 429s during asset bursts
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """
    Production environment configuration.

    The stores are still in-memory; this only tightens transport and
    rate limits.
    """

    DEBUG = False

    # Enhanced security for production
    FORCE_HTTPS = True
    SESSION_COOKIE_SECURE = True

    # Stricter rate limiting
    RATELIMIT_DEFAULT = "100 per hour"


class TestingConfig(Config):
    """
    Testing environment configuration.

    Disables CSRF, rate limiting and the simulated upload delay.
    """

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False  # Disable CSRF for testing
    SESSION_COOKIE_SECURE = False

    UPLOAD_SIMULATED_DELAY = 0.0
    CACHE_TYPE = "NullCache"

    # Disable rate limiting for tests
    RATELIMIT_ENABLED = False
