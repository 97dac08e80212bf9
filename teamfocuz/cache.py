"""
Caching configuration for TeamFocuz.

Only derived report data is cached (monthly statistics keyed by a content
hash of the file registry), so a stale entry is impossible: any change to the
registry changes the key.
"""

from flask_caching import Cache

# Initialize cache instance
cache = Cache()


def init_cache(app):
    """
    Initialize Flask-Caching from the application config.

    Args:
        app: Flask application instance
    """
    cache_config = {
        "CACHE_TYPE": app.config.get("CACHE_TYPE", "SimpleCache"),
        "CACHE_DEFAULT_TIMEOUT": app.config.get("CACHE_DEFAULT_TIMEOUT", 300),
        "CACHE_KEY_PREFIX": app.config.get("CACHE_KEY_PREFIX", "teamfocuz:"),
    }

    app.config.update(cache_config)
    cache.init_app(app)

    app.logger.info(
        f"Cache initialized: {cache_config['CACHE_TYPE']} backend",
        extra={"cache_type": cache_config["CACHE_TYPE"]},
    )

    return cache
