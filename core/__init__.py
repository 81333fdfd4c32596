"""
Core utilities and configuration for the City Guided import pipeline.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database connection and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities
    rate_limiter: Per-service pacing of outbound requests
    cache: Process-lifetime enrichment caches

Usage:
    from core.config import settings
    from core.database import get_session
    from core.exceptions import GeoQueryError, UpsertError
    from core.logging import setup_logging
    from core.rate_limiter import RateLimiter

Example:
    # Initialize logging
    setup_logging()

    # Pace calls to a service
    limiter = RateLimiter("overpass", settings.OVERPASS_MIN_INTERVAL_MS)
    await limiter.acquire()
"""

__all__ = [
    "config",
    "database",
    "exceptions",
    "logging",
    "rate_limiter",
    "cache",
]
