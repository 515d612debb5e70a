"""
Logging and error tracking setup.

Usage:
    from backend.observability import init_observability
    from backend.settings import Settings

    # Default (uses get_settings())
    init_observability()

    # Custom settings
    init_observability(Settings(environment="test", _env_file=None))
"""

import logging
from typing import Optional

import sentry_sdk

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging at the configured level."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry SDK if DSN is configured.

    Returns:
        True when Sentry was initialized
    """
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
        release=f"workout-engine@{settings.generator_version}",
    )
    logger.info("Sentry initialized for workout-engine")
    return True


def init_observability(settings: Optional[Settings] = None) -> Settings:
    """
    Configure logging and error tracking.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings().

    Returns:
        The settings that were applied.
    """
    if settings is None:
        settings = get_settings()

    configure_logging(settings)
    init_sentry(settings)

    logger.info(
        f"Observability configured: environment={settings.environment}, "
        f"log_level={settings.log_level}, sentry={'on' if settings.sentry_dsn else 'off'}"
    )
    return settings
