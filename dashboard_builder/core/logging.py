"""
Logging setup for processes hosting the dashboard builder.

Library modules only create module loggers; the host calls
configure_logging() once at startup.
"""

import logging

from dashboard_builder.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging with the standard format."""
    settings = get_settings()
    resolved = (level or ("DEBUG" if settings.debug else settings.log_level)).upper()

    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format=LOG_FORMAT,
    )

    # Reduce noise from HTTP client libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("dashboard_builder").setLevel(getattr(logging, resolved, logging.INFO))
