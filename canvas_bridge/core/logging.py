"""
Logging setup shared by the FastAPI application and operator scripts.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Request-level chatter from the HTTP client stack, including full Canvas URLs.
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the bridge on stdout."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, stream=sys.stdout)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "configure_logging"]
