"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure structured logging defaults for the application."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
