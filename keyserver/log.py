"""Logging setup."""
import logging

from keyserver.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(process)d] %(name)s: %(message)s"


def configure_logging() -> None:
    """Configure the root logger from settings."""
    logging.basicConfig(level=settings.log_level.value, format=LOG_FORMAT)
