"""
Logging for cartstore.

The level comes from Settings.log_level (LOG_LEVEL). A stdout handler is
attached only when the host application has not configured logging itself.

    from cartstore.logging import get_logger, log_safe
    logger = get_logger(__name__)
    logger.debug("Adding %s", log_safe(product_id))
"""

import logging
import sys
from functools import cache

from cartstore.config import Settings, get_settings

PACKAGE_LOGGER = "cartstore"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# C0 control chars and DEL rendered as escapes, so ids can't forge log lines (CWE-117)
_ESCAPES = {code: repr(chr(code))[1:-1] for code in (*range(32), 127)}


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Apply the configured level to the package logger."""
    settings = settings or get_settings()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(settings.log_level)

    if not logging.getLogger().handlers and not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)

    return package_logger


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_safe(value: object, max_length: int = 40) -> str:
    """Escape control characters and truncate a caller-supplied value."""
    if value is None or value == "":
        return "N/A"
    text = str(value).translate(_ESCAPES)
    return text if len(text) <= max_length else text[:max_length] + "..."
