"""
Logging setup for applications embedding the filter engines.

The library itself only creates module loggers under 'sampleflow'; handlers
are attached here, on request, never at import time.
"""

import logging
import logging.handlers
from typing import Optional

from .config_manager import FilterSettings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger('sampleflow.core.logging_config')

def configure_logging(settings: Optional[FilterSettings] = None) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the 'sampleflow' logger.

    Args:
        settings: Settings to apply; the global settings are used when omitted

    Returns:
        The configured 'sampleflow' logger
    """
    settings = settings or get_settings()

    package_logger = logging.getLogger('sampleflow')
    package_logger.setLevel(settings.log_level)

    # Drop handlers from a previous call so reconfiguring doesn't duplicate output
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if settings.log_file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=settings.log_file_path,
            encoding='utf-8',
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    logger.debug("Logging configured")
    return package_logger
