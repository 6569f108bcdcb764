"""
Logging configuration for Comic Client.

This module configures the application's logging system using Loguru,
providing structured logs with consistent formatting and file rotation.
"""

import logging
import sys
from typing import Dict, Optional

from loguru import logger

from comic_client.config import get_config


# Remove default handler
logger.remove()


class InterceptHandler(logging.Handler):
    """Route standard library log records into Loguru."""

    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the application's logging system.

    Args:
        level: Optional level overriding the configured one
    """
    config = get_config()
    log_config = config.logging
    log_level = (level or log_config.level).upper()

    logger.remove()

    # Add console handler
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_config.format,
        colorize=True,
    )

    # Add file handler if enabled
    if log_config.save_to_file and log_config.log_file:
        logger.add(
            str(log_config.log_file),
            level=log_level,
            format=log_config.format,
            rotation=log_config.rotation,
            retention=log_config.retention,
            compression="zip",
        )

    # Intercept stdlib logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Update logging level for third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logger.debug("Logging system configured")


def get_logger(name: Optional[str] = None) -> logger.__class__:
    """
    Get a logger instance with the specified name.

    Args:
        name: Optional name for the logger (typically the module name)

    Returns:
        Configured logger instance
    """
    return logger.bind(name=name)


class RequestsLogger:
    """
    Logger for HTTP requests using the requests library.

    Supplies ``response`` hooks for a requests Session so that every
    round trip is logged at debug level.
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize with an optional logger name."""
        self.logger = get_logger(name or "requests")

    def log_response(self, response, **kwargs) -> None:
        """Log a request and the response it produced."""
        request = response.request
        self.logger.debug(
            f"{request.method} {request.url} -> {response.status_code} {response.reason}"
            f" ({response.elapsed.total_seconds():.3f}s)"
        )

    def get_hooks(self) -> Dict[str, list]:
        """
        Get hooks for the requests library.

        Usage:
            session.hooks = RequestsLogger().get_hooks()
        """
        return {"response": [self.log_response]}
