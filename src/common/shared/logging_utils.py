"""
@meta
name: shared_logging_utils
type: utility
domain: shared
responsibility:
  - Provide timestamped loggers for the deployment workflow
  - Allow the CLI to adjust verbosity in one place
inputs:
  - Logger names
outputs:
  - Configured logger instances
tags:
  - utility
  - shared
  - logging
ci:
  runnable: false
  needs_gpu: false
  needs_cloud: false
lifecycle:
  status: active
"""

"""Shared logging utilities for consistent step-transition logging."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER_NAME = "deployment"


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger with standardized formatting.

    Args:
        name: Logger name (typically __name__).
        level: Optional logging level (default: INFO).

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

        if level is not None:
            logger.setLevel(level)
        elif logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)

    return logger


def set_log_level(level: int) -> None:
    """Set ``level`` on every logger created under the ``deployment`` namespace."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and name.startswith(ROOT_LOGGER_NAME):
            logger.setLevel(level)
