"""
Logging configuration for agp_analyzer.

Verbosity levels:
- 0 (default): WARNING - degenerate periods and errors only
- 1:           INFO - resolved periods and bundle sizes
- 2+:          DEBUG - per-period reading counts and band settings
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "agp_analyzer"


def setup_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG.
        stream: Output stream. Defaults to stderr.

    Returns:
        The configured agp_analyzer logger.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if verbosity >= 2:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S"
        )
    elif verbosity == 1:
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
    else:
        formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module, or the package logger if name is None."""
    return logging.getLogger(name or LOGGER_NAME)
