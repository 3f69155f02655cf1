"""Centralized logging configuration for Grounded Relay."""

import logging
import os
import sys

# Log level from environment (default: INFO)
_log_level = os.getenv("LOG_LEVEL", "INFO").upper()

# Create the main logger for the relay
logger = logging.getLogger("grounded_relay")
logger.setLevel(getattr(logging, _log_level, logging.INFO))

# Avoid duplicate handlers if module is reloaded
if not logger.handlers:
    # stderr keeps stdout free for the MCP stdio transport
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, _log_level, logging.INFO))

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a specific module.

    Args:
        name: Module name (e.g., 'search', 'backends', 'dispatcher')

    Returns:
        A logger instance sharing the relay's handler and level
    """
    return logger.getChild(name)
