"""Logging configuration for findip."""

import logging
from pathlib import Path

from findip.config import LOG_LEVELS, LoggingConfig

# Module-level logger cache
_logger: logging.Logger | None = None

DECORATED_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
PLAIN_FORMAT = "%(message)s"


def setup_logging(config: LoggingConfig, verbose: bool = False) -> logging.Logger:
    """Set up the package logger from the logging section of the config.

    Args:
        config: Logging configuration.
        verbose: Force debug level regardless of config.

    Returns:
        Configured logger instance.
    """
    global _logger

    # Return existing logger if already set up (idempotent)
    if _logger is not None:
        return _logger

    logger = logging.getLogger("findip")
    level = logging.DEBUG if verbose else LOG_LEVELS.get(config.log_level, logging.INFO)
    logger.setLevel(level)

    logger.handlers.clear()

    # Decorated format: 2025-01-27 10:30:45 [INFO] message
    if config.decorate:
        formatter = logging.Formatter(DECORATED_FORMAT)
        formatter.datefmt = "%Y-%m-%d %H:%M:%S"
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _logger = logger
    return logger


def shutdown_logging() -> None:
    """Flush and close handlers. Call once at process exit."""
    global _logger
    if _logger is None:
        return
    for handler in list(_logger.handlers):
        handler.flush()
        handler.close()
        _logger.removeHandler(handler)
    _logger = None


def reset_logging() -> None:
    """Reset logging state. Used for testing."""
    global _logger
    logger = logging.getLogger("findip")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _logger = None
