"""
Logging configuration for the tsquality package.

All handlers live on the ``tsquality`` logger. Modules log through named
children (``tsquality.engine.temporal``, ``tsquality.pipeline``...) obtained
with ``get_logger(__name__)``, so records show where they come from and a
single ``configure_logging`` call reconfigures every module.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


ROOT_LOGGER_NAME = "tsquality"
LOG_LEVEL_ENV_VAR = "TSQUALITY_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Optional[str] = None) -> int:
    """
    Resolve a level name, falling back to $TSQUALITY_LOG_LEVEL, then INFO.

    Unknown names resolve to INFO.

    Example:
        >>> resolve_level("debug")
        10
    """
    name = level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO"
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up and configure a logger with console and/or file handlers.

    Existing handlers are replaced, so calling this again reconfigures the
    logger instead of duplicating output.

    Args:
        name: Logger name (default: "tsquality")
        level: Logging level name; see ``resolve_level``
        log_file: Optional path to an appended log file
        console_output: Whether to log to stdout (default: True)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(level="DEBUG", log_file=Path("tsquality.log"))
        >>> logger.info("Assessment started")
    """
    logger = logging.getLogger(name)
    log_level = resolve_level(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(log_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


_default_logger: Optional[logging.Logger] = None


def get_default_logger() -> logging.Logger:
    """Get the ``tsquality`` logger, configuring it on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = setup_logger()
    return _default_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a module logger below the ``tsquality`` logger.

    Args:
        name: Module name, usually ``__name__``. Names outside the package
            are nested under it; None returns the package logger itself.

    Example:
        >>> get_logger("tsquality.pipeline").name
        'tsquality.pipeline'
        >>> get_logger("scripts").name
        'tsquality.scripts'
    """
    root = get_default_logger()
    if not name or name == root.name:
        return root
    if name.startswith(root.name + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Reconfigure the ``tsquality`` logger and with it every module logger.

    Example:
        >>> configure_logging(level="DEBUG", log_file=Path("tsquality.log"))
    """
    global _default_logger
    _default_logger = setup_logger(
        level=level,
        log_file=log_file,
        console_output=console_output,
    )
    return _default_logger
