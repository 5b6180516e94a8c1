# logging_config.py
"""
Centralized Logging Configuration for the Coulomb Wave Function Engine
======================================================================

Every module obtains its logger here so that formatting, levels and output
are consistent across special functions, the ODE fallback and the regime
dispatcher.

Usage
-----
    from logging_config import get_logger
    logger = get_logger(__name__)

    logger.debug("Regime %s selected for L=%d", regime, L)
    logger.warning("Steed's method failed, falling back: %s", err)

Log Levels
----------
- DEBUG: Regime decisions, iteration counts, step-size adaptation
- INFO: Configuration loading, plots written
- WARNING: Convergence failures that were recovered by a fallback regime
- ERROR: Every applicable regime failed

Configuration
-------------
The log level can be controlled via environment variable:
    export COULOMB_LOG_LEVEL=DEBUG

or programmatically:
    logging_config.set_log_level(logging.DEBUG)

File output can be enabled:
    logging_config.enable_file_logging("coulomb_run.log")
"""

from __future__ import annotations
import logging
import sys
import os
from typing import Optional
from datetime import datetime

# Module-level logger cache
_loggers: dict = {}

_DEFAULT_FORMAT = "%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_LEVEL = logging.INFO
_ENV_VARIABLE = "COULOMB_LOG_LEVEL"

_handlers_configured = False
_file_handler: Optional[logging.FileHandler] = None


def _level_from_environment() -> int:
    env_level = os.environ.get(_ENV_VARIABLE, "").upper()
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(env_level, _DEFAULT_LEVEL)


def _configure_root_handler() -> None:
    """
    Attach one stdout handler to the root logger.
    Called automatically on first get_logger() call.
    """
    global _handlers_configured

    if _handlers_configured:
        return

    level = _level_from_environment()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT)
    )

    # Host applications (or pytest) may already own the root handlers
    if not root_logger.handlers:
        root_logger.addHandler(console_handler)

    _handlers_configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module name.

    Parameters
    ----------
    name : str
        Module name, typically __name__ from the calling module.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    if name not in _loggers:
        _configure_root_handler()
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def set_log_level(level: int) -> None:
    """
    Set the global log level for the root logger and its handlers.

    Parameters
    ----------
    level : int
        Logging level (e.g., logging.DEBUG, logging.INFO).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers:
        handler.setLevel(level)


def enable_file_logging(
    filename: Optional[str] = None,
    level: int = logging.DEBUG
) -> str:
    """
    Enable logging to a file in addition to console output.

    Parameters
    ----------
    filename : str, optional
        Path to log file. If not specified, generates timestamped filename.
    level : int
        Log level for file output (default: DEBUG).

    Returns
    -------
    str
        Path to the created log file.
    """
    global _file_handler

    if filename is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"coulomb_log_{timestamp}.log"

    disable_file_logging()

    _file_handler = logging.FileHandler(filename, encoding='utf-8')
    _file_handler.setLevel(level)
    _file_handler.setFormatter(
        logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATE_FORMAT)
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(_file_handler)

    if root_logger.level > level:
        root_logger.setLevel(level)

    return str(filename)


def disable_file_logging() -> None:
    """Disable file logging if it was previously enabled."""
    global _file_handler

    if _file_handler is not None:
        root_logger = logging.getLogger()
        root_logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None


def silence_logger(name: str) -> None:
    """Restrict a specific logger to WARNING and above."""
    logging.getLogger(name).setLevel(logging.WARNING)


def enable_debug_mode() -> None:
    """Shortcut: full debug output to console."""
    set_log_level(logging.DEBUG)


def _configure_third_party() -> None:
    """Quiet plotting and numerics libraries."""
    silence_logger("matplotlib.font_manager")
    silence_logger("matplotlib")
    silence_logger("PIL")


_configure_third_party()
