"""
Unified logging utilities for the hypertorus package.

Exports:
    - logger: Global Loguru logger (ready for use/import).
    - set_console_level: Replace the stderr sink with one at a given level.
    - setup_logfile: Add file logging with rotation/compression.
    - setup_json_logfile: Add a JSON-format log file for machine parsing.
"""

import os
import sys

from loguru import logger

__all__ = [
    "logger",
    "set_console_level",
    "setup_logfile",
    "setup_json_logfile",
]

_console_sink_id = None


def _write_stderr(message):
    # Looked up per call so redirected streams (test runners) are honored.
    sys.stderr.write(message)


def set_console_level(level: str = "INFO") -> int:
    """
    Route console output to stderr at the requested level.

    Loguru ships with a DEBUG stderr sink (id 0). The first call removes it;
    later calls replace the sink added here.

    Args:
        level (str): Logging level (DEBUG, INFO, etc.).

    Returns:
        int: Id of the new sink.
    """
    global _console_sink_id
    try:
        logger.remove(_console_sink_id if _console_sink_id is not None else 0)
    except ValueError:
        # Sink already removed by the host application.
        pass
    _console_sink_id = logger.add(_write_stderr, level=level.upper(), colorize=False)
    return _console_sink_id


def setup_logfile(
    log_path: str,
    rotation: str = "10 MB",
    retention: str = "10 days",
    compression: str = "zip",
    level: str = "INFO",
    colorize: bool = False
):
    """
    Add a rotating file handler to the global logger.

    Args:
        log_path (str): Path to the log file.
        rotation (str): Size or time string for log rotation.
        retention (str): How long to keep old logs.
        compression (str): Compression method for rotated logs.
        level (str): Logging level (DEBUG, INFO, etc.).
        colorize (bool): Colorize file output (default: False).

    Returns:
        int: Id of the new sink.
    """
    log_dir = os.path.dirname(log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    sink_id = logger.add(
        log_path,
        rotation=rotation,
        retention=retention,
        compression=compression,
        level=level.upper(),
        colorize=colorize,
        enqueue=True,
        backtrace=True,
        diagnose=True,
    )
    logger.info(f"Loguru file logging initialized: {log_path}")
    return sink_id


def setup_json_logfile(log_path: str, **kwargs):
    """
    Add a JSON-format log file (for machine parsing).

    Args:
        log_path (str): Path to JSON log file.
        **kwargs: Passed to logger.add().

    Returns:
        int: Id of the new sink.
    """
    sink_id = logger.add(
        log_path,
        serialize=True,
        **kwargs
    )
    logger.info(f"Loguru JSON logging initialized: {log_path}")
    return sink_id
