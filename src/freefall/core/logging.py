"""
Unified logging for the freefall package.

Exports:
    - logger: Global Loguru logger (ready for use/import).
    - setup_logfile: Add file logging with rotation/compression.
    - setup_json_logfile: Add a JSON-format log file for machine parsing.
"""

import os
from loguru import logger

__all__ = [
    "logger",
    "setup_logfile",
    "setup_json_logfile",
]

# Library code stays quiet unless the application opts in
logger.disable("freefall")


def setup_logfile(
    log_path: str,
    rotation: str = "10 MB",
    retention: str = "10 days",
    compression: str = "zip",
    level: str = "INFO",
    colorize: bool = False
) -> int:
    """
    Add a rotating file handler to the global logger and enable package logs.

    Args:
        log_path (str): Path to the log file.
        rotation (str): Size or time string for log rotation.
        retention (str): How long to keep old logs.
        compression (str): Compression method for rotated logs.
        level (str): Logging level (DEBUG, INFO, etc.).
        colorize (bool): Colorize file output (default: False).

    Returns:
        int: The loguru handler id, usable with ``logger.remove``.
    """
    log_dir = os.path.dirname(log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    logger.enable("freefall")
    handler_id = logger.add(
        log_path,
        rotation=rotation,
        retention=retention,
        compression=compression,
        level=level.upper(),
        colorize=colorize,
        backtrace=True,
        diagnose=True,
    )
    logger.info(f"Loguru file logging initialized: {log_path}")
    return handler_id


def setup_json_logfile(log_path: str, **kwargs) -> int:
    """
    Add a JSON-format log file (for machine parsing).
    Args:
        log_path (str): Path to JSON log file.
        **kwargs: Passed to logger.add().
    """
    logger.enable("freefall")
    handler_id = logger.add(
        log_path,
        serialize=True,
        **kwargs
    )
    logger.info(f"Loguru JSON logging initialized: {log_path}")
    return handler_id
