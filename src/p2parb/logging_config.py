"""
Logging configuration for the P2P arbitrage calculator.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import get_config


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Set up logging with Rich handler for terminal output.

    Args:
        level: Optional log level override. If not provided, uses config.

    Returns:
        The logger for the p2parb package.
    """
    log_level = (level or get_config().log_level).upper()

    # Logs go to stderr so --json output on stdout stays parseable
    console = Console(stderr=True)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                show_time=True,
                show_path=False,
            )
        ],
    )

    logger = logging.getLogger("p2parb")
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: The module name (usually __name__).

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)
