"""
Centralized logging configuration for the architect completion report.

The log level is taken from, in order of precedence:
1. The --log-level command-line argument
2. The LOG_LEVEL environment variable
3. The INFO default

Usage:
    from logging_config import add_log_level_argument, configure_logging

    parser = argparse.ArgumentParser(description="Completion report")
    add_log_level_argument(parser)
    args = parser.parse_args()
    configure_logging(log_file=args.log_file, log_level=args.log_level)

    # Library modules only create a logger:
    logger = logging.getLogger(__name__)

Example:
    $ LOG_LEVEL=DEBUG python completion_report_cli.py
    $ python completion_report_cli.py --log-level DEBUG
"""

import os
import logging
import argparse
from typing import Optional

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

DEFAULT_LOG_LEVEL = 'INFO'

LOG_LEVEL_ENV_VAR = 'LOG_LEVEL'

# Concise single line for INFO and below
STANDARD_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

# ERROR and above also name the function and line
DETAILED_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s'

# Third-party loggers that are too chatty at DEBUG
NOISY_LOGGERS = ('urllib3', 'requests')


def get_log_level(cli_level: Optional[str] = None) -> int:
    """
    Determine the log level from CLI argument or environment variable.

    Args:
        cli_level: Log level specified via command-line argument.

    Returns:
        The logging level as an integer constant (e.g., logging.DEBUG).

    Raises:
        ValueError: If an invalid log level is specified.

    Example:
        >>> get_log_level('debug') == logging.DEBUG
        True
    """
    level_str = (cli_level or os.getenv(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}"
        )

    return getattr(logging, level_str)


class DetailedErrorFormatter(logging.Formatter):
    """
    Formatter that switches to the detailed format for ERROR and above.
    """

    def __init__(
        self,
        standard_fmt: str = STANDARD_LOG_FORMAT,
        detailed_fmt: str = DETAILED_LOG_FORMAT,
        datefmt: Optional[str] = None
    ):
        super().__init__(fmt=standard_fmt, datefmt=datefmt)
        self._standard = logging.Formatter(standard_fmt, datefmt)
        self._detailed = logging.Formatter(detailed_fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.ERROR:
            return self._detailed.format(record)
        return self._standard.format(record)


def configure_logging(
    log_file: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root logger for a report run.

    Sets up a console handler and, when log_file is given, a file handler.
    ERROR and CRITICAL messages include the function name and line number
    unless an explicit log_format is passed.

    Args:
        log_file: Optional path to log file. If None, only console logging.
        log_level: Optional log level from CLI argument.
        log_format: Format string overriding the default formatter.

    Returns:
        The configured root logger.
    """
    level = get_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    formatter = logging.Formatter(log_format) if log_format else DetailedErrorFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Keep HTTP connection chatter out of DEBUG runs
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    source = "command-line" if log_level else (
        "environment variable" if os.getenv(LOG_LEVEL_ENV_VAR) else "default"
    )
    logging.debug(f"Logging configured: level={logging.getLevelName(level)} (from {source})")

    return root_logger


def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    """
    Add the --log-level argument to an ArgumentParser.

    Args:
        parser: The ArgumentParser to add the argument to.
    """
    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        metavar='LEVEL',
        help=(
            f"Set logging verbosity level. "
            f"Choices: {', '.join(VALID_LOG_LEVELS)}. "
            f"Can also be set via {LOG_LEVEL_ENV_VAR} environment variable. "
            f"CLI argument takes precedence. Default: {DEFAULT_LOG_LEVEL}"
        )
    )
