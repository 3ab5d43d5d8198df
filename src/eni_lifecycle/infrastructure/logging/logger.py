"""Logging setup: stdlib loggers rendered through structlog."""

import logging
import os
import sys
from typing import Optional

import structlog

ROOT_LOGGER_NAME = "eni_lifecycle"

_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def get_logger(name: str) -> logging.Logger:
    """Get a stdlib logger; records are formatted by the handlers from setup_logging."""
    return logging.getLogger(name)


def setup_logging(
    log_level: str = "INFO",
    log_destination: str = "stdout",
    log_dir: Optional[str] = None,
    log_filename: str = "eni_lifecycle.log",
) -> logging.Logger:
    """
    Set up structured logging for the package.

    :param log_level: Logging level (e.g., DEBUG, INFO, WARNING, ERROR).
    :param log_destination: Where to send logs ("file", "stdout", or "both").
    :param log_dir: Directory for the log file when writing to a file.
    :param log_filename: Name of the log file.
    :return: The package root logger.
    """
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    handlers: list[logging.Handler] = []
    if log_destination in ("stdout", "both"):
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_destination in ("file", "both"):
        log_dir = log_dir or os.path.join(".", "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, log_filename)))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return root
