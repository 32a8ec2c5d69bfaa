"""Logging configuration using loguru.

Every record carries an ``agent`` extra ("-" outside an agent).  Agents log
through ``agent_logger(agent_id)`` so a single multi-agent process can be
read per agent.  Records from stdlib loggers (boto3, botocore, anyio) are
forwarded into loguru.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

from loguru import logger

NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[agent]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _StdlibForwarder(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so the call-site is the library's
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def agent_logger(agent_id: str):
    """A logger whose records are tagged with ``agent_id``."""
    return logger.bind(agent=agent_id)


def setup_logging(level: str = "INFO", *, serialize: bool = False, quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """Make loguru the only sink, writing to stderr.

    ``serialize`` switches to one JSON object per line.  Loggers named in
    ``quiet`` are raised to WARNING.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"agent": "-"})
    logger.add(sys.stderr, level=level, format=_FORMAT, serialize=serialize)

    logging.basicConfig(handlers=[_StdlibForwarder()], level=0, force=True)
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured (level={}, serialize={})", level, serialize)
