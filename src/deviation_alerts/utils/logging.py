# src/deviation_alerts/utils/logging.py

import sys
from typing import IO, Optional

from loguru import logger as log

LOG_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS!UTC}Z - {level} - {message}"


def setup_logging(level: str = "INFO", sink: Optional[IO[str]] = None) -> int:
    """
    Replaces loguru's default handler with a single plain-text sink.
    Returns the handler id so callers (and tests) can remove it again.
    """
    log.remove()
    return log.add(
        sink or sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        colorize=False,
        backtrace=False,
        diagnose=False,
    )
