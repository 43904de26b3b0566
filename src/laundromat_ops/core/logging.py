"""Loguru logging configuration for the operational CLI.

Plain-text, timestamped lines go to stderr.  Records bound with
``json_output=True`` are routed to a separate serialized stderr sink instead
of the text one.  When ``log_dir`` is given, text lines are also written to a
rotating ``laundromat-ops.log`` file.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
_LOG_FILE_NAME = "laundromat-ops.log"


def _wants_json(record: dict) -> bool:
    return bool(record["extra"].get("json_output", False))


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Replace Loguru's default handler with this project's sinks.

    Args:
        log_level: Minimum log level to emit, case-insensitive.
        log_dir: Optional directory for the log file.  Created if missing;
            the file rotates every 24 hours and is kept 7 days.
    """
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, filter=lambda record: not _wants_json(record))
    logger.add(sys.stderr, level=level, serialize=True, filter=_wants_json)

    if not log_dir:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / _LOG_FILE_NAME,
        level=level,
        format=_LOG_FORMAT,
        filter=lambda record: not _wants_json(record),
        rotation="24h",
        retention="7 days",
    )
