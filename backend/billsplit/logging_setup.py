from __future__ import annotations

import sys

from loguru import logger

from billsplit.config import Config


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Replace loguru's default sink with one at the configured level.
    A rotating file sink is added when log_file (or BILLSPLIT_LOG_FILE) is set.
    """
    level = (level or Config.LOG_LEVEL).upper()
    log_file = Config.LOG_FILE if log_file is None else log_file

    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(log_file, rotation="1 MB", level="DEBUG")
