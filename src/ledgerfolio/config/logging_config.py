"""Logging configuration."""

import logging
import sys
from typing import Optional

from ledgerfolio.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty at INFO; ledger events are logged by our own modules
_QUIET_LOGGERS = ("sqlalchemy.engine", "yfinance", "peewee", "urllib3", "multipart")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging to stdout; `level` overrides the configured one."""
    name = (level or get_settings().log_level).upper()

    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
