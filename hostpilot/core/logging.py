import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from hostpilot.core.config import settings

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Chatty at INFO: SQL echo, urllib3 connection pool
QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3")


def setup_logging(level_name: Optional[str] = None) -> None:
    """
    Configure the root logger for the web app and the registration CLI.

    LOG_FORMAT=json emits one JSON object per line, with any extra={...}
    fields (booking_id, event_index, request_id) as top-level keys.
    """
    level_name = (level_name or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplication
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter(JSON_FIELDS, json_ensure_ascii=False))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
