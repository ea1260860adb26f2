from __future__ import annotations

import logging
import sys
from typing import Optional

from app.core.config import settings

# third-party clients that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(level: Optional[str] = None) -> None:
    """stdout logging for the import service; level defaults to LOG_LEVEL."""
    root = logging.getLogger()
    if root.handlers:
        return  # uvicorn --reload calls startup again

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )
    root.addHandler(handler)
    root.setLevel((level or settings.LOG_LEVEL).upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
