"""Logging setup driven by the registry settings."""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from rostersync.core.config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Attach a stream handler to the ``rostersync`` logger.

    Calling it again replaces the previously installed handler.
    """
    settings = settings or get_settings()
    logger = logging.getLogger("rostersync")
    for handler in list(logger.handlers):
        if getattr(handler, "_rostersync", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._rostersync = True  # type: ignore[attr-defined]
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger


__all__ = ["JsonFormatter", "configure_logging"]
