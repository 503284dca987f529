"""JSON logging for engine diagnostics."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

_RESERVED = {"timestamp", "level", "logger", "message"}


class JsonFormatter(logging.Formatter):
    """Renders one JSON object per record; ``fields`` passed via ``extra`` are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload.update({key: value for key, value in fields.items() if key not in _RESERVED})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_event(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Logs ``message`` with structured ``fields`` picked up by ``JsonFormatter``."""
    logger.log(level, message, extra={"fields": fields})
