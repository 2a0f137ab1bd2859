from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..middlewares import principal_ctx_var, request_id_ctx_var

# Libraries that would otherwise repeat what RequestIdMiddleware already logs.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def _context() -> dict[str, Any]:
    context = {"request_id": request_id_ctx_var.get(), "principal": principal_ctx_var.get()}
    return {key: value for key, value in context.items() if value}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record; money and dates in ``extra_data`` are rendered with ``str``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(),
        }
        extra_data = getattr(record, "extra_data", None)
        if isinstance(extra_data, Mapping):
            entry.update(extra_data)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, separators=(",", ":"), default=str, ensure_ascii=False)


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))
