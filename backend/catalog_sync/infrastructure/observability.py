"""Structured Logging - JSON formatter and setup for sync runs.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (operation, target, record_name, attempt, action, error_code)
      surfaced when present
    - JSON format for the API and CI runs, human-readable for local CLI use

Design Decisions:
    - JSONFormatter over third-party libs: one small class, full control of the keys
    - setup_logging called once per process (FastAPI lifespan or CLI callback);
      repeated calls replace the handler instead of stacking duplicates
"""

import json
import logging
from datetime import datetime, timezone

STRUCTURED_FIELDS: tuple[str, ...] = (
    "operation", "target", "record_name", "attempt", "action",
    "error_code", "path",
)

_HANDLER_NAME = "catalog_sync"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in STRUCTURED_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging for the process."""
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
