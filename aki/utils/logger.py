"""JSON log lines on stdout, with image payloads and secrets kept out."""

import logging
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any

PACKAGE_LOGGER = "aki"

# LogRecord attributes that are not caller-supplied `extra` fields
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}

# Field names whose values are never written out
SECRET_FIELDS = ("api_key", "authorization", "secret", "token", "password")

MAX_VALUE_LENGTH = 500


def _is_secret(field: str) -> bool:
    lowered = field.lower()
    return any(marker in lowered for marker in SECRET_FIELDS)


def _clean(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes: {len(value)} bytes>"
    if isinstance(value, dict):
        return {
            str(k): "<redacted>" if _is_secret(str(k)) else _clean(v)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return [_clean(item) for item in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value

    text = value if isinstance(value, str) else str(value)
    if len(text) > MAX_VALUE_LENGTH:
        return text[:MAX_VALUE_LENGTH] + "...[truncated]"
    return text


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra` fields are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
                .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field, value in vars(record).items():
            if field in _RECORD_ATTRS or field.startswith("_"):
                continue
            entry[field] = "<redacted>" if _is_secret(field) else _clean(value)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False)


def _configure_package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package's JSON handler.

    Args:
        name: Logger name (typically __name__)
    """
    _configure_package_logger()
    return logging.getLogger(name)


def key_prefix(secret: str, length: int = 4) -> str:
    """Non-secret prefix of a credential for diagnostics."""
    return f"{secret[:length]}..."
