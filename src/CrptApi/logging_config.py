"""
Structured Logging Utilities

This module centralizes logging setup for the registry client.  It provides
helpers for masking sensitive fields (document signatures in particular),
emitting JSON log records, and generating correlation identifiers that tie a
submission's rate-limit wait to its HTTP call.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, TextIO

LOGGER_NAME = "CrptApi"

_SENSITIVE_KEYS = {"authorization", "signature", "token", "secret", "password", "api_key", "apikey"}
_MASK = "***masked***"


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Remove secrets from structured payloads prior to logging.

    Args:
        payload: Arbitrary key-value pairs that may contain signatures or
            credentials.

    Returns:
        Copy of the payload where sensitive fields are replaced with
        `***masked***`.

    Examples:
        >>> mask_sensitive_data({"signature": "MIIB...", "status": "ok"})
        {'signature': '***masked***', 'status': 'ok'}
    """
    masked: Dict[str, object] = {}
    for key, value in payload.items():
        if key.lower() in _SENSITIVE_KEYS:
            masked[key] = _MASK
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked


def generate_correlation_id() -> str:
    """Create a short identifier that links related log entries.

    Examples:
        >>> len(generate_correlation_id())
        12
    """
    return uuid.uuid4().hex[:12]


class JSONFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record.

    Structured fields are read from ``record.extra_fields`` (a dict passed via
    ``extra={"extra_fields": {...}}``) plus a ``correlation_id`` attribute
    when present.

    Examples:
        >>> formatter = JSONFormatter()
        >>> isinstance(formatter.format(logging.makeLogRecord({'msg': 'test'})), str)
        True
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a logging record into a JSON line."""
        now = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_obj: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", None),
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_obj.update(extra_fields)
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(log_obj), default=str)


def setup_logging(
    level: str = "INFO",
    *,
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the ``CrptApi`` logger with a single managed handler.

    Calling this repeatedly replaces the previously installed handler rather
    than stacking duplicates.  Records stop propagating to the root logger so
    a host that already configured logging does not print them twice.

    Args:
        level: Logging level name.
        json_output: Emit JSON lines via :class:`JSONFormatter` when True.
        stream: Destination stream; defaults to stderr.

    Returns:
        Configured logger instance scoped to the registry client.

    Examples:
        >>> logger = setup_logging("DEBUG")
        >>> logger.name
        'CrptApi'
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_crpt_managed", False):
            logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler._crpt_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger


__all__ = [
    "JSONFormatter",
    "LOGGER_NAME",
    "generate_correlation_id",
    "mask_sensitive_data",
    "setup_logging",
]
