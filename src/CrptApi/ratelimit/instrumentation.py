"""Rate limiter instrumentation and telemetry helpers.

Limiter events are structured log records on the ``CrptApi.ratelimit``
logger.  The event name travels in ``extra["event"]`` and the remaining
fields in ``extra["extra_fields"]`` so :class:`CrptApi.logging_config.JSONFormatter`
can flatten them into the JSON line.  Telemetry must never break admission,
so emission failures are logged at DEBUG and dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

logger = logging.getLogger("CrptApi.ratelimit")


def _emit_safe(event: str, *, level: int, message: str, fields: Dict[str, Any]) -> None:
    """Emit the event, swallowing telemetry errors."""
    try:
        logger.log(level, message, extra={"event": event, "extra_fields": {"event": event, **fields}})
    except Exception:  # pragma: no cover - telemetry must not raise
        logger.debug("rate limit telemetry emission failed", exc_info=True)


def emit_acquire_event(name: str, *, waited: float, count: int, limit: int) -> None:
    """Record that a caller was admitted after waiting ``waited`` seconds."""
    _emit_safe(
        "ratelimit.acquire",
        level=logging.DEBUG,
        message="Rate limit acquired",
        fields={
            "limiter": name,
            "waited_ms": round(waited * 1000, 3),
            "count": count,
            "limit": limit,
        },
    )


def emit_blocked_event(name: str, *, remaining: float, limit: int) -> None:
    """Record that a caller is about to wait ``remaining`` seconds for the next window."""
    _emit_safe(
        "ratelimit.blocked",
        level=logging.DEBUG,
        message="Rate limit exhausted; waiting for next window",
        fields={
            "limiter": name,
            "remaining_ms": round(remaining * 1000, 3),
            "limit": limit,
        },
    )


def emit_cancelled_event(name: str, *, waited: float, reason: str) -> None:
    """Record that a waiting caller abandoned its wait."""
    _emit_safe(
        "ratelimit.cancelled",
        level=logging.INFO,
        message="Rate limit wait abandoned",
        fields={
            "limiter": name,
            "waited_ms": round(waited * 1000, 3),
            "reason": reason,
        },
    )


__all__ = [
    "emit_acquire_event",
    "emit_blocked_event",
    "emit_cancelled_event",
]
