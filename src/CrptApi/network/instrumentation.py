"""HTTP network layer instrumentation and telemetry.

Logs one ``net.request`` record per registry call, capturing method, redacted
URL, status, and elapsed time.
"""

import logging
import time
from typing import Any
from urllib.parse import urlparse, urlunparse

logger = logging.getLogger("CrptApi.network")


def create_http_event_hooks() -> dict:
    """Create HTTPX event hooks for telemetry emission.

    Returns:
        Dict with 'request' and 'response' hooks for HTTPX client

    Usage:
        >>> import httpx
        >>> hooks = create_http_event_hooks()
        >>> client = httpx.Client(event_hooks=hooks)
    """
    request_start_time: dict[int, float] = {}

    def on_request(request: Any) -> None:
        request_start_time[id(request)] = time.perf_counter()

    def on_response(response: Any) -> None:
        start_time = request_start_time.pop(id(response.request), None)
        if start_time is None:
            return

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        try:
            payload = {
                "event": "net.request",
                "method": response.request.method,
                "url_redacted": _redact_url(str(response.request.url)),
                "host": response.request.url.host or "unknown",
                "status": response.status_code,
                "elapsed_ms": round(elapsed_ms, 3),
            }
            logger.info("HTTP %s %s", payload["method"], payload["status"], extra={"extra_fields": payload})
        except Exception:  # pragma: no cover - telemetry must not raise
            logger.debug("HTTP telemetry emission failed", exc_info=True)

    return {
        "request": [on_request],
        "response": [on_response],
    }


def _redact_url(url: str) -> str:
    """Keep only scheme, host, and path; drop query strings and fragments."""
    parsed = urlparse(url)
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, "", "", ""))


__all__ = ["create_http_event_hooks"]
