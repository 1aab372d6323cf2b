# === NAVMAP v1 ===
# {
#   "module": "CrptApi.ratelimit.__init__",
#   "purpose": "Rate-limiting subsystem: fixed-window admission control for registry requests.",
#   "sections": []
# }
# === /NAVMAP ===

"""Rate-limiting subsystem: fixed-window admission control for registry requests.

Modules:
- config: RateSpec parsing and window normalization
- limiter: FixedWindowRateLimiter with blocking, cancellable acquire()
- instrumentation: Rate-limit event telemetry

Example:
    >>> from CrptApi.ratelimit import FixedWindowRateLimiter, parse_rate_string
    >>> limiter = FixedWindowRateLimiter.from_spec(parse_rate_string("5/second"))
    >>> waited = limiter.acquire()
"""

from CrptApi.ratelimit.config import (
    RateSpec,
    interval_to_ms,
    parse_rate_string,
)
from CrptApi.ratelimit.instrumentation import (
    emit_acquire_event,
    emit_blocked_event,
    emit_cancelled_event,
)
from CrptApi.ratelimit.limiter import FixedWindowRateLimiter, WindowSnapshot

__all__ = [
    # Config
    "RateSpec",
    "interval_to_ms",
    "parse_rate_string",
    # Limiter
    "FixedWindowRateLimiter",
    "WindowSnapshot",
    # Instrumentation
    "emit_acquire_event",
    "emit_blocked_event",
    "emit_cancelled_event",
]
