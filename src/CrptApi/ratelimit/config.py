# === NAVMAP v1 ===
# {
#   "module": "CrptApi.ratelimit.config",
#   "purpose": "RateSpec parsing and window normalization for rate-limiting configuration.",
#   "sections": [
#     {
#       "id": "ratespec",
#       "name": "RateSpec",
#       "anchor": "class-ratespec",
#       "kind": "class"
#     },
#     {
#       "id": "interval-to-ms",
#       "name": "interval_to_ms",
#       "anchor": "function-interval-to-ms",
#       "kind": "function"
#     },
#     {
#       "id": "parse-rate-string",
#       "name": "parse_rate_string",
#       "anchor": "function-parse-rate-string",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""RateSpec parsing and window normalization for rate-limiting configuration.

The registry allows a fixed number of requests per time unit.  Operators
express that either as a human-readable string (``"5/second"``) or as a unit
plus a limit, where the unit may be a :class:`pyrate_limiter.Duration`
member, a :class:`datetime.timedelta`, or a number of seconds.  Every form is
normalized to a :class:`RateSpec` holding the limit and the window length in
milliseconds.

Example:
    >>> from pyrate_limiter import Duration
    >>> from CrptApi.ratelimit.config import RateSpec, parse_rate_string
    >>> parse_rate_string("5/second")
    RateSpec(limit=5, interval_ms=1000)
    >>> RateSpec.per(Duration.MINUTE, 300)
    RateSpec(limit=300, interval_ms=60000)
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Union

from pyrate_limiter import Duration

from CrptApi.errors import ConfigurationError

# ============================================================================
# Constants
# ============================================================================

DURATION_MS = {
    "second": int(Duration.SECOND),
    "minute": int(Duration.MINUTE),
    "hour": int(Duration.HOUR),
    "day": int(Duration.DAY),
}

DURATION_ALIASES = {
    "s": "second",
    "sec": "second",
    "m": "minute",
    "min": "minute",
    "h": "hour",
    "hr": "hour",
    "d": "day",
}

_RATE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+\s*)?([A-Za-z]+)\s*$")

IntervalLike = Union[Duration, timedelta, int, float]

# Absorbs float error in products such as 0.1 * 1000.
_MS_TOLERANCE = 1e-6


# ============================================================================
# Data Models
# ============================================================================


@dataclass(frozen=True)
class RateSpec:
    """Normalized fixed-window rate.

    Attributes:
        limit: Number of admissions allowed per window
        interval_ms: Window length in milliseconds
    """

    limit: int
    interval_ms: int

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ConfigurationError(f"Rate limit must be positive, got: {self.limit}")
        if self.interval_ms <= 0:
            raise ConfigurationError(f"Rate window must be positive, got: {self.interval_ms}ms")

    @classmethod
    def per(cls, unit: IntervalLike, limit: int) -> "RateSpec":
        """Build a spec admitting ``limit`` requests per one ``unit``."""
        return cls(limit=limit, interval_ms=interval_to_ms(unit))

    @property
    def interval(self) -> float:
        """Window length in seconds."""
        return self.interval_ms / 1000

    @property
    def rps(self) -> float:
        """Requests per second."""
        return (self.limit * 1000) / self.interval_ms

    def __str__(self) -> str:
        for name, ms in DURATION_MS.items():
            if self.interval_ms == ms:
                return f"{self.limit}/{name}"
        return f"{self.limit}/{self.interval_ms}ms"

    def __repr__(self) -> str:
        return f"RateSpec(limit={self.limit}, interval_ms={self.interval_ms})"


# ============================================================================
# Parsing
# ============================================================================


def interval_to_ms(unit: IntervalLike) -> int:
    """Normalize a window length to whole milliseconds.

    Args:
        unit: ``Duration`` member, ``timedelta``, or seconds as a number

    Returns:
        Window length in milliseconds

    Raises:
        ConfigurationError: If the interval is not positive, not a whole
            number of milliseconds, or not a supported type
    """
    if isinstance(unit, Duration):
        interval_ms = float(int(unit))
    elif isinstance(unit, timedelta):
        interval_ms = unit / timedelta(milliseconds=1)
    elif isinstance(unit, (int, float)) and not isinstance(unit, bool):
        interval_ms = unit * 1000
    else:
        raise ConfigurationError(f"Unsupported rate window: {unit!r}")

    if interval_ms <= 0:
        raise ConfigurationError(f"Rate window must be positive, got: {unit!r}")
    whole_ms = round(interval_ms)
    if abs(interval_ms - whole_ms) > _MS_TOLERANCE:
        raise ConfigurationError(
            f"Rate window must be a whole number of milliseconds, got: {unit!r}"
        )
    return whole_ms


def parse_rate_string(spec: str) -> RateSpec:
    """Parse a human-readable rate string into a RateSpec.

    Format: ``"{limit}/{duration}"`` or ``"{limit}/{count}{duration}"``.

    Examples:
        "5/second"   → RateSpec(limit=5, interval_ms=1000)
        "300/minute" → RateSpec(limit=300, interval_ms=60000)
        "10/15s"     → RateSpec(limit=10, interval_ms=15000)

    Raises:
        ConfigurationError: If the string is malformed or the limit is not positive
    """
    match = _RATE_PATTERN.match(spec or "")
    if not match:
        raise ConfigurationError(
            f"Invalid rate spec: {spec!r}. Expected format: '5/second', '300/minute', '10/15s'"
        )

    limit_str, multiplier_str, duration_str = match.groups()
    duration_str = duration_str.lower()
    duration_str = DURATION_ALIASES.get(duration_str, duration_str)
    if duration_str.endswith("s") and duration_str[:-1] in DURATION_MS:
        duration_str = duration_str[:-1]
    if duration_str not in DURATION_MS:
        raise ConfigurationError(
            f"Unknown duration: {duration_str!r}. Supported: {list(DURATION_MS.keys())}"
        )

    multiplier = int(multiplier_str) if multiplier_str else 1
    return RateSpec(limit=int(limit_str), interval_ms=DURATION_MS[duration_str] * multiplier)


__all__ = [
    "DURATION_MS",
    "IntervalLike",
    "RateSpec",
    "interval_to_ms",
    "parse_rate_string",
]
