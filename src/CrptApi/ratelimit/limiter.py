# === NAVMAP v1 ===
# {
#   "module": "CrptApi.ratelimit.limiter",
#   "purpose": "Thread-safe fixed-window rate limiter with blocking, cancellable acquire.",
#   "sections": [
#     {
#       "id": "windowsnapshot",
#       "name": "WindowSnapshot",
#       "anchor": "class-windowsnapshot",
#       "kind": "class"
#     },
#     {
#       "id": "fixedwindowratelimiter",
#       "name": "FixedWindowRateLimiter",
#       "anchor": "class-fixedwindowratelimiter",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Thread-safe fixed-window rate limiter with blocking, cancellable acquire.

The registry accepts at most ``limit`` requests per window.  The limiter
counts admissions in the current window and resets the count once the window
has elapsed.  Callers that find the window full are suspended until the next
boundary; exhaustion is resolved by waiting and is never reported as an error.

Design:
- **Explicit loop**: check, release the lock, wait, re-check; the stack stays
  flat no matter how long a caller is parked.
- **Short critical section**: only the check-and-update of the window runs
  under the lock; waiting happens outside it so other callers keep making
  progress.
- **Cooperative cancellation**: a waiting caller wakes as soon as its
  :class:`~CrptApi.cancellation.CancellationToken` is cancelled or its
  timeout elapses, and leaves the window count untouched.
- **No FIFO guarantee**: whichever waiter re-checks first after a boundary
  is admitted first.

Example:
    >>> from pyrate_limiter import Duration
    >>> limiter = FixedWindowRateLimiter(5, Duration.SECOND)
    >>> waited = limiter.acquire()  # seconds spent waiting
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from CrptApi.cancellation import CancellationToken
from CrptApi.errors import AcquireCancelled, AcquireTimeout, ConfigurationError
from CrptApi.ratelimit.config import IntervalLike, RateSpec, interval_to_ms
from CrptApi.ratelimit.instrumentation import (
    emit_acquire_event,
    emit_blocked_event,
    emit_cancelled_event,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], None]


@dataclass(frozen=True)
class WindowSnapshot:
    """Point-in-time copy of the limiter's window state."""

    window_start: float
    count: int
    limit: int
    interval: float

    @property
    def available(self) -> int:
        """Admissions still available in the current window."""
        return max(0, self.limit - self.count)


class FixedWindowRateLimiter:
    """Admit at most ``limit`` operations per ``interval``.

    Attributes:
        _limit: Admissions allowed per window
        _interval: Window length in seconds
        _window_start: Clock reading at which the current window opened
        _count: Admissions granted in the current window
    """

    def __init__(
        self,
        limit: int,
        interval: IntervalLike,
        *,
        name: str = "crpt",
        clock: Clock = time.monotonic,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            limit: Admissions allowed per window; must be positive.
            interval: Window length as a ``pyrate_limiter.Duration`` member,
                ``timedelta``, or seconds.
            name: Label used in log events.
            clock: Monotonic time source in seconds.
            sleep: Replacement suspension function.  When omitted, waiting
                callers block on their cancellation token (or ``time.sleep``
                without one); when supplied it is called instead and the
                token is only checked between waits.

        Raises:
            ConfigurationError: If ``limit`` or ``interval`` is not positive.
        """
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ConfigurationError(f"Rate limit must be an integer, got: {limit!r}")
        if limit <= 0:
            raise ConfigurationError(f"Rate limit must be positive, got: {limit}")

        self._name = name
        self._limit = limit
        self._interval = interval_to_ms(interval) / 1000
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._window_start = clock()
        self._count = 0

        logger.debug(
            "Rate limiter initialized",
            extra={"limiter": name, "limit": limit, "interval": self._interval},
        )

    @classmethod
    def from_spec(cls, spec: RateSpec, **kwargs) -> "FixedWindowRateLimiter":
        """Build a limiter from a parsed :class:`RateSpec`."""
        return cls(spec.limit, spec.interval, **kwargs)

    @property
    def name(self) -> str:
        return self._name

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def interval(self) -> float:
        """Window length in seconds."""
        return self._interval

    def acquire(
        self,
        *,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> float:
        """Block until one unit of capacity has been reserved.

        Args:
            timeout: Maximum seconds to wait for capacity; ``None`` waits
                indefinitely.
            cancel_token: Token whose cancellation abandons the wait.

        Returns:
            Seconds spent waiting before admission.

        Raises:
            AcquireCancelled: If ``cancel_token`` was cancelled before admission.
            AcquireTimeout: If ``timeout`` elapsed before admission.
            ValueError: If ``timeout`` is negative.
        """
        if timeout is not None and timeout < 0:
            raise ValueError(f"Timeout must be non-negative, got: {timeout}")

        started = self._clock()
        deadline = None if timeout is None else started + timeout

        while True:
            if cancel_token is not None and cancel_token.is_cancelled():
                waited = self._clock() - started
                emit_cancelled_event(self._name, waited=waited, reason="cancelled")
                raise AcquireCancelled(waited=waited)

            with self._lock:
                if self._admit_locked(self._clock()):
                    count = self._count
                    break
                window_end = self._window_start + self._interval

            # Time passes between releasing the lock and reading the clock
            # again; a boundary crossed in between means re-check, not sleep.
            now = self._clock()
            remaining = window_end - now
            if remaining <= 0:
                continue

            if deadline is not None:
                budget = deadline - now
                if budget <= 0:
                    waited = now - started
                    emit_cancelled_event(self._name, waited=waited, reason="timeout")
                    raise AcquireTimeout(
                        f"no rate limit capacity within {timeout}s", waited=waited
                    )
                remaining = min(remaining, budget)

            emit_blocked_event(self._name, remaining=remaining, limit=self._limit)
            self._wait(remaining, cancel_token)

        waited = self._clock() - started
        emit_acquire_event(self._name, waited=waited, count=count, limit=self._limit)
        return waited

    def try_acquire(self) -> bool:
        """Reserve capacity only if it is available right now."""
        with self._lock:
            admitted = self._admit_locked(self._clock())
            count = self._count
        if admitted:
            emit_acquire_event(self._name, waited=0.0, count=count, limit=self._limit)
        return admitted

    def snapshot(self) -> WindowSnapshot:
        """Return a copy of the window state as of now."""
        with self._lock:
            self._roll_window_locked(self._clock())
            return WindowSnapshot(
                window_start=self._window_start,
                count=self._count,
                limit=self._limit,
                interval=self._interval,
            )

    def _roll_window_locked(self, now: float) -> None:
        elapsed = now - self._window_start
        if elapsed < 0:
            # Clock moved backwards: keep the count, restart the window here.
            self._window_start = now
        elif elapsed >= self._interval:
            self._window_start = now
            self._count = 0

    def _admit_locked(self, now: float) -> bool:
        self._roll_window_locked(now)
        if self._count < self._limit:
            self._count += 1
            return True
        return False

    def _wait(self, seconds: float, cancel_token: Optional[CancellationToken]) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        elif cancel_token is not None:
            cancel_token.wait(seconds)
        else:
            time.sleep(seconds)

    def __repr__(self) -> str:
        return (
            f"FixedWindowRateLimiter(name={self._name!r}, limit={self._limit}, "
            f"interval={self._interval})"
        )


__all__ = ["FixedWindowRateLimiter", "WindowSnapshot"]
