# === NAVMAP v1 ===
# {
#   "module": "CrptApi.cancellation",
#   "purpose": "Wake callers parked behind the rate limiter so they can give up",
#   "sections": [
#     {"id": "token", "name": "CancellationToken", "anchor": "class-cancellationtoken", "kind": "class"},
#     {"id": "group", "name": "CancellationTokenGroup", "anchor": "class-cancellationtokengroup", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Cooperative cancellation for callers waiting on rate-limit capacity.

A submission can sit behind :class:`~CrptApi.ratelimit.FixedWindowRateLimiter`
for a whole window.  The limiter waits on the caller's
:class:`CancellationToken`, so cancelling the token from another thread wakes
the caller at once.  :class:`CancellationTokenGroup` is the submitter's
registry of tokens currently waiting; ``DocumentSubmitter.close`` cancels the
whole group.
"""

from __future__ import annotations

import threading
from typing import Optional, Set


class CancellationToken:
    """One-shot, thread-safe cancellation flag that can be waited on.

    Examples:
        >>> token = CancellationToken()
        >>> token.wait(0.01)
        False
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation and wake every thread blocked in :meth:`wait`."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float]) -> bool:
        """Block for up to ``timeout`` seconds or until cancelled.

        Returns:
            True if the token was cancelled, False if the timeout elapsed.
        """
        return self._event.wait(timeout)


class CancellationTokenGroup:
    """Tokens of callers currently waiting for capacity.

    Once :meth:`cancel_all` has run the group stays cancelled: tokens added
    afterwards are cancelled on entry, so a closed submitter never admits
    new work.
    """

    def __init__(self) -> None:
        self._tokens: Set[CancellationToken] = set()
        self._lock = threading.Lock()
        self._cancelled = False

    def add_token(self, token: CancellationToken) -> None:
        with self._lock:
            if self._cancelled:
                token.cancel()
                return
            self._tokens.add(token)

    def remove_token(self, token: CancellationToken) -> None:
        """Forget ``token``; unknown tokens are ignored."""
        with self._lock:
            self._tokens.discard(token)

    def cancel_all(self) -> None:
        """Cancel every registered token and every token added later."""
        with self._lock:
            self._cancelled = True
            tokens, self._tokens = self._tokens, set()
        for token in tokens:
            token.cancel()

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled


__all__ = ["CancellationToken", "CancellationTokenGroup"]
