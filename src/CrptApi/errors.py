"""Exception hierarchy shared by the rate limiter, submitter, and CLI.

Callers typically react to the high-level categories: configuration mistakes
are fatal at construction, cancellation while waiting for rate-limit capacity
is a cooperative shutdown signal, and submission failures describe a single
HTTP attempt that did not succeed.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "CrptApiError",
    "ConfigurationError",
    "RateLimitError",
    "AcquireCancelled",
    "AcquireTimeout",
    "DocumentError",
    "SubmissionFailure",
]


class CrptApiError(RuntimeError):
    """Base exception for registry client failures."""


class ConfigurationError(CrptApiError):
    """Raised when limiter parameters, rate strings, or settings are invalid."""


class RateLimitError(CrptApiError):
    """Base class for rate limiter outcomes other than admission."""


class AcquireCancelled(RateLimitError):
    """Raised when a caller abandons its wait for rate-limit capacity.

    No capacity is reserved for the cancelled caller.
    """

    def __init__(self, message: str = "rate limit wait cancelled", *, waited: float = 0.0) -> None:
        super().__init__(message)
        self.waited = waited


class AcquireTimeout(AcquireCancelled):
    """Raised when ``timeout`` elapses before capacity became available."""


class DocumentError(CrptApiError):
    """Raised when a document payload cannot be loaded or validated."""


class SubmissionFailure(CrptApiError):
    """Raised by :meth:`SubmissionResult.raise_for_failure` for failed attempts."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# === NAVMAP v1 ===
# {
#   "module": "CrptApi.errors",
#   "purpose": "Define the exception hierarchy used by the limiter, submitter, and CLI",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "ratelimit", "name": "Rate Limit Outcomes", "anchor": "RLT", "kind": "api"},
#     {"id": "submission", "name": "Document & Submission Errors", "anchor": "SUB", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
