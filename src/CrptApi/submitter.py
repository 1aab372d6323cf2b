# === NAVMAP v1 ===
# {
#   "module": "CrptApi.submitter",
#   "purpose": "Rate-limited document submission to the registry.",
#   "sections": [
#     {"id": "result", "name": "SubmissionResult", "anchor": "class-submissionresult", "kind": "class"},
#     {"id": "request", "name": "build_request", "anchor": "function-build-request", "kind": "function"},
#     {"id": "submitter", "name": "DocumentSubmitter", "anchor": "class-documentsubmitter", "kind": "class"}
#   ]
# }
# === /NAVMAP ===

"""Rate-limited document submission to the registry.

:class:`DocumentSubmitter` pairs one :class:`FixedWindowRateLimiter` with one
shared HTTPX client.  Every ``submit`` call first waits for rate-limit
capacity, then serializes the document and performs exactly one POST.  Network
failures, requests that cannot be built, a closed client and non-2xx
statuses all come back as a failed :class:`SubmissionResult`.  Nothing is
retried, so one admission always maps to one attempt.

Example:
    >>> from CrptApi import DocumentSubmitter, sample_document
    >>> with DocumentSubmitter.from_settings() as submitter:
    ...     result = submitter.submit(sample_document(), "signature")
"""

from __future__ import annotations

import enum
import logging
import time
from concurrent import futures
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import httpx

from CrptApi.cancellation import CancellationToken, CancellationTokenGroup
from CrptApi.documents import Document
from CrptApi.errors import AcquireCancelled, SubmissionFailure
from CrptApi.logging_config import generate_correlation_id
from CrptApi.network.client import create_http_client
from CrptApi.network.policy import DEFAULT_API_URL, JSON_CONTENT_TYPE, SIGNATURE_HEADER
from CrptApi.ratelimit.limiter import FixedWindowRateLimiter
from CrptApi.settings import CrptApiSettings, get_settings

logger = logging.getLogger(__name__)

RequestBuilder = Callable[[httpx.Client, str, bytes, str], httpx.Request]


class SubmissionOutcome(str, enum.Enum):
    sent = "sent"
    failed = "failed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submission attempt."""

    outcome: SubmissionOutcome
    doc_id: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None
    waited: float = 0.0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is SubmissionOutcome.sent

    def raise_for_failure(self) -> None:
        """Raise :class:`SubmissionFailure` unless the registry accepted the document."""
        if self.ok:
            return
        detail = self.error or f"HTTP {self.status_code}"
        raise SubmissionFailure(
            f"Submission of {self.doc_id or 'document'} {self.outcome.value}: {detail}",
            status_code=self.status_code,
        )


def build_request(client: httpx.Client, url: str, body: bytes, signature: str) -> httpx.Request:
    """Build the POST request carrying ``body`` and the detached ``signature``."""
    return client.build_request(
        "POST",
        url,
        content=body,
        headers={"Content-Type": JSON_CONTENT_TYPE, SIGNATURE_HEADER: signature},
    )


class DocumentSubmitter:
    """Thread-safe, rate-limited client for ``/lk/documents/create``."""

    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        *,
        client: Optional[httpx.Client] = None,
        url: str = DEFAULT_API_URL,
        request_builder: RequestBuilder = build_request,
        acquire_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the submitter.

        Args:
            limiter: Rate limiter shared by every submission made through this object.
            client: HTTP client to use; a client built from process settings is
                created (and later closed by :meth:`close`) when omitted.
            url: Document creation endpoint.
            request_builder: Hook that turns the serialized body and signature
                into an ``httpx.Request``.
            acquire_timeout: Default maximum wait for rate-limit capacity.
        """
        self._limiter = limiter
        self._owns_client = client is None
        self._client = client if client is not None else create_http_client()
        self._url = url
        self._request_builder = request_builder
        self._acquire_timeout = acquire_timeout
        self._waiters = CancellationTokenGroup()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[CrptApiSettings] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "DocumentSubmitter":
        """Build limiter and HTTP client from configuration."""
        settings = settings or get_settings()
        limiter = FixedWindowRateLimiter.from_spec(settings.rate_spec())
        submitter = cls(
            limiter,
            client=create_http_client(settings, transport=transport),
            url=settings.api_url,
            acquire_timeout=settings.acquire_timeout,
        )
        submitter._owns_client = True
        return submitter

    @property
    def limiter(self) -> FixedWindowRateLimiter:
        return self._limiter

    @property
    def closed(self) -> bool:
        return self._waiters.cancelled

    def submit(
        self,
        document: Document,
        signature: str,
        *,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SubmissionResult:
        """Wait for rate-limit capacity, then POST ``document`` once.

        Args:
            document: Validated document to create.
            signature: Detached signature sent with the document.
            timeout: Maximum seconds to wait for capacity; falls back to the
                submitter's ``acquire_timeout``.
            cancel_token: Token that abandons the wait when cancelled.  It is
                also cancelled by :meth:`close` while the wait is in progress.

        Returns:
            SubmissionResult describing the single HTTP attempt.

        Raises:
            AcquireCancelled: If the wait was cancelled or timed out, or the
                submitter is closed.  No request is sent in that case.
        """
        correlation_id = generate_correlation_id()
        token = cancel_token or CancellationToken()
        self._waiters.add_token(token)
        try:
            waited = self._limiter.acquire(
                timeout=self._acquire_timeout if timeout is None else timeout,
                cancel_token=token,
            )
        finally:
            self._waiters.remove_token(token)

        body = document.to_json_bytes()
        started = time.perf_counter()
        try:
            request = self._request_builder(self._client, self._url, body, signature)
            response = self._client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError, RuntimeError) as exc:
            # RuntimeError: client already closed.  UnicodeEncodeError: non-ASCII header.
            elapsed = time.perf_counter() - started
            logger.warning(
                "Document submission failed: %s",
                exc,
                extra={
                    "correlation_id": correlation_id,
                    "extra_fields": {"doc_id": document.doc_id, "error": type(exc).__name__},
                },
            )
            return SubmissionResult(
                outcome=SubmissionOutcome.failed,
                doc_id=document.doc_id,
                error=str(exc) or type(exc).__name__,
                waited=waited,
                elapsed=elapsed,
            )

        elapsed = time.perf_counter() - started
        outcome = SubmissionOutcome.sent if response.is_success else SubmissionOutcome.failed
        logger.log(
            logging.INFO if response.is_success else logging.WARNING,
            "Document %s submitted: HTTP %s",
            document.doc_id,
            response.status_code,
            extra={
                "correlation_id": correlation_id,
                "extra_fields": {
                    "doc_id": document.doc_id,
                    "status": response.status_code,
                    "waited_ms": round(waited * 1000, 3),
                    "elapsed_ms": round(elapsed * 1000, 3),
                },
            },
        )
        return SubmissionResult(
            outcome=outcome,
            doc_id=document.doc_id,
            status_code=response.status_code,
            error=None if response.is_success else response.reason_phrase or None,
            waited=waited,
            elapsed=elapsed,
        )

    def submit_many(
        self,
        items: Iterable[Tuple[Document, str]],
        *,
        workers: int = 4,
        timeout: Optional[float] = None,
    ) -> List[SubmissionResult]:
        """Submit ``(document, signature)`` pairs concurrently.

        All workers share this submitter's limiter, so concurrency never
        raises the admission rate.  Results are returned in input order;
        cancelled waits are reported as ``cancelled`` results.
        """
        pairs: Sequence[Tuple[Document, str]] = list(items)
        if workers <= 1 or len(pairs) <= 1:
            return [self._submit_reporting_cancel(doc, sig, timeout) for doc, sig in pairs]

        with futures.ThreadPoolExecutor(
            max_workers=min(workers, len(pairs)), thread_name_prefix="crpt-submit"
        ) as executor:
            pending = [
                executor.submit(self._submit_reporting_cancel, doc, sig, timeout)
                for doc, sig in pairs
            ]
            return [future.result() for future in pending]

    def _submit_reporting_cancel(
        self, document: Document, signature: str, timeout: Optional[float]
    ) -> SubmissionResult:
        try:
            return self.submit(document, signature, timeout=timeout)
        except AcquireCancelled as exc:
            return SubmissionResult(
                outcome=SubmissionOutcome.cancelled,
                doc_id=document.doc_id,
                error=str(exc),
                waited=exc.waited,
            )

    def close(self) -> None:
        """Cancel callers still waiting for capacity and release the HTTP client.

        Safe to call multiple times.
        """
        self._waiters.cancel_all()
        if self._owns_client and not self._client.is_closed:
            self._client.close()
            logger.debug("HTTP client closed")

    def __enter__(self) -> "DocumentSubmitter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "DocumentSubmitter",
    "RequestBuilder",
    "SubmissionOutcome",
    "SubmissionResult",
    "build_request",
]
