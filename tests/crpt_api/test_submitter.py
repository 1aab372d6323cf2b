"""Tests for the rate-limited document submitter against a mock registry."""

from __future__ import annotations

import json
import threading
import time

import httpx
import pytest

from CrptApi.cancellation import CancellationToken
from CrptApi.documents import sample_document
from CrptApi.errors import AcquireCancelled, AcquireTimeout, SubmissionFailure
from CrptApi.network import DEFAULT_API_URL, create_http_client
from CrptApi.ratelimit import FixedWindowRateLimiter
from CrptApi.settings import load_settings
from CrptApi.submitter import DocumentSubmitter, SubmissionOutcome, build_request


def _submitter(transport: httpx.MockTransport, limiter: FixedWindowRateLimiter) -> DocumentSubmitter:
    client = httpx.Client(transport=transport)
    return DocumentSubmitter(limiter, client=client)


def test_submit_posts_json_document_with_signature(registry_transport, recorded_requests):
    submitter = _submitter(registry_transport, FixedWindowRateLimiter(5, 1.0))

    result = submitter.submit(sample_document(), "detached-signature")

    assert result.ok
    assert result.outcome is SubmissionOutcome.sent
    assert result.status_code == 200
    assert result.doc_id == "sample-doc-0001"

    (request,) = recorded_requests
    assert request.method == "POST"
    assert str(request.url) == DEFAULT_API_URL
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Signature"] == "detached-signature"
    assert request.content == sample_document().to_json_bytes()
    assert json.loads(request.content)["doc_type"] == "LP_INTRODUCE_GOODS"


def test_submit_consumes_one_admission_per_attempt(registry_transport, fake_clock):
    limiter = FixedWindowRateLimiter(2, 1.0, clock=fake_clock, sleep=fake_clock.sleep)
    submitter = _submitter(registry_transport, limiter)

    for _ in range(3):
        submitter.submit(sample_document(), "sig")

    assert fake_clock.sleeps == [1.0]
    assert limiter.snapshot().count == 1


def test_non_success_status_is_a_failed_result():
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "bad"}))
    submitter = _submitter(transport, FixedWindowRateLimiter(5, 1.0))

    result = submitter.submit(sample_document(), "sig")

    assert not result.ok
    assert result.outcome is SubmissionOutcome.failed
    assert result.status_code == 400
    with pytest.raises(SubmissionFailure) as excinfo:
        result.raise_for_failure()
    assert excinfo.value.status_code == 400


def test_network_error_is_reported_not_retried():
    calls = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    limiter = FixedWindowRateLimiter(5, 1.0)
    submitter = _submitter(httpx.MockTransport(_handler), limiter)

    result = submitter.submit(sample_document(), "sig")

    assert result.outcome is SubmissionOutcome.failed
    assert result.status_code is None
    assert "connection refused" in result.error
    assert len(calls) == 1
    assert limiter.snapshot().count == 1


def test_non_ascii_signature_is_a_failed_result(registry_transport, recorded_requests):
    limiter = FixedWindowRateLimiter(5, 1.0)
    submitter = _submitter(registry_transport, limiter)

    result = submitter.submit(sample_document(), "подпись")

    assert result.outcome is SubmissionOutcome.failed
    assert result.status_code is None
    assert "ascii" in result.error
    assert recorded_requests == []
    assert limiter.snapshot().count == 1


def test_closed_client_is_a_failed_result(registry_transport, recorded_requests):
    client = httpx.Client(transport=registry_transport)
    submitter = DocumentSubmitter(FixedWindowRateLimiter(5, 1.0), client=client)
    client.close()

    result = submitter.submit(sample_document(), "sig")

    assert result.outcome is SubmissionOutcome.failed
    assert "closed" in result.error
    assert recorded_requests == []


def test_custom_request_builder(recorded_requests, registry_transport):
    def _builder(client, url, body, signature):
        return client.build_request(
            "POST", url, content=body, headers={"Content-Type": "application/json", "X-Sig": signature}
        )

    submitter = DocumentSubmitter(
        FixedWindowRateLimiter(5, 1.0),
        client=httpx.Client(transport=registry_transport),
        url="https://registry.test/create",
        request_builder=_builder,
    )
    submitter.submit(sample_document(), "sig")

    (request,) = recorded_requests
    assert request.headers["X-Sig"] == "sig"
    assert request.url.host == "registry.test"


def test_timeout_propagates_without_sending(registry_transport, recorded_requests, fake_clock):
    limiter = FixedWindowRateLimiter(1, 10.0, clock=fake_clock, sleep=fake_clock.sleep)
    submitter = _submitter(registry_transport, limiter)
    submitter.submit(sample_document(), "sig")

    with pytest.raises(AcquireTimeout):
        submitter.submit(sample_document(), "sig", timeout=1.0)

    assert len(recorded_requests) == 1


def test_close_cancels_waiting_callers(registry_transport, recorded_requests):
    limiter = FixedWindowRateLimiter(1, 30.0)
    submitter = _submitter(registry_transport, limiter)
    submitter.submit(sample_document(), "sig")
    outcome: list[BaseException] = []

    def _waiter() -> None:
        try:
            submitter.submit(sample_document(), "sig")
        except AcquireCancelled as exc:
            outcome.append(exc)

    thread = threading.Thread(target=_waiter)
    thread.start()
    time.sleep(0.05)
    submitter.close()
    thread.join(timeout=2.0)

    assert not thread.is_alive()
    assert len(outcome) == 1
    assert len(recorded_requests) == 1
    assert limiter.snapshot().count == 1
    with pytest.raises(AcquireCancelled):
        submitter.submit(sample_document(), "sig")


def test_caller_token_cancels_submission(registry_transport):
    submitter = _submitter(registry_transport, FixedWindowRateLimiter(1, 30.0))
    token = CancellationToken()
    token.cancel()

    with pytest.raises(AcquireCancelled):
        submitter.submit(sample_document(), "sig", cancel_token=token)


def test_close_leaves_borrowed_client_open(registry_transport):
    client = httpx.Client(transport=registry_transport)
    with DocumentSubmitter(FixedWindowRateLimiter(1, 1.0), client=client):
        pass
    assert not client.is_closed


def test_from_settings_owns_client(registry_transport, recorded_requests):
    settings = load_settings(rate_limit="2/second", api_url="https://registry.test/create")
    submitter = DocumentSubmitter.from_settings(settings, transport=registry_transport)

    assert submitter.limiter.limit == 2
    assert submitter.limiter.interval == 1.0
    assert submitter.submit(sample_document(), "sig").ok
    assert recorded_requests[0].url.host == "registry.test"

    submitter.close()
    assert submitter.closed


def test_submit_many_shares_limiter_and_keeps_order(recorded_requests):
    def _handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        status = 500 if json.loads(request.content)["doc_id"] == "doc-2" else 200
        return httpx.Response(status)

    limiter = FixedWindowRateLimiter(2, 0.2)
    submitter = _submitter(httpx.MockTransport(_handler), limiter)
    documents = [
        sample_document().model_copy(update={"doc_id": f"doc-{index}"}) for index in range(5)
    ]

    started = time.monotonic()
    results = submitter.submit_many([(doc, "sig") for doc in documents], workers=5)
    elapsed = time.monotonic() - started

    assert [result.doc_id for result in results] == [f"doc-{index}" for index in range(5)]
    assert [result.ok for result in results] == [True, True, False, True, True]
    assert len(recorded_requests) == 5
    # Five admissions at two per window need at least two window rollovers.
    assert elapsed >= 0.35


def test_submit_many_reports_cancellation(registry_transport, fake_clock):
    limiter = FixedWindowRateLimiter(1, 10.0, clock=fake_clock, sleep=fake_clock.sleep)
    submitter = _submitter(registry_transport, limiter)

    results = submitter.submit_many(
        [(sample_document(), "sig"), (sample_document(), "sig")], workers=1, timeout=1.0
    )

    assert [result.outcome for result in results] == [
        SubmissionOutcome.sent,
        SubmissionOutcome.cancelled,
    ]
    assert results[1].waited == pytest.approx(1.0)


def test_build_request_sets_json_content_type():
    client = create_http_client(load_settings(), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        request = build_request(client, DEFAULT_API_URL, b"{}", "sig")
    finally:
        client.close()
    assert request.headers["content-type"] == "application/json"
    assert request.headers["signature"] == "sig"
    assert request.content == b"{}"
