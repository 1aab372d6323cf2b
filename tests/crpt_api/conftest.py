"""Shared fixtures for the registry client test suite."""

from __future__ import annotations

import logging
import os

import httpx
import pytest

from CrptApi.settings import reset_settings


class FakeClock:
    """Manually advanced monotonic clock whose ``sleep`` just moves time forward."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        assert seconds > 0, "limiter must never sleep a non-positive duration"
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep host CRPT_* variables and any .env file out of the tests."""

    for name in list(os.environ):
        if name.upper().startswith("CRPT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def managed_log_handlers():
    """Drop handlers installed by ``setup_logging`` so streams do not leak between tests."""

    yield
    logger = logging.getLogger("CrptApi")
    for handler in list(logger.handlers):
        if getattr(handler, "_crpt_managed", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def registry_transport(recorded_requests):
    """Mock registry accepting every document with HTTP 200."""

    def _handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        return httpx.Response(200, json={"value": "accepted"})

    return httpx.MockTransport(_handler)
