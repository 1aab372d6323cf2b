"""Tests for the HTTPX client factory and its telemetry hooks."""

import logging
import ssl

import httpx

from CrptApi.network import create_http_client
from CrptApi.network.client import _create_ssl_context
from CrptApi.network.instrumentation import _redact_url
from CrptApi.settings import load_settings


def test_client_uses_configured_timeouts_and_policy():
    settings = load_settings(read_timeout=12.0, connect_timeout=3.0)
    client = create_http_client(settings, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    try:
        assert client.timeout.read == 12.0
        assert client.timeout.connect == 3.0
        assert client.follow_redirects is False
    finally:
        client.close()


def test_ssl_context_verifies_by_default():
    ctx = _create_ssl_context(True)
    assert ctx.verify_mode == ssl.CERT_REQUIRED
    assert ctx.check_hostname


def test_ssl_context_can_disable_verification(caplog):
    with caplog.at_level(logging.WARNING, logger="CrptApi.network"):
        ctx = _create_ssl_context(False)
    assert ctx.verify_mode == ssl.CERT_NONE
    assert "DISABLED" in caplog.text


def test_request_telemetry_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="CrptApi.network")
    client = create_http_client(
        load_settings(), transport=httpx.MockTransport(lambda r: httpx.Response(201))
    )
    with client:
        client.post("https://registry.test/create?token=abc", content=b"{}")

    (record,) = [r for r in caplog.records if getattr(r, "extra_fields", {}).get("event") == "net.request"]
    assert record.extra_fields["status"] == 201
    assert record.extra_fields["url_redacted"] == "https://registry.test/create"
    assert record.extra_fields["host"] == "registry.test"


def test_redact_url_drops_query_and_fragment():
    assert _redact_url("https://a.test/p?x=1#f") == "https://a.test/p"
