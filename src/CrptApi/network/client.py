# === NAVMAP v1 ===
# {
#   "module": "CrptApi.network.client",
#   "purpose": "HTTPX client factory for registry calls.",
#   "sections": [
#     {
#       "id": "create-http-client",
#       "name": "create_http_client",
#       "anchor": "function-create-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "create-ssl-context",
#       "name": "_create_ssl_context",
#       "anchor": "function-create-ssl-context",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""HTTPX client factory for registry calls.

Builds a thread-safe ``httpx.Client`` with per-phase timeouts, bounded
connection pooling, certifi-backed TLS verification, and telemetry hooks.
One client is shared by every submitting thread; the submitter that created
it is responsible for closing it.

Example:
    >>> from CrptApi.network import create_http_client
    >>> client = create_http_client()
    >>> client.close()
"""

import logging
import ssl
from typing import TYPE_CHECKING, Optional

import certifi
import httpx

from CrptApi.network.instrumentation import create_http_event_hooks
from CrptApi.network.policy import FOLLOW_REDIRECTS, KEEPALIVE_EXPIRY, MAX_KEEPALIVE_CONNECTIONS

if TYPE_CHECKING:
    from CrptApi.settings import CrptApiSettings

logger = logging.getLogger(__name__)


def create_http_client(
    settings: Optional["CrptApiSettings"] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create an HTTPX client configured from ``settings``.

    Args:
        settings: Client configuration; process settings when omitted.
        transport: Optional transport override (``httpx.MockTransport`` in tests).

    Returns:
        Fully configured httpx.Client ready for use
    """
    if settings is None:
        # Imported here; settings pulls its defaults from this package.
        from CrptApi.settings import get_settings

        settings = get_settings()
    ssl_ctx = _create_ssl_context(settings.tls_verify)

    if transport is None:
        # Retries cover connection establishment only; a request that reached
        # the registry is never replayed.
        transport = httpx.HTTPTransport(retries=1, verify=ssl_ctx)

    client = httpx.Client(
        transport=transport,
        timeout=httpx.Timeout(
            connect=settings.connect_timeout,
            read=settings.read_timeout,
            write=settings.write_timeout,
            pool=settings.pool_timeout,
        ),
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=min(MAX_KEEPALIVE_CONNECTIONS, settings.max_connections),
            keepalive_expiry=KEEPALIVE_EXPIRY,
        ),
        follow_redirects=FOLLOW_REDIRECTS,
        verify=ssl_ctx,
        event_hooks=create_http_event_hooks(),
    )

    logger.debug(
        "HTTPX client created",
        extra={
            "extra_fields": {
                "max_connections": settings.max_connections,
                "tls_verify": settings.tls_verify,
            }
        },
    )
    return client


def _create_ssl_context(verify: bool) -> ssl.SSLContext:
    """Create an SSL context using the certifi bundle.

    Returns:
        Configured ssl.SSLContext for use with HTTPX
    """
    if not verify:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        logger.warning("TLS verification DISABLED (development only!)")
        return ctx

    ctx = ssl.create_default_context(cafile=certifi.where())
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    return ctx


__all__ = ["create_http_client"]
