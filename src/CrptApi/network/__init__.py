# === NAVMAP v1 ===
# {
#   "module": "CrptApi.network.__init__",
#   "purpose": "Network subsystem: HTTP client factory, policy constants, telemetry hooks.",
#   "sections": []
# }
# === /NAVMAP ===

"""Network subsystem: HTTP client factory, policy constants, telemetry hooks.

Modules:
- client: HTTPX client factory
- policy: HTTP policy constants (endpoint, timeouts, pooling)
- instrumentation: Request/response hooks for structured telemetry
"""

from CrptApi.network.client import create_http_client
from CrptApi.network.instrumentation import create_http_event_hooks
from CrptApi.network.policy import (
    DEFAULT_API_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_POOL_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_WRITE_TIMEOUT,
    JSON_CONTENT_TYPE,
    MAX_CONNECTIONS,
    SIGNATURE_HEADER,
)

__all__ = [
    "create_http_client",
    "create_http_event_hooks",
    "DEFAULT_API_URL",
    "HTTP_CONNECT_TIMEOUT",
    "HTTP_POOL_TIMEOUT",
    "HTTP_READ_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "JSON_CONTENT_TYPE",
    "MAX_CONNECTIONS",
    "SIGNATURE_HEADER",
]
