# === NAVMAP v1 ===
# {
#   "module": "CrptApi.network.policy",
#   "purpose": "HTTP policy constants and defaults for the registry client.",
#   "sections": []
# }
# === /NAVMAP ===

"""HTTP policy constants and defaults.

Timeout budgets and connection pooling for calls to the registry.  Values can
be overridden through :class:`CrptApi.settings.CrptApiSettings`; these are the
defaults used when no settings are supplied.
"""

DEFAULT_API_URL = "https://ismp.crpt.ru/api/v3/lk/documents/create"

JSON_CONTENT_TYPE = "application/json"

SIGNATURE_HEADER = "Signature"

# ============================================================================
# Timeouts (seconds)
# ============================================================================

HTTP_CONNECT_TIMEOUT = 5.0

HTTP_READ_TIMEOUT = 30.0

HTTP_WRITE_TIMEOUT = 15.0

HTTP_POOL_TIMEOUT = 5.0

# ============================================================================
# Connection pooling
# ============================================================================

# Never more in flight than the registry would admit anyway.
MAX_CONNECTIONS = 10

MAX_KEEPALIVE_CONNECTIONS = 5

KEEPALIVE_EXPIRY = 5.0

# ============================================================================
# Security
# ============================================================================

TLS_VERIFY_ENABLED = True

FOLLOW_REDIRECTS = False
