# === NAVMAP v1 ===
# {
#   "module": "CrptApi.settings",
#   "purpose": "Environment-driven configuration for the registry client",
#   "sections": [
#     {"id": "settings", "name": "CrptApiSettings", "anchor": "class-crptapisettings", "kind": "class"},
#     {"id": "cache", "name": "get_settings / reset_settings", "anchor": "function-get-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Environment-driven configuration for the registry client.

All values can be supplied through ``CRPT_``-prefixed environment variables or
a ``.env`` file; explicit keyword arguments win over both.  The rate limit is
kept as a human-readable string (``"5/second"``) and parsed into a
:class:`~CrptApi.ratelimit.RateSpec` on demand.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from CrptApi.errors import ConfigurationError
from CrptApi.network.policy import (
    DEFAULT_API_URL,
    HTTP_CONNECT_TIMEOUT,
    HTTP_POOL_TIMEOUT,
    HTTP_READ_TIMEOUT,
    HTTP_WRITE_TIMEOUT,
    MAX_CONNECTIONS,
    TLS_VERIFY_ENABLED,
)
from CrptApi.ratelimit.config import RateSpec, parse_rate_string

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_SENSITIVE_FIELDS = ("signature", "token", "secret", "password", "key")

_SETTINGS_CACHE: Optional["CrptApiSettings"] = None
_SETTINGS_LOCK = threading.Lock()


class CrptApiSettings(BaseSettings):
    """Runtime configuration for the limiter, HTTP client, and logging."""

    api_url: str = Field(default=DEFAULT_API_URL, description="Document creation endpoint")
    rate_limit: str = Field(default="5/second", description="Requests per window, e.g. 5/second")
    acquire_timeout: Optional[float] = Field(
        default=None, ge=0, description="Maximum seconds to wait for rate-limit capacity"
    )
    connect_timeout: float = Field(default=HTTP_CONNECT_TIMEOUT, gt=0)
    read_timeout: float = Field(default=HTTP_READ_TIMEOUT, gt=0)
    write_timeout: float = Field(default=HTTP_WRITE_TIMEOUT, gt=0)
    pool_timeout: float = Field(default=HTTP_POOL_TIMEOUT, gt=0)
    max_connections: int = Field(default=MAX_CONNECTIONS, gt=0)
    tls_verify: bool = TLS_VERIFY_ENABLED
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(default=False, description="Emit JSON lines instead of plain text")
    signature: Optional[str] = Field(default=None, description="Default document signature")

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("rate_limit")
    @classmethod
    def _validate_rate_limit(cls, value: str) -> str:
        try:
            parse_rate_string(value)
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    def rate_spec(self) -> RateSpec:
        """Return the parsed rate limit."""
        return parse_rate_string(self.rate_limit)

    def redacted(self) -> Dict[str, Any]:
        """Dump settings with sensitive values replaced."""
        data = self.model_dump()
        for name, value in data.items():
            if value is not None and any(token in name for token in _SENSITIVE_FIELDS):
                data[name] = "***REDACTED***"
        return data


def load_settings(**overrides: Any) -> CrptApiSettings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    try:
        return CrptApiSettings(**overrides)
    except ValidationError as exc:
        messages = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise ConfigurationError("Invalid settings: " + "; ".join(messages)) from exc


def get_settings() -> CrptApiSettings:
    """Return the memoised settings for this process."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        if _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = load_settings()
            logger.debug(
                "Settings loaded",
                extra={"extra_fields": {"stage": "config", **_SETTINGS_CACHE.redacted()}},
            )
        return _SETTINGS_CACHE


def reset_settings() -> None:
    """Drop the cached settings (primarily for tests)."""

    global _SETTINGS_CACHE  # noqa: PLW0603

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


__all__ = [
    "CrptApiSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
