"""Redaction of credentials in DSNs and of secrets in logged SQL parameters."""

from __future__ import annotations

from typing import Any, Mapping

REDACTED_VALUE = "***"

_SHARED_TOKENS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "access_key",
    "private_key",
)

# DSN query keys that point at key material.
_KEY_ONLY_TOKENS = ("sslkey", "ssl_key", "sslcert", "ssl_cert", "sslrootcert", "ssl_ca")

# Literal values that look like credentials even under an innocent name.
_VALUE_ONLY_TOKENS = ("bearer", "authorization")


def _compact(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum())


def is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    compact = _compact(normalized)
    return any(
        token in normalized or _compact(token) in compact
        for token in _SHARED_TOKENS + _KEY_ONLY_TOKENS
    )


def is_sensitive_value(value: str) -> bool:
    normalized = value.lower()
    return any(token in normalized for token in _SHARED_TOKENS + _VALUE_ONLY_TOKENS)


def redact_value(value: Any, *, key: str | None = None) -> Any:
    """
    Return ``value`` with anything credential-like replaced by ``***``.

    ``key`` is the parameter or column name the value is bound to, when known;
    a sensitive name hides the value regardless of its content.
    """

    if key is not None and is_sensitive_key(str(key)):
        return REDACTED_VALUE
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact_value(item) for item in value)
    if isinstance(value, bytes):
        decoded = value.decode("utf-8", errors="ignore")
        return REDACTED_VALUE if decoded and is_sensitive_value(decoded) else value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def redact_query_params(query: Mapping[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else val for key, val in query.items()}
