from __future__ import annotations
from typing import Any

DEFAULT_SENSITIVE_KEYS = {
    "password", "pass", "pwd",
    "secret", "client_secret",
    "token", "access_token", "refresh_token",
    "api_key", "apikey", "x-api-key",
    "authorization", "auth",
    "code", "code_verifier",
    # encrypted api columns
    "api_key_authentication_key",
    "api_key_authentication_header_name",
    "basic_authentication_username",
    "basic_authentication_password",
    "bearer_authentication_token",
    "oauth_authentication_client_id",
    "oauth_authentication_client_secret",
}

REDACTED = "**********"

def redact_payload(value: Any, *, extra_keys: set[str] | None = None) -> Any:
    sensitive = set(DEFAULT_SENSITIVE_KEYS)
    if extra_keys:
        sensitive |= {k.lower() for k in extra_keys}

    def _walk(v: Any) -> Any:
        if isinstance(v, dict):
            out = {}
            for k, vv in v.items():
                if isinstance(k, str) and k.lower() in sensitive:
                    out[k] = REDACTED if vv is not None else None
                else:
                    out[k] = _walk(vv)
            return out
        if isinstance(v, list):
            return [_walk(x) for x in v]
        if isinstance(v, (bytes, bytearray, memoryview)):
            return REDACTED
        return v

    return _walk(value)
