from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors raised while serving an api data map."""


class ConfigurationQueryError(GatewayError):
    """Filter map is malformed or the descriptor store is unreachable (whole batch fails)."""


class DecryptionError(GatewayError):
    """Missing key/IV pair or undecryptable ciphertext for one credential."""


class StrategyConstructionError(GatewayError):
    """A field required by the selected authentication scheme has no value."""


class RequestExecutionError(GatewayError):
    def __init__(self, target_name: str, message: str, *, status_code: int | None = None):
        super().__init__(f"[{target_name}] {message}")
        self.target_name = target_name
        self.status_code = status_code


class TokenAcquisitionError(RequestExecutionError):
    """Credential exchange call failed or returned no usable token."""
