from __future__ import annotations

from typing import Any, Callable, Dict

from gateway.auth.base import AuthenticationType, AuthStrategy, NoAuthStrategy
from gateway.auth.basic_and_bearer import BasicAndBearerStrategy
from gateway.auth.extractors import make_extractor
from gateway.auth.oauth import OAuthStrategy
from gateway.auth.static import ApiKeyStrategy, BasicStrategy, BearerStrategy
from gateway.core.crypto import CredentialDecryptor
from gateway.core.errors import StrategyConstructionError
from gateway.services.parameters import EffectiveParameters


StrategyBuilder = Callable[[EffectiveParameters, CredentialDecryptor, str], AuthStrategy]


def _secret(value: Any, ref: str, decryptor: CredentialDecryptor) -> str | None:
    # Only stored (binary) values are ciphertext; request overrides arrive as plain text.
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return decryptor.decrypt_field(ref, bytes(value))
    return str(value)


def _require(value: Any, field: str, auth_type: AuthenticationType) -> Any:
    if value is None or value == "":
        raise StrategyConstructionError(f"{auth_type.value} authentication requires {field}")
    return value


def _build_api_key(p: EffectiveParameters, decryptor: CredentialDecryptor, target_name: str) -> AuthStrategy:
    t = AuthenticationType.API_KEY
    key = _require(p.api_key_authentication_key, "api_key_authentication_key", t)
    header_name = _require(p.api_key_authentication_header_name, "api_key_authentication_header_name", t)
    return ApiKeyStrategy(
        key=_secret(key, "api_key_authentication_key", decryptor),
        header_name=_secret(header_name, "api_key_authentication_header_name", decryptor),
    )


def _build_basic(p: EffectiveParameters, decryptor: CredentialDecryptor, target_name: str) -> AuthStrategy:
    t = AuthenticationType.BASIC
    username = _require(p.basic_authentication_username, "basic_authentication_username", t)
    password = _require(p.basic_authentication_password, "basic_authentication_password", t)
    return BasicStrategy(
        username=_secret(username, "basic_authentication_username", decryptor),
        password=_secret(password, "basic_authentication_password", decryptor),
    )


def _build_bearer(p: EffectiveParameters, decryptor: CredentialDecryptor, target_name: str) -> AuthStrategy:
    token = _require(p.bearer_authentication_token, "bearer_authentication_token", AuthenticationType.BEARER)
    return BearerStrategy(token=_secret(token, "bearer_authentication_token", decryptor))


def _build_basic_and_bearer(p: EffectiveParameters, decryptor: CredentialDecryptor, target_name: str) -> AuthStrategy:
    url = _require(p.basic_and_bearer_authentication_url, "basic_and_bearer_authentication_url", AuthenticationType.BASIC_AND_BEARER)
    return BasicAndBearerStrategy(
        target_name=target_name,
        method=p.basic_and_bearer_authentication_method_type or "POST",
        url=url,
        username=_secret(p.basic_authentication_username, "basic_and_bearer_authentication_username", decryptor),
        password=_secret(p.basic_authentication_password, "basic_and_bearer_authentication_password", decryptor),
        params=p.basic_and_bearer_authentication_query_parameter_map,
        headers=p.basic_and_bearer_authentication_header_map,
        body=p.basic_and_bearer_authentication_body,
        token_extractor=make_extractor(p.basic_and_bearer_authentication_token_extractor_list),
        expiration_extractor=make_extractor(p.basic_and_bearer_authentication_expiration_extractor_list),
        expiration_buffer=p.basic_and_bearer_authentication_expiration_buffer,
    )


def _build_oauth(p: EffectiveParameters, decryptor: CredentialDecryptor, target_name: str) -> AuthStrategy:
    t = AuthenticationType.OAUTH
    grant_type = _require(p.oauth_authentication_grant_type, "oauth_authentication_grant_type", t)
    token_url = _require(p.oauth_authentication_token_url, "oauth_authentication_token_url", t)
    client_id = _require(p.oauth_authentication_client_id, "oauth_authentication_client_id", t)
    return OAuthStrategy(
        target_name=target_name,
        grant_type=grant_type,
        client_id=_secret(client_id, "oauth_authentication_client_id", decryptor),
        client_secret=_secret(p.oauth_authentication_client_secret, "oauth_authentication_client_secret", decryptor),
        token_url=token_url,
        authorization_url=p.oauth_authentication_authorization_url,
        redirect_url=p.oauth_authentication_redirect_url,
        scope=p.oauth_authentication_scope,
        access_token_extractor=make_extractor(p.oauth_authentication_access_token_extractor_list),
        refresh_token_extractor=make_extractor(p.oauth_authentication_refresh_token_extractor_list),
        expiration_extractor=make_extractor(p.oauth_authentication_expiration_extractor_list),
        expiration_buffer=p.oauth_authentication_expiration_buffer,
        pkce_enabled=bool(p.oauth_authentication_pkce_enabled),
        additional_parameters=p.oauth_authentication_additional_parameter_map,
    )


_BUILDERS: Dict[AuthenticationType, StrategyBuilder] = {
    AuthenticationType.API_KEY: _build_api_key,
    AuthenticationType.BASIC: _build_basic,
    AuthenticationType.BEARER: _build_bearer,
    AuthenticationType.BASIC_AND_BEARER: _build_basic_and_bearer,
    AuthenticationType.OAUTH: _build_oauth,
}


def build_strategy(
    params: EffectiveParameters,
    decryptor: CredentialDecryptor,
    *,
    target_name: str,
) -> AuthStrategy:
    auth_type = AuthenticationType.parse(params.authentication_type)
    if auth_type is None:
        return NoAuthStrategy()
    return _BUILDERS[auth_type](params, decryptor, target_name)


def supported_authentication_types() -> list[str]:
    return sorted(t.value for t in _BUILDERS)
