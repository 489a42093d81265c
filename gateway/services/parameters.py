from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from gateway.models.api import Api


@dataclass(frozen=True)
class EffectiveParameters:
    """
    Values a single target is called with, after applying request overrides.
    Field names match the `apis` columns so overrides address them directly.
    """

    authentication_type: str | None = None
    method_type: str | None = None
    response_type: str | None = None

    api_key_authentication_key: Any = None
    api_key_authentication_header_name: Any = None

    basic_authentication_username: Any = None
    basic_authentication_password: Any = None

    basic_and_bearer_authentication_method_type: str | None = None
    basic_and_bearer_authentication_url: str | None = None
    basic_and_bearer_authentication_query_parameter_map: dict | None = None
    basic_and_bearer_authentication_header_map: dict | None = None
    basic_and_bearer_authentication_body: Any = None
    basic_and_bearer_authentication_token_extractor_list: list | None = None
    basic_and_bearer_authentication_expiration_extractor_list: list | None = None
    basic_and_bearer_authentication_expiration_buffer: int | float | None = None

    bearer_authentication_token: Any = None

    oauth_authentication_grant_type: str | None = None
    oauth_authentication_client_id: Any = None
    oauth_authentication_client_secret: Any = None
    oauth_authentication_token_url: str | None = None
    oauth_authentication_authorization_url: str | None = None
    oauth_authentication_redirect_url: str | None = None
    oauth_authentication_scope: str | None = None
    oauth_authentication_access_token_extractor_list: list | None = None
    oauth_authentication_refresh_token_extractor_list: list | None = None
    oauth_authentication_expiration_extractor_list: list | None = None
    oauth_authentication_expiration_buffer: int | float | None = None
    oauth_authentication_pkce_enabled: bool | None = None
    oauth_authentication_additional_parameter_map: dict | None = None

    url: str | None = None
    query_parameter_map: dict | None = None
    header_map: dict | None = None
    body: Any = None

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


CONFIGURABLE_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(EffectiveParameters))


def resolve(
    field: str,
    stored_default: Any,
    global_overrides: Mapping[str, Any] | None,
    local_overrides: Mapping[str, Any] | None,
) -> Any:
    # Order: global override, then this target's override, then the stored value.
    # A present key wins even when its value is null.
    if isinstance(global_overrides, Mapping) and field in global_overrides:
        return global_overrides[field]

    if isinstance(local_overrides, Mapping) and field in local_overrides:
        return local_overrides[field]

    return stored_default


def resolve_parameters(
    api: Api,
    *,
    global_overrides: Mapping[str, Any] | None = None,
    target_overrides: Mapping[str, Mapping[str, Any]] | None = None,
) -> EffectiveParameters:
    local = None
    if isinstance(target_overrides, Mapping):
        local = target_overrides.get(api.name)

    return EffectiveParameters(
        **{
            name: resolve(name, getattr(api, name, None), global_overrides, local)
            for name in CONFIGURABLE_FIELDS
        }
    )
