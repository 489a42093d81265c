from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from datetime import datetime
from typing import Any, Callable, Mapping

import httpx

from gateway.auth.base import AuthenticationType, OutboundRequest, bearer_authorization, utcnow
from gateway.auth.extractors import Extractor, is_token_expired, parse_expiration, response_envelope
from gateway.core.errors import StrategyConstructionError, TokenAcquisitionError
from gateway.services.http_client import HubHttpClient


log = logging.getLogger(__name__)

AUTHORIZATION_CODE = "authorization_code"
CLIENT_CREDENTIALS = "client_credentials"
REFRESH_TOKEN = "refresh_token"
PASSWORD = "password"

GRANT_TYPES = {AUTHORIZATION_CODE, CLIENT_CREDENTIALS, REFRESH_TOKEN, PASSWORD}


def normalize_grant_type(value: str) -> str:
    return value.strip().lower().replace("-", "_").replace(" ", "_")


def pkce_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _scalar(value: Any) -> Any:
    return None if isinstance(value, (Mapping, list)) else value


class OAuthStrategy:
    """
    OAuth 2.0 token endpoint client.

    Supported grants: authorization_code (optionally with PKCE),
    client_credentials, refresh_token and password. Grant inputs that are not
    part of the descriptor (code, refresh_token, username/password,
    code_verifier) come from the additional parameter map, which is also
    merged into every token request.

    Extractors run over the token response envelope; when one is not
    configured the standard fields access_token / refresh_token / expires_in
    of the response body are used.
    """

    auth_type = AuthenticationType.OAUTH.value

    def __init__(
        self,
        *,
        target_name: str,
        grant_type: str,
        client_id: str,
        client_secret: str | None,
        token_url: str,
        authorization_url: str | None = None,
        redirect_url: str | None = None,
        scope: str | None = None,
        access_token_extractor: Extractor | None = None,
        refresh_token_extractor: Extractor | None = None,
        expiration_extractor: Extractor | None = None,
        expiration_buffer: float | None = None,
        pkce_enabled: bool = False,
        additional_parameters: Mapping[str, Any] | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        grant = normalize_grant_type(grant_type)
        if grant not in GRANT_TYPES:
            raise StrategyConstructionError(f"unsupported oauth grant type: {grant_type!r}")

        self.target_name = target_name
        self.grant_type = grant
        self._client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url
        self.authorization_url = authorization_url
        self.redirect_url = redirect_url
        self.scope = scope
        self._access_token_extractor = access_token_extractor
        self._refresh_token_extractor = refresh_token_extractor
        self._expiration_extractor = expiration_extractor
        self.expiration_buffer = expiration_buffer
        self.pkce_enabled = bool(pkce_enabled)
        self._additional = dict(additional_parameters or {})
        self._clock = clock

        self.code_verifier: str | None = None
        if self.pkce_enabled:
            self.code_verifier = self._additional.get("code_verifier") or secrets.token_urlsafe(64)

        self.access_token: Any = None
        self.refresh_token: Any = self._additional.get("refresh_token")
        self.expires_at: datetime | None = None

        self._check_grant_inputs()

    def _check_grant_inputs(self) -> None:
        missing = None
        if self.grant_type == AUTHORIZATION_CODE:
            if not self._additional.get("code"):
                missing = "code"
            elif self.pkce_enabled and not self._additional.get("code_verifier"):
                missing = "code_verifier"
        elif self.grant_type == REFRESH_TOKEN and not self.refresh_token:
            missing = "refresh_token"
        elif self.grant_type == PASSWORD and (
            self._additional.get("username") is None or self._additional.get("password") is None
        ):
            missing = "username/password"

        if missing:
            raise StrategyConstructionError(
                f"oauth grant {self.grant_type} requires {missing} in the additional parameter map"
            )

    def authorization_request_url(self, state: str | None = None) -> str:
        if not self.authorization_url:
            raise StrategyConstructionError("oauth authorization url is not configured")

        params: dict[str, str] = {"response_type": "code", "client_id": self._client_id}
        if self.redirect_url:
            params["redirect_uri"] = self.redirect_url
        if self.scope:
            params["scope"] = self.scope
        if state:
            params["state"] = state
        if self.pkce_enabled and self.code_verifier:
            params["code_challenge"] = pkce_challenge(self.code_verifier)
            params["code_challenge_method"] = "S256"

        return str(httpx.URL(self.authorization_url).copy_merge_params(params))

    def token_request_body(self, grant_type: str | None = None) -> dict[str, Any]:
        grant = grant_type or self.grant_type

        body: dict[str, Any] = dict(self._additional)
        body["grant_type"] = grant
        body["client_id"] = self._client_id
        if self._client_secret:
            body["client_secret"] = self._client_secret

        if grant == AUTHORIZATION_CODE:
            if self.redirect_url:
                body["redirect_uri"] = self.redirect_url
            if self.pkce_enabled and self.code_verifier:
                body["code_verifier"] = self.code_verifier
        elif grant == REFRESH_TOKEN:
            body["refresh_token"] = self.refresh_token
            body.pop("code", None)
            body.pop("code_verifier", None)
        else:
            body.pop("code", None)
            body.pop("code_verifier", None)

        if self.scope and grant != AUTHORIZATION_CODE:
            body["scope"] = self.scope

        return body

    def is_expired(self) -> bool:
        if self.access_token is None:
            return True
        return is_token_expired(self.expires_at, buffer_seconds=self.expiration_buffer, now=self._clock())

    def _read_token_response(self, data: Any, status_code: int | None, headers: Mapping[str, str] | None) -> None:
        envelope = response_envelope(data, status_code, headers)
        body = data if isinstance(data, Mapping) else {}

        if self._access_token_extractor is not None:
            access_token = _scalar(self._access_token_extractor(envelope))
        else:
            access_token = _scalar(body.get("access_token"))
        if access_token is None or access_token == "":
            raise TokenAcquisitionError(self.target_name, "token response carried no access token")

        if self._refresh_token_extractor is not None:
            refresh_token = _scalar(self._refresh_token_extractor(envelope))
        else:
            refresh_token = _scalar(body.get("refresh_token"))

        if self._expiration_extractor is not None:
            expiration = _scalar(self._expiration_extractor(envelope))
        else:
            expiration = body.get("expires_in")

        self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token
        self.expires_at = parse_expiration(expiration, now=self._clock())

    async def acquire_token(self, client: HubHttpClient, *, grant_type: str | None = None) -> Any:
        grant = grant_type or self.grant_type
        result = await client.request(
            method="POST",
            url=self.token_url,
            body=self.token_request_body(grant),
            headers={"Accept": "application/json"},
            form=True,
        )
        if not result.ok:
            raise TokenAcquisitionError(
                self.target_name,
                f"oauth {grant} token request failed: {result.error_message or result.error_code}",
                status_code=result.status_code,
            )

        self._read_token_response(result.data, result.status_code, result.response_headers)
        log.debug("oauth token acquired target=%s grant=%s expires_at=%s", self.target_name, grant, self.expires_at)
        return self.access_token

    async def attach(self, request: OutboundRequest, client: HubHttpClient) -> OutboundRequest:
        if self.is_expired():
            if self.access_token is not None and self.refresh_token:
                await self.acquire_token(client, grant_type=REFRESH_TOKEN)
            else:
                await self.acquire_token(client)
        return request.with_headers({"Authorization": bearer_authorization(self.access_token)})
