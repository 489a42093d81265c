from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from gateway.auth.base import (
    AuthenticationType,
    OutboundRequest,
    basic_authorization,
    bearer_authorization,
    utcnow,
)
from gateway.auth.extractors import Extractor, is_token_expired, parse_expiration, response_envelope
from gateway.core.errors import TokenAcquisitionError
from gateway.services.http_client import HubHttpClient


log = logging.getLogger(__name__)


class BasicAndBearerStrategy:
    """
    Two-phase scheme: exchange (optional) basic credentials for a token, then
    send the token as a bearer credential.

    With no token extractor the exchange response body itself is the credential
    and is never refreshed. With one, the expiration extractor (if any) and the
    expiration buffer decide when the token has to be fetched again.
    """

    auth_type = AuthenticationType.BASIC_AND_BEARER.value

    def __init__(
        self,
        *,
        target_name: str,
        method: str,
        url: str,
        username: str | None = None,
        password: str | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        body: Any = None,
        token_extractor: Extractor | None = None,
        expiration_extractor: Extractor | None = None,
        expiration_buffer: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.target_name = target_name
        self.method = method
        self.url = url
        self._username = username
        self._password = password
        self._params = dict(params or {})
        self._headers = dict(headers or {})
        self._body = body
        self._token_extractor = token_extractor
        self._expiration_extractor = expiration_extractor
        self.expiration_buffer = expiration_buffer
        self._clock = clock

        self.token: Any = None
        self.expires_at: datetime | None = None

    def is_expired(self) -> bool:
        if self.token is None:
            return True
        if self._token_extractor is None:
            return False
        return is_token_expired(self.expires_at, buffer_seconds=self.expiration_buffer, now=self._clock())

    def _exchange_headers(self) -> dict[str, Any]:
        headers = dict(self._headers)
        if self._username is not None or self._password is not None:
            headers["Authorization"] = basic_authorization(self._username or "", self._password or "")
        return headers

    async def acquire_token(self, client: HubHttpClient) -> Any:
        result = await client.request(
            method=self.method,
            url=self.url,
            body=self._body,
            params=self._params,
            headers=self._exchange_headers(),
        )
        if not result.ok:
            raise TokenAcquisitionError(
                self.target_name,
                f"token exchange failed: {result.error_message or result.error_code}",
                status_code=result.status_code,
            )

        if self._token_extractor is None:
            self.token = result.data
            self.expires_at = None
        else:
            envelope = response_envelope(result.data, result.status_code, result.response_headers)
            token = self._token_extractor(envelope)
            if isinstance(token, (Mapping, list)):
                raise TokenAcquisitionError(self.target_name, "token extractor did not resolve to a value")
            self.token = token
            self.expires_at = None
            if self._expiration_extractor is not None:
                self.expires_at = parse_expiration(self._expiration_extractor(envelope), now=self._clock())

        if self.token is None or self.token == "":
            raise TokenAcquisitionError(self.target_name, "token exchange returned no token")

        log.debug("token acquired target=%s expires_at=%s", self.target_name, self.expires_at)
        return self.token

    async def attach(self, request: OutboundRequest, client: HubHttpClient) -> OutboundRequest:
        if self.is_expired():
            await self.acquire_token(client)
        return request.with_headers({"Authorization": bearer_authorization(self.token)})
