from __future__ import annotations

from gateway.auth.base import (
    AuthenticationType,
    OutboundRequest,
    basic_authorization,
    bearer_authorization,
)
from gateway.services.http_client import HubHttpClient


class ApiKeyStrategy:
    auth_type = AuthenticationType.API_KEY.value

    def __init__(self, *, key: str, header_name: str):
        self._key = key
        self.header_name = header_name

    async def attach(self, request: OutboundRequest, client: HubHttpClient) -> OutboundRequest:
        return request.with_headers({self.header_name: self._key})


class BasicStrategy:
    auth_type = AuthenticationType.BASIC.value

    def __init__(self, *, username: str, password: str):
        self._authorization = basic_authorization(username, password)

    async def attach(self, request: OutboundRequest, client: HubHttpClient) -> OutboundRequest:
        return request.with_headers({"Authorization": self._authorization})


class BearerStrategy:
    """Static token; no refresh, assumed valid for the lifetime of the call."""

    auth_type = AuthenticationType.BEARER.value

    def __init__(self, *, token: str):
        self._token = token

    async def attach(self, request: OutboundRequest, client: HubHttpClient) -> OutboundRequest:
        return request.with_headers({"Authorization": bearer_authorization(self._token)})
