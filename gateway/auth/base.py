from __future__ import annotations

import base64
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gateway.services.http_client import HubHttpClient


class AuthenticationType(str, Enum):
    API_KEY = "API Key"
    BASIC = "Basic"
    BEARER = "Bearer"
    BASIC_AND_BEARER = "Basic And Bearer"
    OAUTH = "OAuth"

    @classmethod
    def parse(cls, value: Any) -> "AuthenticationType | None":
        """
        Accepts the stored labels ("Basic And Bearer") as well as compact
        spellings ("BasicAndBearer", "basic_and_bearer"). Unknown -> None.
        """
        if not isinstance(value, str):
            return None
        key = _compact(value)
        for member in cls:
            if key in (_compact(member.value), _compact(member.name)):
                return member
        return None


def _compact(s: str) -> str:
    return "".join(ch for ch in s.lower() if ch not in " _-")


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    body: Any = None
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, Any] = field(default_factory=dict)
    response_type: str | None = None

    def with_headers(self, extra: Mapping[str, Any]) -> "OutboundRequest":
        # Auth headers win over the configured header map
        return replace(self, headers={**self.headers, **dict(extra)})


@runtime_checkable
class AuthStrategy(Protocol):
    """
    Attaches credentials for one target to an outbound request.
    Token based strategies may call the client to obtain a token first.
    """

    auth_type: str | None

    async def attach(self, request: OutboundRequest, client: "HubHttpClient") -> OutboundRequest:
        ...


class NoAuthStrategy:
    auth_type = None

    async def attach(self, request: OutboundRequest, client: "HubHttpClient") -> OutboundRequest:
        return request


def basic_authorization(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def bearer_authorization(token: Any) -> str:
    return f"Bearer {token}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
