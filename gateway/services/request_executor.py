from __future__ import annotations

from gateway.auth.base import AuthStrategy, OutboundRequest
from gateway.core.errors import RequestExecutionError
from gateway.services.http_client import HttpResult, HubHttpClient
from gateway.services.parameters import EffectiveParameters


def build_outbound_request(params: EffectiveParameters, *, target_name: str) -> OutboundRequest:
    if not params.url:
        raise RequestExecutionError(target_name, "no url configured")

    return OutboundRequest(
        method=(params.method_type or "GET").upper(),
        url=params.url,
        body=params.body,
        params=dict(params.query_parameter_map or {}),
        headers=dict(params.header_map or {}),
        response_type=params.response_type,
    )


async def execute(
    strategy: AuthStrategy,
    request: OutboundRequest,
    *,
    client: HubHttpClient,
    target_name: str,
) -> HttpResult:
    authed = await strategy.attach(request, client)

    result = await client.request(
        method=authed.method,
        url=authed.url,
        body=authed.body,
        params=authed.params,
        headers=authed.headers,
        response_type=authed.response_type,
    )
    if not result.ok:
        raise RequestExecutionError(
            target_name,
            result.error_message or result.error_code or "request failed",
            status_code=result.status_code,
        )
    return result
