from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Mapping

import httpx


SUPPORTED_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}

BINARY_RESPONSE_TYPES = {"arraybuffer", "blob", "stream"}
TEXT_RESPONSE_TYPES = {"text", "document"}


@dataclass(frozen=True)
class HttpResult:
    ok: bool
    status_code: int | None
    data: Any = None

    error_code: str | None = None
    error_message: str | None = None

    elapsed_ms: int | None = None
    response_headers: dict[str, str] | None = None


def _parse_body(resp: httpx.Response, response_type: str | None) -> Any:
    rt = (response_type or "json").lower().strip()

    if rt in BINARY_RESPONSE_TYPES:
        return base64.b64encode(resp.content).decode("ascii")
    if rt in TEXT_RESPONSE_TYPES:
        return resp.text

    # json: parse when possible, otherwise hand back the text as-is
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _stringify(values: Mapping[str, Any] | None) -> dict[str, str]:
    return {str(k): str(v) for k, v in (values or {}).items() if v is not None}


def _query_params(values: Mapping[str, Any] | None) -> dict[str, str | list[str]]:
    # sequences become repeated keys (?id=1&id=2)
    out: dict[str, str | list[str]] = {}
    for k, v in (values or {}).items():
        if v is None:
            continue
        if isinstance(v, (list, tuple)):
            out[str(k)] = [str(x) for x in v if x is not None]
        else:
            out[str(k)] = str(v)
    return out


class HubHttpClient:
    """
    Shared HTTP client wrapper for outbound target calls.

    - Uses one AsyncClient instance (connection pooling).
    - Does NOT retry; failures come back as a structured result.
    - Decodes the body according to the target's response type.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 20.0,
        default_headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = httpx.Timeout(timeout_seconds)
        self._default_headers = dict(default_headers or {})
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        *,
        method: str,
        url: str,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        response_type: str | None = None,
        form: bool = False,
    ) -> HttpResult:
        m = (method or "GET").upper().strip()
        if m not in SUPPORTED_METHODS:
            return HttpResult(
                ok=False,
                status_code=None,
                error_code="UNSUPPORTED_METHOD",
                error_message=f"unsupported method {method!r}",
            )

        # Merge headers (caller wins)
        h = dict(self._default_headers)
        h.update(_stringify(headers))

        kwargs: dict[str, Any] = {}
        if body is not None:
            if form:
                kwargs["data"] = _stringify(body)
            elif isinstance(body, (dict, list, bool, int, float)):
                kwargs["json"] = body
            elif isinstance(body, bytes):
                kwargs["content"] = body
            else:
                kwargs["content"] = str(body).encode("utf-8")

        try:
            resp = await self._client.request(
                method=m,
                url=url,
                headers=h,
                params=_query_params(params),
                **kwargs,
            )
        except httpx.TimeoutException as e:
            return HttpResult(
                ok=False,
                status_code=None,
                error_code="TIMEOUT",
                error_message=str(e) or "timeout",
            )
        except httpx.RequestError as e:
            # DNS errors, connection refused, TLS, invalid url, etc.
            return HttpResult(
                ok=False,
                status_code=None,
                error_code="REQUEST_ERROR",
                error_message=str(e) or e.__class__.__name__,
            )

        data = _parse_body(resp, response_type)

        elapsed_ms = None
        try:
            elapsed_ms = int(resp.elapsed.total_seconds() * 1000)
        except RuntimeError:
            # elapsed is only set once the response has been closed
            pass

        response_headers = {
            # small subset that is commonly useful
            "content-type": resp.headers.get("content-type", ""),
            "date": resp.headers.get("date", ""),
            "x-request-id": resp.headers.get("x-request-id", ""),
        }

        if 200 <= resp.status_code < 300:
            return HttpResult(
                ok=True,
                status_code=resp.status_code,
                data=data,
                elapsed_ms=elapsed_ms,
                response_headers=response_headers,
            )

        return HttpResult(
            ok=False,
            status_code=resp.status_code,
            data=data,
            error_code=f"HTTP_{resp.status_code}",
            error_message=f"HTTP {resp.status_code}",
            elapsed_ms=elapsed_ms,
            response_headers=response_headers,
        )
