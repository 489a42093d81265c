"""
Property-path extraction over arbitrary response shapes.

An extractor list such as ``["data", "token"]`` is reduced left to right over
the exchange response envelope ``{"data": ..., "status": ..., "headers": ...}``.
A step that does not resolve (missing key, out-of-range index, null value,
scalar accumulator) leaves the accumulator unchanged; extraction never raises.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Sequence

# Numeric expirations below this are "seconds from now" (expires_in style)
RELATIVE_EXPIRATION_LIMIT = 1_000_000_000
# ...and at or above this they are epoch milliseconds
MILLISECOND_EXPIRATION_LIMIT = 1_000_000_000_000

Extractor = Callable[[Any], Any]


def _step(accumulator: Any, step: Any) -> Any:
    value = None
    if isinstance(accumulator, Mapping):
        value = accumulator.get(step)
        if value is None and not isinstance(step, str):
            value = accumulator.get(str(step))
    elif isinstance(accumulator, (list, tuple)):
        try:
            index = int(step)
        except (TypeError, ValueError):
            index = None
        if index is not None and -len(accumulator) <= index < len(accumulator):
            value = accumulator[index]

    return accumulator if value is None else value


def extract(value: Any, steps: Sequence[Any]) -> Any:
    accumulator = value
    for step in steps:
        accumulator = _step(accumulator, step)
    return accumulator


def make_extractor(steps: Sequence[Any] | None) -> Extractor | None:
    if not steps:
        return None
    frozen = list(steps)
    return lambda response: extract(response, frozen)


def response_envelope(data: Any, status_code: int | None, headers: Mapping[str, str] | None) -> dict[str, Any]:
    return {"data": data, "status": status_code, "headers": dict(headers or {})}


def parse_expiration(value: Any, *, now: datetime) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, str):
        s = value.strip()
        try:
            return parse_expiration(float(s), now=now)
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parse_expiration(parsed, now=now)

    if isinstance(value, (int, float)):
        if value < RELATIVE_EXPIRATION_LIMIT:
            return now + timedelta(seconds=value)
        if value >= MILLISECOND_EXPIRATION_LIMIT:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return datetime.fromtimestamp(value, tz=timezone.utc)

    return None


def is_token_expired(expires_at: datetime | None, *, buffer_seconds: float | None, now: datetime) -> bool:
    if expires_at is None:
        return False
    return now >= expires_at - timedelta(seconds=buffer_seconds or 0)
