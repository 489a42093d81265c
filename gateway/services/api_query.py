from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.core.errors import ConfigurationQueryError
from gateway.models.api import Api


EQUALS = "equals"
IN = "in"


@dataclass(frozen=True)
class Condition:
    op: str  # "equals" | "in"
    value: Any


def translate_filter_map(filter_map: Mapping[str, Any] | None) -> dict[str, Condition]:
    """
    Sequence value -> membership, anything else -> equality.
    A missing filter map means "all apis".
    """
    if filter_map is None:
        return {}
    if not isinstance(filter_map, Mapping):
        raise ConfigurationQueryError("filter map must be an object")

    out: dict[str, Condition] = {}
    for key, value in filter_map.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            out[key] = Condition(IN, list(value))
        else:
            out[key] = Condition(EQUALS, value)
    return out


def build_api_query(filter_map: Mapping[str, Any] | None) -> Select:
    columns = Api.__table__.columns
    stmt = select(Api)

    for key, cond in translate_filter_map(filter_map).items():
        if key not in columns:
            raise ConfigurationQueryError(f"unknown filter field: {key}")
        column = columns[key]
        if cond.op == IN:
            stmt = stmt.where(column.in_(cond.value))
        elif cond.value is None:
            stmt = stmt.where(column.is_(None))
        else:
            stmt = stmt.where(column == cond.value)

    return stmt.order_by(Api.id.asc())


class ApiRepository:
    def __init__(self, db: AsyncSession):
        self._db = db

    async def find_apis(self, filter_map: Mapping[str, Any] | None) -> Sequence[Api]:
        stmt = build_api_query(filter_map)
        try:
            return (await self._db.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as e:
            # OSError: driver-level connect failures (refused, timeout) surface unwrapped
            raise ConfigurationQueryError("api descriptor query failed") from e
