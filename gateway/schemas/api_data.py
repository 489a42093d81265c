from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiDataMapRequest(BaseModel):
    # Extra top-level objects are per-target overrides keyed by api name.
    # The maps stay untyped: a malformed filter map is a batch error, not a 422.
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    filter_map: Any = Field(default=None, alias="filterMap")
    global_replacement_map: Any = Field(default=None, alias="globalReplacementMap")
    local_replacement_map: Any = Field(default=None, alias="localReplacementMap")

    def global_overrides(self) -> dict[str, Any] | None:
        return self.global_replacement_map if isinstance(self.global_replacement_map, dict) else None

    def target_overrides(self) -> dict[str, dict[str, Any]]:
        out: dict[str, dict[str, Any]] = {
            name: value for name, value in (self.model_extra or {}).items() if isinstance(value, dict)
        }
        if isinstance(self.local_replacement_map, dict):
            out.update(
                {name: value for name, value in self.local_replacement_map.items() if isinstance(value, dict)}
            )
        return out


class ApiRecord(BaseModel):
    # success and error records must never validate as each other
    model_config = ConfigDict(extra="forbid")

    timestamp: str
    status: bool

    id: int | None = None
    name: str
    group_name: str | None = None
    is_api_active: bool | None = None
    created_at: str | None = None
    updated_at: str | None = None

    # Effective parameters the call was made with (secrets redacted)
    parameters: dict[str, Any] = Field(default_factory=dict)


class SuccessRecord(ApiRecord):
    status: bool = True
    data: Any = None


class ErrorRecord(ApiRecord):
    status: bool = False
    message: str
    suggestion: str


class ApiDataMapResponse(BaseModel):
    timestamp: str
    status: bool = True
    data: dict[str, SuccessRecord | ErrorRecord]


class FailureResponse(BaseModel):
    message: str
    suggestion: str
