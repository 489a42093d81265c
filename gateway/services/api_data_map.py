from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Mapping

from gateway.auth.registry import build_strategy
from gateway.core.crypto import CredentialDecryptor
from gateway.models.api import Api
from gateway.schemas.api_data import ApiDataMapRequest, ApiDataMapResponse, ErrorRecord, SuccessRecord
from gateway.services.api_query import ApiRepository
from gateway.services.http_client import HubHttpClient
from gateway.services.parameters import EffectiveParameters, resolve_parameters
from gateway.services.redaction import redact_payload
from gateway.services.request_executor import build_outbound_request, execute


log = logging.getLogger(__name__)

ERROR_MESSAGE = "Unexpected error occurred while processing the data."
ERROR_SUGGESTION = "Please try again later. If this issue persists, contact our support team for assistance."

BATCH_ERROR_MESSAGE = "Something went wrong."
BATCH_ERROR_SUGGESTION = ERROR_SUGGESTION


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%d-%m-%Y %H:%M:%S")


def _descriptor_fields(api: Api) -> dict[str, Any]:
    return {
        "id": api.id,
        "name": api.name,
        "group_name": api.group_name,
        "is_api_active": api.is_api_active,
        "created_at": str(api.created_at) if api.created_at is not None else None,
        "updated_at": str(api.updated_at) if api.updated_at is not None else None,
    }


def _echo(params: EffectiveParameters | None) -> dict[str, Any]:
    return redact_payload(params.as_dict()) if params is not None else {}


async def process_api(
    api: Api,
    *,
    global_overrides: Mapping[str, Any] | None,
    target_overrides: Mapping[str, Mapping[str, Any]] | None,
    decryptor: CredentialDecryptor,
    client: HubHttpClient,
) -> tuple[str, SuccessRecord | ErrorRecord]:
    """
    Resolve, authenticate and call one api. Never raises: any failure becomes
    an ErrorRecord with a generic message, the detail goes to the log.
    """
    timestamp = utc_timestamp()
    params: EffectiveParameters | None = None

    try:
        params = resolve_parameters(api, global_overrides=global_overrides, target_overrides=target_overrides)
        strategy = build_strategy(params, decryptor, target_name=api.name)
        request = build_outbound_request(params, target_name=api.name)
        result = await execute(strategy, request, client=client, target_name=api.name)
    except Exception:
        log.exception("api data processing failed: api=%s", api.name)
        return api.name, ErrorRecord(
            timestamp=timestamp,
            **_descriptor_fields(api),
            parameters=_echo(params),
            message=ERROR_MESSAGE,
            suggestion=ERROR_SUGGESTION,
        )

    return api.name, SuccessRecord(
        timestamp=timestamp,
        **_descriptor_fields(api),
        parameters=_echo(params),
        data=result.data,
    )


async def get_api_data_map(
    repository: ApiRepository,
    *,
    payload: ApiDataMapRequest,
    decryptor: CredentialDecryptor,
    client: HubHttpClient,
) -> ApiDataMapResponse:
    timestamp = utc_timestamp()
    started = time.perf_counter()

    # ConfigurationQueryError propagates: the whole batch fails
    apis = await repository.find_apis(payload.filter_map)

    target_overrides = payload.target_overrides()
    entries = await asyncio.gather(
        *(
            process_api(
                api,
                global_overrides=payload.global_overrides(),
                target_overrides=target_overrides,
                decryptor=decryptor,
                client=client,
            )
            for api in apis
        )
    )

    # Duplicate names: last entry wins
    data = dict(entries)

    ok = sum(1 for record in data.values() if record.status)
    log.info(
        "api data map complete: %d/%d apis ok, %dms",
        ok,
        len(data),
        int((time.perf_counter() - started) * 1000),
    )

    return ApiDataMapResponse(timestamp=timestamp, status=True, data=data)
