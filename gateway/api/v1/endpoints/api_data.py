from fastapi import APIRouter, Depends

from gateway.api.dependencies import get_api_repository, get_credential_decryptor, get_http_client
from gateway.core.crypto import CredentialDecryptor
from gateway.schemas.api_data import ApiDataMapRequest, ApiDataMapResponse
from gateway.services.api_data_map import get_api_data_map
from gateway.services.api_query import ApiRepository
from gateway.services.http_client import HubHttpClient

router = APIRouter()


@router.post("/api-data-map", response_model=ApiDataMapResponse)
async def create_api_data_map(
    payload: ApiDataMapRequest | None = None,
    repository: ApiRepository = Depends(get_api_repository),
    decryptor: CredentialDecryptor = Depends(get_credential_decryptor),
    client: HubHttpClient = Depends(get_http_client),
) -> ApiDataMapResponse:
    """
    Call every api matching `filter_map` concurrently and return one record per api name.
    Per-api failures are reported inside the map; only a failed descriptor query fails the call.
    """
    return await get_api_data_map(
        repository,
        payload=payload or ApiDataMapRequest(),
        decryptor=decryptor,
        client=client,
    )
