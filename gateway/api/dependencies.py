from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.core.config import build_keyring, settings
from gateway.core.crypto import CredentialDecryptor
from gateway.core.db import get_db
from gateway.services.api_query import ApiRepository
from gateway.services.http_client import HubHttpClient


@lru_cache
def get_http_client() -> HubHttpClient:
    """Process-wide outbound client (one connection pool for every target)."""
    return HubHttpClient(timeout_seconds=settings.http_timeout_seconds)


@lru_cache
def get_credential_decryptor() -> CredentialDecryptor:
    return CredentialDecryptor(build_keyring(settings))


def get_api_repository(db: AsyncSession = Depends(get_db)) -> ApiRepository:
    return ApiRepository(db)
