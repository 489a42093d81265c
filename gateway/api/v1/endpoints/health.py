from fastapi import APIRouter

from gateway.auth.registry import supported_authentication_types

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "authentication_types": supported_authentication_types()}
