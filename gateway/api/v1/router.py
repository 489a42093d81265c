from fastapi import APIRouter

from gateway.api.v1.endpoints.health import router as health_router
from gateway.api.v1.endpoints.api_data import router as api_data_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(api_data_router, tags=["api-data"])
