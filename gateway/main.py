import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gateway.api.dependencies import get_http_client
from gateway.api.v1.router import router as v1_router
from gateway.core.errors import ConfigurationQueryError
from gateway.core.telemetry import setup_telemetry
from gateway.schemas.api_data import FailureResponse
from gateway.services.api_data_map import BATCH_ERROR_MESSAGE, BATCH_ERROR_SUGGESTION


logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await get_http_client().aclose()
    get_http_client.cache_clear()


app = FastAPI(title="API Gateway Hub", version="0.1.0", lifespan=lifespan)


@app.exception_handler(ConfigurationQueryError)
async def configuration_query_error_handler(request: Request, exc: ConfigurationQueryError) -> JSONResponse:
    log.exception("api data map failed: %s", exc, exc_info=exc)
    body = FailureResponse(message=BATCH_ERROR_MESSAGE, suggestion=BATCH_ERROR_SUGGESTION)
    return JSONResponse(status_code=500, content=body.model_dump())


setup_telemetry(app)
app.include_router(v1_router)
