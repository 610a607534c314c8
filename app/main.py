"""FastAPI application entrypoint. No business logic; only wiring, middleware and error envelopes."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
import traceback
import uuid
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.schemas.auth import ApiResponse

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Traceback lines included in dev-mode error responses.
DEV_TRACE_LINES = 5

app = FastAPI(
    title="Escolar API",
    version="0.1.0",
    docs_url="/docs" if settings.APP_ENV == "dev" else None,
    redoc_url="/redoc" if settings.APP_ENV == "dev" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


def _envelope(status_code: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "HTTP %s %s responded %s in %.4f ms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies get the envelope with one message per invalid field."""
    errors = [
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:])}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    logger.warning("Invalid input on %s %s: %s", request.method, request.url.path, errors)
    return _envelope(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ApiResponse(is_success=False, message="Invalid input data", data=errors),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Unhandled errors: generic message in prod, exception details and a short trace in dev."""
    trace_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    logger.error(
        "Unhandled exception on %s %s (trace_id=%s)",
        request.method,
        request.url.path,
        trace_id,
        exc_info=exc,
    )
    data: dict[str, object] = {
        "traceId": trace_id,
        "timeStamp": datetime.now(UTC).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    message = "An internal server error occurred"
    if settings.APP_ENV == "dev":
        message = str(exc) or message
        trace = traceback.format_exception(type(exc), exc, exc.__traceback__)
        data["exceptionType"] = type(exc).__name__
        data["stackTrace"] = "".join(trace).splitlines()[:DEV_TRACE_LINES]
    return _envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ApiResponse(is_success=False, message=message, data=data),
    )


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Escolar API"}
