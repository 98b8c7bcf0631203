import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import router
from app.core.config import settings
from app.core.tracing import instrument_app, setup_tracing, shutdown_tracing
from app.services.http_client import http_client_manager
from app.shared.correlation import CorrelationMiddleware
from app.shared.errors import (
    HealthJournalError,
    exception_response,
    get_correlation_id,
    internal_error,
    validation_error,
)
from app.shared.logging_config import setup_logging

SERVICE_NAME = "plusnote-health-journal"

setup_logging(service_name=SERVICE_NAME)
logger = logging.getLogger("Plusnote.API")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_tracing(SERVICE_NAME)
    await http_client_manager.startup()
    yield
    await http_client_manager.shutdown()
    shutdown_tracing()


app = FastAPI(
    title="Plusnote Health Journal Service",
    description="Health journaling, weekly pattern analysis and physician reports",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-correlation-id"],
    expose_headers=["Content-Disposition", "X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)


@app.exception_handler(HealthJournalError)
async def handle_domain_error(request: Request, exc: HealthJournalError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"{request.method} {request.url.path} failed: {exc.message}",
        extra={"error_code": exc.code.value, "status_code": exc.status_code},
    )
    return exception_response(exc, correlation_id=get_correlation_id(request))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = [
        {"field": ".".join(str(part) for part in error["loc"]), "problem": error["msg"]}
        for error in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path} rejected: invalid request")
    return validation_error(
        "Request validation failed",
        details={"problems": problems},
        correlation_id=get_correlation_id(request),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return internal_error(correlation_id=get_correlation_id(request))


app.include_router(router, prefix="/api/v1")
instrument_app(app)


@app.get("/")
async def root():
    return {"message": "Plusnote Health Journal Service Running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
