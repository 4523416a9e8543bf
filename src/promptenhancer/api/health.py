from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from opentelemetry import trace

from promptenhancer.config import settings
from promptenhancer.providers import ProviderError, create_provider

router = APIRouter(prefix="/health", tags=["health"])
log = structlog.get_logger()
tracer = trace.get_tracer(__name__)


@router.get("")
async def health() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": settings.app_version,
        }
    )


@router.get("/live")
async def liveness() -> JSONResponse:
    """Liveness probe: always returns 200 if the process is running."""
    return JSONResponse(content={"status": "alive"})


@router.get("/ready")
async def readiness(request: Request) -> JSONResponse:
    """Readiness probe: the default provider must be constructible.

    Construction only validates configuration (key present, endpoint well
    formed); no request is sent to the vendor.
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": {"service": "not initialised"}},
        )

    default_provider = service.config.default_provider
    with tracer.start_as_current_span("health.readiness"):
        try:
            backend = create_provider(
                default_provider, service.config, key_lookup=service.key_lookup
            )
        except ProviderError as exc:
            log.warning("readiness_check_failed", provider=default_provider, error=exc.message)
            return JSONResponse(
                status_code=503,
                content={"status": "unavailable", "errors": {default_provider: exc.message}},
            )

    return JSONResponse(
        content={
            "status": "ready",
            "checks": {"provider": backend.name, "model": backend.model},
        }
    )
