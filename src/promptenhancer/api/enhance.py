"""POST /v1/enhance and GET /v1/providers endpoints.

This is the only layer that translates errors: configuration and template
problems become 400, vendor auth/validation/rate-limit statuses are passed
through, and everything else becomes 502.  Messages are sanitised before they
leave the process because vendor errors can echo keys and internal URLs.
"""

import re
import time
import uuid
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram
from pydantic import BaseModel, Field

from promptenhancer.config import settings
from promptenhancer.providers import (
    SUPPORTED_PROVIDERS,
    ConfigurationError,
    resolve_backend_config,
    status_code_of,
)
from promptenhancer.services import (
    ContextMessage,
    EnhancementService,
    EnhanceOptions,
    InvalidTemplateError,
)

router = APIRouter(prefix="/v1", tags=["enhance"])

_log = structlog.get_logger(__name__)

ENHANCE_REQUESTS = Counter(
    "prompt_enhancer_requests_total",
    "Enhancement requests by provider and outcome.",
    ["provider", "outcome"],
)
ENHANCE_DURATION = Histogram(
    "prompt_enhancer_request_duration_seconds",
    "Wall-clock time of enhancement requests, retries included.",
    ["provider"],
)

# Vendor statuses that are meaningful to the caller as-is.
_PASSTHROUGH_STATUS = frozenset({400, 401, 403, 429})

_MAX_ERROR_LENGTH = 500
_SECRET_PATTERN = re.compile(r"\b(sk-|key-|api-|bearer\s+)[a-zA-Z0-9_-]{8,}\b", re.IGNORECASE)
_URL_PATTERN = re.compile(r"https?://[^\s)>\"']+", re.IGNORECASE)

ProviderName = Literal["anthropic", "openai", "openrouter", "gemini", "openai-compatible"]


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------


class EnhanceRequest(BaseModel):
    """Body of ``POST /v1/enhance``."""

    text: str = Field(min_length=1, description="The prompt text to enhance")
    provider: ProviderName | None = Field(
        default=None, description="Provider to use; the configured default if omitted"
    )
    model: str | None = Field(default=None, description="Model overriding the provider default")
    context: list[ContextMessage] | None = Field(
        default=None, description="Optional conversation history for context"
    )
    template: str | None = Field(
        default=None, description="Custom template; use ${userInput} as the placeholder"
    )


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def get_service(request: Request) -> EnhancementService:
    """Return the shared :class:`EnhancementService` from ``app.state``."""
    service: EnhancementService | None = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Enhancement service not initialised")
    return service


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/enhance", response_model=None)
async def enhance(
    body: EnhanceRequest,
    service: EnhancementService = Depends(get_service),
) -> JSONResponse:
    """Enhance a prompt and return the text with the provider and model used."""
    request_id = str(uuid.uuid4())
    start_time = time.monotonic()
    provider_name = body.provider or service.config.default_provider
    log = _log.bind(request_id=request_id, provider=provider_name, model=body.model)

    if len(body.text) > settings.max_text_length:
        ENHANCE_REQUESTS.labels(provider=provider_name, outcome="rejected").inc()
        raise HTTPException(
            status_code=400,
            detail={
                "message": (
                    "The 'text' parameter exceeds the maximum length of "
                    f"{settings.max_text_length} characters"
                ),
                "type": "invalid_request_error",
            },
        )

    log.info("enhance_request_start", text_chars=len(body.text))

    try:
        result = await service.enhance(
            EnhanceOptions(
                text=body.text,
                provider=body.provider,
                model=body.model,
                context=body.context,
                template=body.template,
            )
        )
    except Exception as exc:
        message = sanitize_error_message(exc)
        status_code = error_status(exc)
        duration_ms = round((time.monotonic() - start_time) * 1000, 2)
        log.error(
            "enhance_request_error",
            error_type=type(exc).__name__,
            error=message,
            status_code=status_code,
            duration_ms=duration_ms,
        )
        ENHANCE_REQUESTS.labels(provider=provider_name, outcome="error").inc()
        raise HTTPException(
            status_code=status_code,
            detail={"message": f"Enhancement failed: {message}", "type": type(exc).__name__},
            headers={"X-Request-ID": request_id, "X-Provider": provider_name},
        ) from exc

    elapsed = time.monotonic() - start_time
    ENHANCE_REQUESTS.labels(provider=result.provider, outcome="success").inc()
    ENHANCE_DURATION.labels(provider=result.provider).observe(elapsed)
    log.info("enhance_request_complete", duration_ms=round(elapsed * 1000, 2))

    return JSONResponse(
        content={
            "enhanced_text": result.enhanced_text,
            "provider": result.provider,
            "model": result.model,
        },
        headers={"X-Request-ID": request_id, "X-Provider": result.provider},
    )


@router.get("/providers")
async def list_providers(
    service: EnhancementService = Depends(get_service),
) -> JSONResponse:
    """Describe every supported provider without constructing any of them."""
    providers = []
    for name in SUPPORTED_PROVIDERS:
        resolved = resolve_backend_config(name, service.config, key_lookup=service.key_lookup)
        providers.append(
            {
                "name": name,
                "model": resolved.model,
                "has_api_key": bool(resolved.api_key),
            }
        )
    return JSONResponse(
        content={"default": service.config.default_provider, "providers": providers}
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def error_status(error: Exception) -> int:
    """Pick the HTTP status returned to the caller for *error*."""
    if isinstance(error, ConfigurationError | InvalidTemplateError):
        return 400
    status = status_code_of(error)
    if status in _PASSTHROUGH_STATUS:
        return status
    return 502


def sanitize_error_message(error: BaseException) -> str:
    """Redact key-like tokens and URLs from *error*'s message and cap its length."""
    sanitized = _SECRET_PATTERN.sub("[REDACTED]", str(error))
    sanitized = _URL_PATTERN.sub("[URL_REDACTED]", sanitized)
    if len(sanitized) > _MAX_ERROR_LENGTH:
        sanitized = sanitized[:_MAX_ERROR_LENGTH] + "... (truncated)"
    return sanitized
