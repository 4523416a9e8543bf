"""Tests for POST /v1/enhance and GET /v1/providers."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import openai
import pytest
from httpx import ASGITransport, AsyncClient

from promptenhancer.api.enhance import error_status, sanitize_error_message
from promptenhancer.config import AppConfig, ProviderSettings
from promptenhancer.main import app
from promptenhancer.providers import (
    InvalidEndpointError,
    MissingApiKeyError,
    UnsupportedProviderError,
)
from promptenhancer.services import (
    EnhancementService,
    EnhanceOptions,
    EnhanceResult,
    InvalidTemplateError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_DUMMY_REQ = httpx.Request("POST", "https://api.example.com/v1/messages")


def _make_service(
    result: EnhanceResult | None = None,
    error: Exception | None = None,
    config: AppConfig | None = None,
) -> MagicMock:
    """Return a mock service whose enhance() returns *result* or raises *error*."""
    service = MagicMock()
    service.config = config or AppConfig()
    if error is not None:
        service.enhance = AsyncMock(side_effect=error)
    else:
        service.enhance = AsyncMock(
            return_value=result
            or EnhanceResult(
                success=True,
                enhanced_text="Enhanced prompt text",
                provider="anthropic",
                model="claude-sonnet-4-5-20250929",
            )
        )
    return service


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def cleanup_service():
    """Remove app.state.service after every test to prevent cross-test leakage."""
    yield
    if hasattr(app.state, "service"):
        del app.state.service


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# get_service() dependency
# ---------------------------------------------------------------------------


class TestGetService:
    async def test_missing_service_returns_503(self, client: AsyncClient) -> None:
        response = await client.post("/v1/enhance", json={"text": "hi"})
        assert response.status_code == 503


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


class TestEnhanceSuccess:
    async def test_returns_enhanced_text_and_provenance(self, client: AsyncClient) -> None:
        app.state.service = _make_service()

        response = await client.post("/v1/enhance", json={"text": "write a function"})

        assert response.status_code == 200
        assert response.json() == {
            "enhanced_text": "Enhanced prompt text",
            "provider": "anthropic",
            "model": "claude-sonnet-4-5-20250929",
        }

    async def test_headers(self, client: AsyncClient) -> None:
        app.state.service = _make_service()

        response = await client.post("/v1/enhance", json={"text": "hi"})

        assert response.headers["X-Provider"] == "anthropic"
        assert response.headers["X-Request-ID"]

    async def test_all_fields_forwarded_to_service(self, client: AsyncClient) -> None:
        service = _make_service()
        app.state.service = service

        await client.post(
            "/v1/enhance",
            json={
                "text": "continue",
                "provider": "openrouter",
                "model": "openai/gpt-4o",
                "context": [{"role": "user", "content": "Hello"}],
                "template": "Better: ${userInput}",
            },
        )

        options: EnhanceOptions = service.enhance.await_args.args[0]
        assert options.text == "continue"
        assert options.provider == "openrouter"
        assert options.model == "openai/gpt-4o"
        assert options.context is not None
        assert options.context[0].content == "Hello"
        assert options.template == "Better: ${userInput}"


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


class TestRequestValidation:
    async def test_missing_text_is_422(self, client: AsyncClient) -> None:
        app.state.service = _make_service()
        response = await client.post("/v1/enhance", json={})
        assert response.status_code == 422

    async def test_empty_text_is_422(self, client: AsyncClient) -> None:
        app.state.service = _make_service()
        response = await client.post("/v1/enhance", json={"text": ""})
        assert response.status_code == 422

    async def test_unknown_provider_is_422(self, client: AsyncClient) -> None:
        app.state.service = _make_service()
        response = await client.post("/v1/enhance", json={"text": "hi", "provider": "mistral"})
        assert response.status_code == 422

    async def test_invalid_context_role_is_422(self, client: AsyncClient) -> None:
        app.state.service = _make_service()
        response = await client.post(
            "/v1/enhance",
            json={"text": "hi", "context": [{"role": "system", "content": "x"}]},
        )
        assert response.status_code == 422

    async def test_text_over_limit_is_400(self, client: AsyncClient, mocker) -> None:
        mocker.patch("promptenhancer.api.enhance.settings.max_text_length", 10)
        service = _make_service()
        app.state.service = service

        response = await client.post("/v1/enhance", json={"text": "x" * 11})

        assert response.status_code == 400
        assert "maximum length of 10" in response.json()["detail"]["message"]
        service.enhance.assert_not_awaited()


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestEnhanceErrors:
    @pytest.mark.parametrize(
        ("error", "expected_status"),
        [
            (UnsupportedProviderError("bogus"), 400),
            (MissingApiKeyError("openai", "OPENAI_API_KEY"), 400),
            (InvalidEndpointError("bad url"), 400),
            (InvalidTemplateError("Template must contain the ${userInput} placeholder"), 400),
            (
                anthropic.AuthenticationError(
                    "invalid key", response=httpx.Response(401, request=_DUMMY_REQ), body=None
                ),
                401,
            ),
            (
                openai.PermissionDeniedError(
                    "forbidden", response=httpx.Response(403, request=_DUMMY_REQ), body=None
                ),
                403,
            ),
            (
                openai.RateLimitError(
                    "slow down", response=httpx.Response(429, request=_DUMMY_REQ), body=None
                ),
                429,
            ),
            (
                openai.InternalServerError(
                    "upstream", response=httpx.Response(500, request=_DUMMY_REQ), body=None
                ),
                502,
            ),
            (openai.APIConnectionError(request=_DUMMY_REQ), 502),
            (RuntimeError("unexpected"), 502),
        ],
    )
    async def test_status_mapping(
        self, client: AsyncClient, error: Exception, expected_status: int
    ) -> None:
        app.state.service = _make_service(error=error)

        response = await client.post("/v1/enhance", json={"text": "hi"})

        assert response.status_code == expected_status
        detail = response.json()["detail"]
        assert detail["type"] == type(error).__name__
        assert detail["message"].startswith("Enhancement failed: ")

    async def test_error_message_sanitised(self, client: AsyncClient) -> None:
        app.state.service = _make_service(
            error=RuntimeError("key sk-abcdefghijklmnop rejected by https://internal.host/api")
        )

        response = await client.post("/v1/enhance", json={"text": "hi"})

        message = response.json()["detail"]["message"]
        assert "sk-abcdefghijklmnop" not in message
        assert "internal.host" not in message
        assert "[REDACTED]" in message
        assert "[URL_REDACTED]" in message


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestSanitizeErrorMessage:
    @pytest.mark.parametrize(
        "secret",
        ["sk-1234567890abcdef", "key-ABCDEFGH1234", "api-zzzzzzzzzz", "Bearer abcdefgh12345"],
    )
    def test_key_like_tokens_redacted(self, secret: str) -> None:
        sanitized = sanitize_error_message(RuntimeError(f"failed with {secret} here"))
        assert secret not in sanitized
        assert "[REDACTED]" in sanitized

    def test_short_tokens_left_alone(self) -> None:
        assert sanitize_error_message(RuntimeError("sk-short")) == "sk-short"

    def test_urls_redacted(self) -> None:
        sanitized = sanitize_error_message(RuntimeError("POST http://10.0.0.1:8080/v1 failed"))
        assert sanitized == "POST [URL_REDACTED] failed"

    def test_long_messages_truncated(self) -> None:
        sanitized = sanitize_error_message(RuntimeError("x" * 600))
        assert sanitized == "x" * 500 + "... (truncated)"


class TestErrorStatus:
    def test_plain_exception_is_bad_gateway(self) -> None:
        assert error_status(ValueError("boom")) == 502


# ---------------------------------------------------------------------------
# GET /v1/providers
# ---------------------------------------------------------------------------


class TestListProviders:
    async def test_lists_every_provider(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        for var in (
            "ANTHROPIC_API_KEY",
            "OPENAI_API_KEY",
            "OPENROUTER_API_KEY",
            "GEMINI_API_KEY",
            "OPENAI_COMPATIBLE_API_KEY",
        ):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        app.state.service = EnhancementService(
            AppConfig(
                default_provider="gemini",
                providers={"openai": ProviderSettings(model="gpt-4o-mini")},
            )
        )

        response = await client.get("/v1/providers")

        assert response.status_code == 200
        body = response.json()
        assert body["default"] == "gemini"
        by_name = {p["name"]: p for p in body["providers"]}
        assert list(by_name) == [
            "anthropic",
            "openai",
            "openrouter",
            "gemini",
            "openai-compatible",
        ]
        assert by_name["openai"]["model"] == "gpt-4o-mini"
        assert by_name["gemini"]["has_api_key"] is True
        assert by_name["anthropic"]["has_api_key"] is False
        assert "g-key" not in response.text
