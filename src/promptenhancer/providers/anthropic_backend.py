"""Backend for the Anthropic Messages API."""

import logging

import anthropic

from promptenhancer.providers.errors import MissingApiKeyError
from promptenhancer.providers.models import BackendConfig
from promptenhancer.providers.retry import with_retry

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"

logging.getLogger("anthropic").setLevel(logging.WARNING)


class AnthropicBackend:
    """Sends the prompt as a single user message via ``AsyncAnthropic``.

    A missing key does not fail construction.  The SDK falls back to
    ``ANTHROPIC_API_KEY`` / ``ANTHROPIC_AUTH_TOKEN``; if neither resolves, the
    first :meth:`complete_prompt` raises :class:`MissingApiKeyError` before any
    request is sent, so it is never retried.
    """

    def __init__(self, config: BackendConfig) -> None:
        self._name = "anthropic"
        self._model = config.model or DEFAULT_MODEL
        self._temperature = config.resolved_temperature
        self._max_tokens = config.resolved_max_tokens
        self._client = anthropic.AsyncAnthropic(api_key=config.api_key or None)
        self._has_credentials = bool(self._client.api_key or self._client.auth_token)

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    async def complete_prompt(self, prompt: str) -> str:
        if not self._has_credentials:
            raise MissingApiKeyError(self._name, "ANTHROPIC_API_KEY")

        async def _call() -> str:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
            return self._extract_text(response)

        return await with_retry(_call)

    @staticmethod
    def _extract_text(response: anthropic.types.Message) -> str:
        """Return the first ``text`` block of *response*, or ``""`` if there is none."""
        for block in response.content:
            if block.type == "text":
                return block.text
        return ""
