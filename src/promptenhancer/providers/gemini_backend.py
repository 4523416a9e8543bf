"""Backend for the Google Gemini API via ``google-genai``."""

import logging

from google import genai
from google.genai import types

from promptenhancer.providers.errors import MissingApiKeyError
from promptenhancer.providers.models import BackendConfig
from promptenhancer.providers.retry import with_retry

DEFAULT_MODEL = "gemini-2.0-flash"

logging.getLogger("google_genai").setLevel(logging.WARNING)


class GeminiBackend:
    """Sends the prompt as flat content through the async Gemini client.

    Unlike the other backends, an absent key is rejected at construction:
    ``genai.Client`` would otherwise fall back to ambient Google credentials.

    Raises:
        MissingApiKeyError: If ``config.api_key`` is empty.
    """

    def __init__(self, config: BackendConfig) -> None:
        if not config.api_key:
            raise MissingApiKeyError("gemini", "GEMINI_API_KEY")
        self._name = "gemini"
        self._model = config.model or DEFAULT_MODEL
        self._generation_config = types.GenerateContentConfig(
            temperature=config.resolved_temperature,
            max_output_tokens=config.resolved_max_tokens,
        )
        self._client = genai.Client(api_key=config.api_key)

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    async def complete_prompt(self, prompt: str) -> str:
        async def _call() -> str:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=self._generation_config,
            )
            return response.text or ""

        return await with_retry(_call)
