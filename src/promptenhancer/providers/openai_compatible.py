"""Backend for any API speaking the OpenAI chat-completions wire format.

One class serves three identifiers:

* ``openai``: api.openai.com, key required.
* ``openrouter``: openrouter.ai, key required.
* ``openai-compatible``: a user-configured endpoint (Ollama, LM Studio, vLLM,
  ...), key optional since local servers are often unauthenticated.
"""

import logging

import openai
from pydantic import AnyUrl, TypeAdapter, ValidationError

from promptenhancer.providers.errors import InvalidEndpointError, MissingApiKeyError
from promptenhancer.providers.models import BackendConfig
from promptenhancer.providers.retry import with_retry

DEFAULT_MODEL = "gpt-4o"

KEY_REQUIRED: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}

# Sent when a generic deployment has no key; the SDK rejects an empty key and
# unauthenticated servers (vLLM, Ollama) ignore the value.
UNAUTHENTICATED_API_KEY = "EMPTY"

_ALLOWED_SCHEMES = frozenset({"http", "https"})
_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)

logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


def validate_base_url(base_url: str) -> str:
    """Return *base_url* unchanged if it is an absolute http(s) URL.

    Raises:
        InvalidEndpointError: If *base_url* does not parse as a URL, or parses
            with a scheme other than ``http``/``https`` (e.g. ``file://``).
    """
    try:
        parsed = _url_adapter.validate_python(base_url)
    except ValidationError as exc:
        raise InvalidEndpointError(
            f"Invalid base URL: {base_url!r} is not a valid URL",
            original_error=exc,
        ) from exc

    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise InvalidEndpointError(
            f"Invalid base URL scheme '{parsed.scheme}': only http and https are allowed"
        )
    return base_url


class OpenAICompatibleBackend:
    """Chat-completions backend parameterised by identifier and endpoint.

    Args:
        name: Provider identifier reported back to callers.
        config: Resolved backend settings.  ``base_url=None`` lets the SDK use
            its own default endpoint.

    Raises:
        InvalidEndpointError: If ``config.base_url`` is malformed or not http(s).
        MissingApiKeyError: If *name* is ``openai`` or ``openrouter`` and no key
            was supplied.
    """

    def __init__(self, name: str, config: BackendConfig) -> None:
        base_url = validate_base_url(config.base_url) if config.base_url else None

        if name in KEY_REQUIRED and not config.api_key:
            raise MissingApiKeyError(name, KEY_REQUIRED[name])

        self._name = name
        self._model = config.model or DEFAULT_MODEL
        self._temperature = config.resolved_temperature
        self._max_tokens = config.resolved_max_tokens
        self._client = openai.AsyncOpenAI(
            api_key=config.api_key or UNAUTHENTICATED_API_KEY, base_url=base_url
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return self._model

    async def complete_prompt(self, prompt: str) -> str:
        async def _call() -> str:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
            if not response.choices:
                return ""
            return response.choices[0].message.content or ""

        return await with_retry(_call)
