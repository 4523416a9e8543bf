"""Turn a provider identifier plus configuration into a ready-to-use backend.

Resolution per field:

* ``api_key``: environment variable > stored config.
* ``model``: call-time override > stored config > compiled-in default.
* ``base_url``: stored config > compiled-in default (openai / openrouter only).
* everything else: stored config > backend constructor default.

Every call builds a fresh backend; nothing is cached between calls.
"""

from collections.abc import Callable

from promptenhancer.config import (
    DEFAULT_BASE_URLS,
    AppConfig,
    ProviderSettings,
    get_api_key_from_env,
    get_default_model,
)
from promptenhancer.providers.anthropic_backend import AnthropicBackend
from promptenhancer.providers.base import CompletionBackend
from promptenhancer.providers.errors import UnsupportedProviderError
from promptenhancer.providers.gemini_backend import GeminiBackend
from promptenhancer.providers.models import BackendConfig
from promptenhancer.providers.openai_compatible import OpenAICompatibleBackend

KeyLookup = Callable[[str], str | None]


def resolve_backend_config(
    name: str,
    config: AppConfig,
    model_override: str | None = None,
    key_lookup: KeyLookup = get_api_key_from_env,
) -> BackendConfig:
    """Merge environment, stored config, and *model_override* for provider *name*."""
    stored = config.providers.get(name) or ProviderSettings()
    return BackendConfig(
        api_key=key_lookup(name) or stored.api_key,
        base_url=stored.base_url or DEFAULT_BASE_URLS.get(name),
        model=model_override or stored.model or get_default_model(name),
        temperature=stored.temperature,
        max_tokens=stored.max_tokens,
    )


def create_provider(
    name: str,
    config: AppConfig,
    model_override: str | None = None,
    key_lookup: KeyLookup = get_api_key_from_env,
) -> CompletionBackend:
    """Construct the backend registered under *name*.

    Args:
        name: One of ``anthropic``, ``openai``, ``openrouter``, ``gemini``,
            ``openai-compatible``.
        config: Resolved application configuration.
        model_override: Model requested for this call only.
        key_lookup: Maps a provider identifier to its secret; defaults to
            reading the provider's environment variable.

    Raises:
        UnsupportedProviderError: If *name* is not a known identifier.
        ConfigurationError: If the backend rejects the resolved settings
            (missing mandatory key, bad endpoint, out-of-range parameter).
    """
    if name == "anthropic":
        return AnthropicBackend(resolve_backend_config(name, config, model_override, key_lookup))
    if name == "gemini":
        return GeminiBackend(resolve_backend_config(name, config, model_override, key_lookup))
    if name in ("openai", "openrouter", "openai-compatible"):
        return OpenAICompatibleBackend(
            name, resolve_backend_config(name, config, model_override, key_lookup)
        )
    raise UnsupportedProviderError(name)
