"""Completion backend abstraction layer.

Public surface area for the providers package.  Import from here rather than
from the individual submodules so internal structure can change freely.

Example::

    from promptenhancer.config import load_config
    from promptenhancer.providers import create_provider

    backend = create_provider("openrouter", load_config(), model_override="openai/gpt-4o")
    text = await backend.complete_prompt("Rewrite this prompt: ...")
    print(backend.name, backend.model, text)
"""

from promptenhancer.providers.anthropic_backend import AnthropicBackend
from promptenhancer.providers.base import CompletionBackend
from promptenhancer.providers.errors import (
    SUPPORTED_PROVIDERS,
    ConfigurationError,
    InvalidEndpointError,
    MissingApiKeyError,
    ProviderError,
    UnsupportedProviderError,
    status_code_of,
)
from promptenhancer.providers.factory import create_provider, resolve_backend_config
from promptenhancer.providers.gemini_backend import GeminiBackend
from promptenhancer.providers.models import BackendConfig
from promptenhancer.providers.openai_compatible import OpenAICompatibleBackend
from promptenhancer.providers.retry import with_retry

__all__ = [
    # Capability and backends
    "CompletionBackend",
    "AnthropicBackend",
    "GeminiBackend",
    "OpenAICompatibleBackend",
    # Construction
    "BackendConfig",
    "SUPPORTED_PROVIDERS",
    "create_provider",
    "resolve_backend_config",
    # Retry
    "with_retry",
    # Errors
    "ProviderError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "MissingApiKeyError",
    "InvalidEndpointError",
    "status_code_of",
]
