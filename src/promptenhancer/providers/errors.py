"""Exception hierarchy for prompt-enhancer provider errors.

Only failures the package itself detects are typed here: configuration and
validation problems found while building a backend.  Errors raised by the
vendor SDKs (``anthropic``, ``openai``, ``google-genai``) are deliberately left
untouched and propagate to the caller as-is; :func:`status_code_of` gives the
retry policy and the HTTP layer a uniform way to read their status codes.
"""

SUPPORTED_PROVIDERS: tuple[str, ...] = (
    "anthropic",
    "openai",
    "openrouter",
    "gemini",
    "openai-compatible",
)


class ProviderError(Exception):
    """Base exception for all provider errors raised by this package.

    Attributes:
        message: Human-readable error description.
        provider: Provider identifier (e.g. ``"openai"``, ``"gemini"``).
            ``None`` when the provider could not be determined.
        original_error: The upstream exception that caused this error, if any.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.message = message
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)


class ConfigurationError(ProviderError):
    """Raised when a backend cannot be built from the resolved configuration.

    Always raised synchronously during construction and never retried.
    """


class UnsupportedProviderError(ConfigurationError):
    """Raised when the requested provider identifier is not one we know."""

    def __init__(self, provider: str) -> None:
        super().__init__(
            f"Unsupported provider: {provider}. "
            f"Supported: {', '.join(SUPPORTED_PROVIDERS)}",
            provider=provider,
        )


class MissingApiKeyError(ConfigurationError):
    """Raised when a provider that mandates an API key was given none."""

    def __init__(self, provider: str, env_var: str | None = None) -> None:
        message = f"API key is required for provider '{provider}'"
        if env_var:
            message += f" (set {env_var})"
        super().__init__(message, provider=provider)


class InvalidEndpointError(ConfigurationError):
    """Raised for a malformed base URL or one using a scheme other than http/https."""


def status_code_of(error: BaseException) -> int | None:
    """Return the HTTP-status-like code carried by *error*, if any.

    The vendor SDKs disagree on naming: ``openai`` and ``anthropic`` use
    ``status_code``, ``google-genai`` uses ``code``, and some transports expose
    ``status``.  Non-integer values (e.g. gRPC status strings) are ignored.
    """
    for attr in ("status_code", "status", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None
