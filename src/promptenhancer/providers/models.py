"""Configuration value handed to a backend at construction time.

A :class:`BackendConfig` is produced by
:func:`~promptenhancer.providers.factory.create_provider` after merging
environment, stored config, and call-time overrides.  It is immutable
(``frozen=True``) and validated at construction time so an out-of-range
sampling parameter fails fast instead of surfacing as a vendor 400.
"""

from dataclasses import dataclass

from promptenhancer.providers.errors import ConfigurationError

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


@dataclass(frozen=True)
class BackendConfig:
    """Resolved settings for a single backend instance.

    Args:
        api_key: Secret used to authenticate against the vendor.  ``None`` or
            ``""`` means "no key"; whether that is allowed depends on the backend.
        base_url: Optional endpoint override.  Only OpenAI-compatible backends
            honour it.
        model: Model identifier.  ``None`` defers to the backend's own default.
        temperature: Sampling temperature in ``[0.0, 2.0]``.  ``None`` means
            ``0.7``.
        max_tokens: Upper bound on generated tokens.  ``None`` means ``4096``.

    Raises:
        ConfigurationError: If a sampling parameter is out of range.
    """

    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature must be in [0.0, 2.0], got {self.temperature}"
            )

        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ConfigurationError(
                f"max_tokens must be a positive integer, got {self.max_tokens}"
            )

    @property
    def resolved_temperature(self) -> float:
        return DEFAULT_TEMPERATURE if self.temperature is None else self.temperature

    @property
    def resolved_max_tokens(self) -> int:
        return DEFAULT_MAX_TOKENS if self.max_tokens is None else self.max_tokens
