import json
import os
from collections.abc import Callable
from pathlib import Path

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

log = structlog.get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "prompt-enhancer" / "config.json"

# Static lookup tables: provider identifier -> env var / default model / endpoint.
ENV_KEY_MAP: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "openai-compatible": "OPENAI_COMPATIBLE_API_KEY",
}

DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o",
    "openrouter": "anthropic/claude-sonnet-4-5-20250929",
    "gemini": "gemini-2.0-flash",
    "openai-compatible": "gpt-3.5-turbo",
}

FALLBACK_MODEL = "gpt-3.5-turbo"

DEFAULT_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPT_ENHANCER_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="prompt-enhancer")
    app_version: str = Field(default="0.1.0")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Enhancement behaviour
    default_provider: str | None = Field(default=None)
    config_path: Path = Field(
        default=DEFAULT_CONFIG_PATH,
        validation_alias=AliasChoices("PROMPT_ENHANCER_CONFIG", "config_path"),
    )
    max_text_length: int = Field(default=100_000)

    # Observability
    log_level: str = Field(default="INFO")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_service_name: str = Field(default="prompt-enhancer")

    # Provider API keys: un-prefixed, stored as SecretStr so they never reach logs
    anthropic_api_key: SecretStr | None = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    openai_api_key: SecretStr | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openrouter_api_key: SecretStr | None = Field(
        default=None, validation_alias="OPENROUTER_API_KEY"
    )
    gemini_api_key: SecretStr | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    openai_compatible_api_key: SecretStr | None = Field(
        default=None, validation_alias="OPENAI_COMPATIBLE_API_KEY"
    )

    def api_keys(self) -> dict[str, SecretStr | None]:
        """Map each key env var name to the value loaded from env or ``.env``."""
        return {
            "ANTHROPIC_API_KEY": self.anthropic_api_key,
            "OPENAI_API_KEY": self.openai_api_key,
            "OPENROUTER_API_KEY": self.openrouter_api_key,
            "GEMINI_API_KEY": self.gemini_api_key,
            "OPENAI_COMPATIBLE_API_KEY": self.openai_compatible_api_key,
        }


# ---------------------------------------------------------------------------
# JSON config file (camelCase on disk)
# ---------------------------------------------------------------------------


class _FileModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ProviderSettings(_FileModel):
    """Stored per-provider overrides from the config file."""

    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)


class EnhancerOptions(_FileModel):
    max_context_messages: int = Field(default=10, ge=0)
    context_truncate_length: int = Field(default=500, ge=0)


class AppConfig(_FileModel):
    """Fully resolved application configuration."""

    default_provider: str = "anthropic"
    providers: dict[str, ProviderSettings] = Field(default_factory=dict)
    templates: dict[str, str] = Field(default_factory=dict)
    options: EnhancerOptions = Field(default_factory=EnhancerOptions)


def load_config(settings: Settings | None = None) -> AppConfig:
    """Build the :class:`AppConfig` from defaults, the JSON file, and the environment.

    Precedence for ``default_provider``: ``PROMPT_ENHANCER_DEFAULT_PROVIDER`` >
    config file > ``"anthropic"``.  A missing file is normal; an unreadable or
    invalid one is logged and ignored.
    """
    settings = settings or Settings()
    config = AppConfig()
    path = Path(settings.config_path).expanduser()

    if path.is_file():
        try:
            config = AppConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
            log.info("config_loaded", path=str(path))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            log.warning("config_parse_failed", path=str(path), error=str(exc))
    else:
        log.debug("config_not_found", path=str(path))

    if settings.default_provider:
        config = config.model_copy(update={"default_provider": settings.default_provider})

    return config


def get_api_key_from_env(provider: str) -> str | None:
    """Return the API key for *provider* from its environment variable, if set."""
    env_var = ENV_KEY_MAP.get(provider)
    return os.environ.get(env_var) if env_var else None


def make_key_lookup(settings: Settings) -> Callable[[str], str | None]:
    """Return a key lookup that checks the environment first, then *settings*.

    Keys that pydantic-settings read from ``.env`` never reach ``os.environ``;
    this serves them without writing them back into the process environment.
    """
    keys = settings.api_keys()

    def lookup(provider: str) -> str | None:
        from_env = get_api_key_from_env(provider)
        if from_env:
            return from_env
        secret = keys.get(ENV_KEY_MAP.get(provider, ""))
        return secret.get_secret_value() if secret is not None else None

    return lookup


def get_default_model(provider: str) -> str:
    return DEFAULT_MODELS.get(provider, FALLBACK_MODEL)


settings = Settings()
