"""Orchestrates a single prompt enhancement.

Assembles the prompt, resolves the backend, calls it, and packages the text
with the provider and model that answered.  No error handling happens here:
configuration errors, template errors, and vendor errors all propagate
unchanged so the transport layer can decide how to present them.
"""

import time

import structlog
from opentelemetry import trace
from opentelemetry.trace import StatusCode

from promptenhancer.config import AppConfig, get_api_key_from_env
from promptenhancer.providers import create_provider
from promptenhancer.providers.factory import KeyLookup
from promptenhancer.services.models import EnhanceOptions, EnhanceResult
from promptenhancer.services.prompting import (
    DEFAULT_ENHANCE_TEMPLATE,
    apply_template,
    prepare_input,
)

_log = structlog.get_logger(__name__)
_tracer = trace.get_tracer(__name__)


class EnhancementService:
    """Enhance prompts with whichever provider the request or config selects.

    Args:
        config: Resolved application configuration.  Read-only.
        key_lookup: Maps a provider identifier to its API key.
    """

    def __init__(
        self,
        config: AppConfig,
        key_lookup: KeyLookup = get_api_key_from_env,
    ) -> None:
        self._config = config
        self._key_lookup = key_lookup

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def key_lookup(self) -> KeyLookup:
        return self._key_lookup

    def build_prompt(self, options: EnhanceOptions) -> str:
        """Return the final prompt for *options* (context first, then template).

        Raises:
            InvalidTemplateError: If the selected template lacks ``${userInput}``.
        """
        user_input = prepare_input(
            options.text,
            options.context,
            max_messages=self._config.options.max_context_messages,
            truncate_length=self._config.options.context_truncate_length,
        )
        template = (
            options.template
            or self._config.templates.get("default")
            or DEFAULT_ENHANCE_TEMPLATE
        )
        return apply_template(template, user_input)

    async def enhance(self, options: EnhanceOptions) -> EnhanceResult:
        prompt = self.build_prompt(options)
        provider_name = options.provider or self._config.default_provider

        with _tracer.start_as_current_span("enhancement.enhance") as span:
            span.set_attribute("gen_ai.system", provider_name)
            log = _log.bind(provider=provider_name, model_override=options.model)
            log.info("enhancement_start", prompt_chars=len(prompt))
            start_time = time.monotonic()

            try:
                backend = create_provider(
                    provider_name, self._config, options.model, self._key_lookup
                )
                span.set_attribute("gen_ai.request.model", backend.model)
                enhanced = await backend.complete_prompt(prompt)
            except Exception as exc:
                span.record_exception(exc)
                span.set_status(StatusCode.ERROR, str(exc))
                raise

            log.info(
                "enhancement_complete",
                chars=len(enhanced),
                model=backend.model,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            )

        return EnhanceResult(
            success=True,
            enhanced_text=enhanced,
            provider=backend.name,
            model=backend.model,
        )
