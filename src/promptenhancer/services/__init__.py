"""Prompt assembly and the enhance operation."""

from promptenhancer.services.enhancement import EnhancementService
from promptenhancer.services.models import ContextMessage, EnhanceOptions, EnhanceResult
from promptenhancer.services.prompting import (
    DEFAULT_ENHANCE_TEMPLATE,
    InvalidTemplateError,
    apply_template,
    prepare_input,
)

__all__ = [
    "EnhancementService",
    "ContextMessage",
    "EnhanceOptions",
    "EnhanceResult",
    "DEFAULT_ENHANCE_TEMPLATE",
    "InvalidTemplateError",
    "apply_template",
    "prepare_input",
]
