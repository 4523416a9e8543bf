"""Input and output types of the enhance operation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ContextMessage(BaseModel):
    """One earlier turn of the conversation the prompt came from."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class EnhanceOptions(BaseModel):
    """A single enhancement request.

    Attributes:
        text: The prompt to enhance.
        provider: Provider identifier; ``None`` uses the configured default.
        model: Model override for this call only.
        context: Earlier conversation turns appended to the prompt.
        template: Template containing ``${userInput}``; overrides the configured one.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    provider: str | None = None
    model: str | None = None
    context: list[ContextMessage] | None = None
    template: str | None = None


class EnhanceResult(BaseModel):
    """Enhanced text together with the provider and model that produced it."""

    model_config = ConfigDict(frozen=True)

    success: bool
    enhanced_text: str
    provider: str
    model: str
