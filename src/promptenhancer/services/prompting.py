"""Assemble the final prompt sent to a backend.

Templates use the literal placeholder ``${userInput}`` so that config files
written for other prompt-enhancer clients keep working unchanged.
"""

from collections.abc import Sequence

from promptenhancer.services.models import ContextMessage

USER_INPUT_PLACEHOLDER = "${userInput}"

DEFAULT_ENHANCE_TEMPLATE = (
    "Generate an enhanced version of this prompt (reply with only the enhanced "
    "prompt - no conversation, explanations, lead-in, bullet points, placeholders, "
    "or surrounding quotes):\n"
    "\n"
    "${userInput}"
)

_CONTEXT_HEADER = "\n\nUse the following previous conversation context as needed:\n"


class InvalidTemplateError(ValueError):
    """Raised when a template lacks the ``${userInput}`` placeholder."""


def prepare_input(
    text: str,
    context: Sequence[ContextMessage] | None,
    max_messages: int = 10,
    truncate_length: int = 500,
) -> str:
    """Append the most recent *context* messages to *text*.

    Only the last *max_messages* messages are kept, and each one longer than
    *truncate_length* characters is cut and suffixed with ``...``.
    """
    if not context:
        return text

    recent = list(context)[-max_messages:] if max_messages > 0 else []
    lines = []
    for message in recent:
        content = message.content
        if len(content) > truncate_length:
            content = content[:truncate_length] + "..."
        lines.append(f"{message.role}: {content}")

    return f"{text}{_CONTEXT_HEADER}" + "\n".join(lines)


def apply_template(template: str, user_input: str) -> str:
    """Substitute *user_input* for the first ``${userInput}`` in *template*.

    Raises:
        InvalidTemplateError: If the placeholder is missing.
    """
    if USER_INPUT_PLACEHOLDER not in template:
        raise InvalidTemplateError(
            f"Template must contain the {USER_INPUT_PLACEHOLDER} placeholder"
        )
    return template.replace(USER_INPUT_PLACEHOLDER, user_input, 1)
