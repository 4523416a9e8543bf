"""The capability every completion backend provides."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CompletionBackend(Protocol):
    """A single-shot text completion backend.

    Implementations are built per call by
    :func:`~promptenhancer.providers.factory.create_provider`, never perform
    network I/O in ``__init__``, and wrap their vendor call in
    :func:`~promptenhancer.providers.retry.with_retry`.

    Attributes:
        name: Provider identifier, e.g. ``"anthropic"`` or ``"openrouter"``.
        model: Resolved model identifier; never empty.
    """

    @property
    def name(self) -> str: ...

    @property
    def model(self) -> str: ...

    async def complete_prompt(self, prompt: str) -> str:
        """Send *prompt* as one user message and return the completion text.

        Returns ``""`` when the vendor response carries no text.
        """
        ...
