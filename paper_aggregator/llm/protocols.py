"""Protocol definition for the optional language-model collaborator."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for completion services used to write paper summaries.

    Providers are async context managers; enter them before calling
    ``complete``.
    """

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        """
        Generate a completion for a prompt.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0-2)
            max_tokens: Maximum tokens to generate

        Returns:
            The generated text
        """
        ...

    async def __aenter__(self) -> "LLMProvider":
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
