"""LLM client implementations for the assistant.

This module provides the LLMClient Protocol and a Groq-backed
implementation, so the assistant can call the LLM without depending on a
specific provider.
"""

from typing import Any, Protocol

from groq import AsyncGroq

DEFAULT_MODEL = "llama-3.1-70b-versatile"


class LLMClient(Protocol):
    """Protocol for text completion."""

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Complete a prompt and return the text response."""
        ...


class GroqLLMClient:
    """LLMClient implementation that wraps AsyncGroq.

    Example:
        from groq import AsyncGroq
        from kbase.ai import Assistant, GroqLLMClient

        groq = AsyncGroq(api_key="...")
        assistant = Assistant(GroqLLMClient(groq, model="llama-3.1-70b-versatile"))
    """

    def __init__(
        self,
        client: AsyncGroq,
        model: str = DEFAULT_MODEL,
    ) -> None:
        """Initialize the Groq LLM client wrapper.

        Args:
            client: The AsyncGroq client instance to wrap.
            model: The model to use for completions.
        """
        self._client = client
        self._model = model

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Complete a prompt and return the text response.

        Args:
            prompt: The user prompt to complete.
            system: Optional system prompt to set context.

        Returns:
            The LLM's text response, empty if the model returned nothing.
        """
        messages: list[dict[str, Any]] = []

        if system:
            messages.append({"role": "system", "content": system})

        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
        )

        return response.choices[0].message.content or ""

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model


def create_client(api_key: str | None, model: str = DEFAULT_MODEL) -> GroqLLMClient | None:
    """Build a Groq client, or None when no API key is configured."""
    if not api_key:
        return None
    return GroqLLMClient(AsyncGroq(api_key=api_key), model=model)
