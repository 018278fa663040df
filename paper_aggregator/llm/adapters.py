"""Completion backends for AI paper summaries."""

import json
import logging

from openai import AsyncOpenAI

from ..settings import (
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    REQUEST_TIMEOUT_SECONDS,
)
from .protocols import LLMProvider

logger = logging.getLogger(__name__)

MOCK_SUMMARY = {
    "whyMatters": "[Mock] Why this paper matters.",
    "keyContribution": "[Mock] The key contribution.",
    "practicalImpact": "[Mock] The practical impact.",
}


class OpenRouterAdapter(LLMProvider):
    """
    Chat-completion backend for OpenRouter or any OpenAI-compatible endpoint.

    Usage:
        async with OpenRouterAdapter(model="some/model") as llm:
            reply = await llm.complete("Summarize this abstract: ...")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        max_retries: int = 2,
    ):
        self.api_key = api_key or OPENROUTER_API_KEY
        if not self.api_key:
            raise ValueError("OpenRouter API key required. Set OPENROUTER_API_KEY in .env")

        self.model = model or OPENROUTER_DEFAULT_MODEL
        self.base_url = base_url or OPENROUTER_BASE_URL
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: AsyncOpenAI | None = None

    async def __aenter__(self) -> "OpenRouterAdapter":
        self._client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            max_retries=self._max_retries,
            timeout=self._timeout,
        )
        logger.debug(f"Opened completion client for {self.model} at {self.base_url}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager."
            )
        return self._client

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        text = response.choices[0].message.content or ""
        logger.info(f"{self.model}: {len(prompt)} chars in, {len(text)} chars out")
        return text


class MockLLMProvider(LLMProvider):
    """Offline backend that always answers with the same reply.

    The default reply is a well-formed summary object.
    """

    def __init__(self, response: str | None = None):
        self._response = response if response is not None else json.dumps(MOCK_SUMMARY)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> str:
        return self._response

    async def __aenter__(self) -> "MockLLMProvider":
        return self

    async def __aexit__(self, *args) -> None:
        pass
