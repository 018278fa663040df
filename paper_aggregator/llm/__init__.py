"""LLM provider integrations used for AI paper summaries."""

from .protocols import LLMProvider
from .adapters import MockLLMProvider, OpenRouterAdapter

__all__ = [
    "LLMProvider",
    "MockLLMProvider",
    "OpenRouterAdapter",
]
