"""LLM providers for the CISS Workforce backend."""

from .base import BaseLLMProvider
from .gemini_provider import GeminiProvider

__all__ = [
    "BaseLLMProvider",
    "GeminiProvider",
]
