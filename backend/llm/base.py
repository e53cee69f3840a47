"""
Base LLM Provider Interface

Abstract interface for generative model providers used by the backend.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'google')."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model to use."""
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        model: Optional[str] = None,
    ) -> str:
        """
        Generate a text response from the LLM.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (0-1)
            model: Specific model to use (overrides default)

        Returns:
            Generated text response
        """
        pass

    @abstractmethod
    async def generate_with_image(
        self,
        prompt: str,
        image_data: bytes,
        mime_type: str,
        max_tokens: int = 500,
        temperature: float = 0.1,
        json_output: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """
        Generate a response to a prompt about one image.

        Args:
            prompt: Instructions for the model
            image_data: Raw image bytes
            mime_type: Image MIME type, e.g. "image/jpeg"
            json_output: Ask the model for a JSON document

        Returns:
            Generated text (JSON text when json_output is set)
        """
        pass

    @staticmethod
    def parse_json(response: Optional[str]) -> Optional[dict]:
        """
        Extract the first JSON object from a model response.

        Returns None when there is nothing parseable.
        """
        if not response:
            return None
        try:
            json_start = response.find("{")
            json_end = response.rfind("}") + 1
            if json_start >= 0 and json_end > json_start:
                parsed = json.loads(response[json_start:json_end])
                return parsed if isinstance(parsed, dict) else None
        except json.JSONDecodeError:
            pass
        return None
