"""
Google Gemini LLM Provider

Supports Gemini 1.5 Flash (default) and Gemini 1.5 Pro, including image input.
"""

import logging
import re
from typing import Optional

import google.generativeai as genai

from .base import BaseLLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(BaseLLMProvider):
    """
    Google Gemini LLM provider.

    Models:
    - gemini-1.5-flash: Fast, cost-effective (default)
    - gemini-1.5-pro: Most capable
    """

    MODELS = {
        "flash": "gemini-1.5-flash",
        "pro": "gemini-1.5-pro",
    }

    def __init__(self, api_key: str, model: Optional[str] = None):
        self.api_key = api_key
        self._default_model = model or self.MODELS["flash"]
        genai.configure(api_key=api_key)

    @property
    def name(self) -> str:
        return "google"

    @property
    def default_model(self) -> str:
        return self._default_model

    def _get_model(self, model_name: str):
        """Get Gemini model instance."""
        return genai.GenerativeModel(model_name)

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        model: Optional[str] = None,
    ) -> str:
        """Generate response using Gemini API."""
        model_name = model or self.default_model

        try:
            genai_model = self._get_model(model_name)

            # Combine system prompt with user prompt
            full_prompt = prompt
            if system_prompt:
                full_prompt = f"{system_prompt}\n\n{prompt}"

            response = await genai_model.generate_content_async(
                full_prompt,
                generation_config={
                    "max_output_tokens": max_tokens,
                    "temperature": temperature,
                },
            )
            return response.text

        except Exception as e:
            error_type = type(e).__name__
            logger.error(f"Gemini API error ({error_type}): {self._sanitize_error(str(e))}")
            raise

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
        """Send a prompt plus an inline image to Gemini."""
        model_name = model or self.default_model

        generation_config = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_output:
            generation_config["response_mime_type"] = "application/json"

        try:
            genai_model = self._get_model(model_name)
            response = await genai_model.generate_content_async(
                [prompt, {"mime_type": mime_type, "data": image_data}],
                generation_config=generation_config,
            )
            return response.text

        except Exception as e:
            error_type = type(e).__name__
            logger.error(f"Gemini vision error ({error_type}): {self._sanitize_error(str(e))}")
            raise

    @staticmethod
    def _sanitize_error(error: str) -> str:
        """Remove sensitive info from error messages."""
        sanitized = re.sub(r"(AIza|api[_-]?key)[a-zA-Z0-9\-_]{10,}", "[redacted]", error, flags=re.IGNORECASE)
        return sanitized[:200] if len(sanitized) > 200 else sanitized
