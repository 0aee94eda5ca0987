"""LLM adapters for country insight generation.

Provides a base interface, an adapter for OpenAI-compatible chat completion
APIs (the default endpoint is Gemini's OpenAI-compatible surface) and a
deterministic mock for local runs.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    async def generate(self, prompt: str, *, model: str) -> str:
        """Send a prompt to one model variant and return the raw response text.

        Args:
            prompt: The fully formatted prompt string.
            model: Model variant identifier to address.

        Returns:
            Raw string response from the model (expected to be JSON).

        Raises:
            Exception: Whatever the underlying client raises; callers classify it.
        """


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Requests JSON output directly and allows a large completion budget so
    long email templates are not truncated.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> None:
        """Initialise the async OpenAI client.

        Args:
            api_key: Provider API key.
            base_url: Optional base URL for OpenAI-compatible endpoints.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens in the completion.
        """
        client_kwargs: dict = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = AsyncOpenAI(**client_kwargs)
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def generate(self, prompt: str, *, model: str) -> str:
        """Call the chat completion API for *model*.

        Returns:
            Raw string content from the model response ("" when empty).
        """
        response = await self._client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
            stream=False,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock response used for local runs without a provider key.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = {
    "carriers": [
        {"name": "DHL", "marketShare": 31.0},
        {"name": "UPS", "marketShare": 24.0},
        {"name": "FedEx", "marketShare": 19.0},
        {"name": "DPD", "marketShare": 14.0},
        {"name": "GLS", "marketShare": 12.0},
    ],
    "fedexSentiment": "Mock sentiment for testing purposes.",
    "salesTips": [
        "Mock tip one.",
        "Mock tip two.",
        "Mock tip three.",
        "Mock tip four.",
        "Mock tip five.",
    ],
    "emailTemplate": "Subject: Mock subject\n\nDear [Prospect Name],\n\nMock body.\n\nBest regards,\n[Your Name]",
}

_MOCK_RESPONSE_JSON = json.dumps(_MOCK_RESPONSE, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid JSON response.

    Used for local runs and CI pipelines where no provider is available.
    """

    async def generate(self, prompt: str, *, model: str) -> str:
        """Return a fixed JSON string regardless of input."""
        return _MOCK_RESPONSE_JSON
