"""
OpenAI-compatible chat completion adapters (OpenAI and Groq).

Groq exposes the OpenAI chat completions API, so it reuses the OpenAI SDK
with a custom base_url.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import openai

from config import ProviderSettings
from models import PromptBundle, ProviderName

from .base import ProviderAdapter
from .errors import ProviderDecodeError, ProviderLogicError, ProviderNetworkError

logger = logging.getLogger(__name__)


class OpenAIProvider(ProviderAdapter):
    """Primary LLM provider using the OpenAI chat completions API."""

    name = ProviderName.OPENAI.value
    base_url: Optional[str] = None

    def __init__(
        self,
        credential: str,
        settings: Optional[ProviderSettings] = None,
        client: Any = None,
    ):
        super().__init__(credential)
        self.settings = settings or ProviderSettings()
        self.client = client
        if self.client is None and self.credential:
            self.client = openai.AsyncOpenAI(
                api_key=self.credential,
                base_url=self.base_url,
                timeout=self.settings.request_timeout,
                max_retries=0,  # failures go straight to the orchestrator
            )

    @property
    def model_id(self) -> str:
        return self.settings.openai_model

    async def _request(self, bundle: PromptBundle) -> str:
        if self.client is None:
            raise ProviderNetworkError(self.name, "client not initialized (missing credential)")

        try:
            response = await self.client.chat.completions.create(
                model=self.model_id,
                messages=[
                    {"role": "system", "content": bundle.system},
                    {"role": "user", "content": bundle.user},
                ],
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except openai.APIStatusError as exc:
            raise ProviderLogicError(self.name, f"HTTP {exc.status_code}: {exc.message}", cause=exc) from exc
        except openai.APIConnectionError as exc:
            raise ProviderNetworkError(self.name, str(exc), cause=exc) from exc
        except (openai.OpenAIError, asyncio.TimeoutError, OSError) as exc:
            raise ProviderNetworkError(self.name, str(exc) or type(exc).__name__, cause=exc) from exc

        choices = getattr(response, "choices", None)
        if not choices:
            raise ProviderDecodeError(self.name, "response has no choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise ProviderDecodeError(self.name, "first choice has no text content")
        return content

    async def close(self) -> None:
        if self.client is not None and hasattr(self.client, "close"):
            try:
                await self.client.close()
            except Exception as exc:
                logger.warning("Error closing %s client: %s", self.name, exc)


class GroqProvider(OpenAIProvider):
    """Fast inference provider served through Groq's OpenAI-compatible API."""

    name = ProviderName.GROQ.value

    def __init__(
        self,
        credential: str,
        settings: Optional[ProviderSettings] = None,
        client: Any = None,
    ):
        settings = settings or ProviderSettings()
        self.base_url = settings.groq_base_url
        super().__init__(credential, settings=settings, client=client)

    @property
    def model_id(self) -> str:
        return self.settings.groq_model
