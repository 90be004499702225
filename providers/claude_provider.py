"""
Anthropic Claude messages adapter.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import anthropic

from config import ProviderSettings
from models import PromptBundle, ProviderName

from .base import ProviderAdapter
from .errors import ProviderDecodeError, ProviderLogicError, ProviderNetworkError

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


def extract_text_from_claude_response(response: Any) -> str:
    """
    Join the text blocks of a messages response.

    Thinking blocks are skipped; blocks without a type but with a ``text``
    attribute are accepted.
    """
    text_content = []
    for content_block in getattr(response, "content", None) or []:
        block_type = getattr(content_block, "type", None)
        if block_type == "thinking":
            continue
        text = getattr(content_block, "text", None)
        if isinstance(text, str):
            text_content.append(text)
    return "".join(text_content).strip()


class ClaudeProvider(ProviderAdapter):
    """Primary LLM provider using the Anthropic messages API."""

    name = ProviderName.CLAUDE.value

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
            self.client = anthropic.AsyncAnthropic(
                api_key=self.credential,
                timeout=self.settings.request_timeout,
                max_retries=0,
                default_headers={"anthropic-version": ANTHROPIC_VERSION},
            )

    @property
    def model_id(self) -> str:
        return self.settings.claude_model

    async def _request(self, bundle: PromptBundle) -> str:
        if self.client is None:
            raise ProviderNetworkError(self.name, "client not initialized (missing credential)")

        create_params = {
            "model": self.model_id,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "messages": [{"role": "user", "content": bundle.user}],
        }
        # Only add system prompt if it exists and is not empty
        if bundle.system and bundle.system.strip():
            create_params["system"] = bundle.system

        try:
            response = await self.client.messages.create(**create_params)
        except anthropic.APIStatusError as exc:
            raise ProviderLogicError(self.name, f"HTTP {exc.status_code}: {exc.message}", cause=exc) from exc
        except anthropic.APIConnectionError as exc:
            raise ProviderNetworkError(self.name, str(exc), cause=exc) from exc
        except (anthropic.AnthropicError, asyncio.TimeoutError, OSError) as exc:
            raise ProviderNetworkError(self.name, str(exc) or type(exc).__name__, cause=exc) from exc

        if not getattr(response, "content", None):
            raise ProviderDecodeError(self.name, "response has no content blocks")
        text = extract_text_from_claude_response(response)
        if not text:
            raise ProviderDecodeError(self.name, "response has no text block")
        return text

    async def close(self) -> None:
        if self.client is not None and hasattr(self.client, "close"):
            try:
                await self.client.close()
            except Exception as exc:
                logger.warning("Error closing %s client: %s", self.name, exc)
