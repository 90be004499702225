"""
Hugging Face hosted inference adapter.

The inference API takes a single ``inputs`` string and answers with
``[{"generated_text": ...}]``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

import json_utils as json
from config import ProviderSettings
from models import PromptBundle, ProviderName

from .base import ProviderAdapter
from .errors import ProviderDecodeError, ProviderLogicError, ProviderNetworkError

logger = logging.getLogger(__name__)


class HuggingFaceProvider(ProviderAdapter):
    """Hosted inference provider reached with a plain aiohttp POST."""

    name = ProviderName.HUGGINGFACE.value

    def __init__(
        self,
        credential: str,
        settings: Optional[ProviderSettings] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(credential)
        self.settings = settings or ProviderSettings()
        self._session = session
        self._owns_session = session is None

    @property
    def model_id(self) -> str:
        return self.settings.huggingface_url.rstrip("/").rsplit("/models/", 1)[-1]

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
            )
            self._owns_session = True
        return self._session

    def build_payload(self, bundle: PromptBundle) -> Dict[str, Any]:
        return {
            "inputs": f"{bundle.system}\n\nUser: {bundle.user}",
            "parameters": {
                "max_length": self.settings.huggingface_max_length,
                "temperature": self.settings.temperature,
                "do_sample": True,
            },
        }

    async def _request(self, bundle: PromptBundle) -> str:
        headers = {
            "Authorization": f"Bearer {self.credential}",
            "Content-Type": "application/json",
        }
        try:
            session = self._get_session()
            async with session.post(
                self.settings.huggingface_url,
                data=json.dumps(self.build_payload(bundle)),
                headers=headers,
            ) as response:
                body = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise ProviderNetworkError(self.name, str(exc) or type(exc).__name__, cause=exc) from exc

        if status >= 400:
            raise ProviderLogicError(self.name, f"HTTP {status}: {body[:200]}")

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ProviderDecodeError(self.name, "response body is not JSON", cause=exc) from exc

        return self._extract_generated_text(data)

    def _extract_generated_text(self, data: Any) -> str:
        if isinstance(data, dict) and data.get("error"):
            raise ProviderLogicError(self.name, str(data["error"]))
        entry = data[0] if isinstance(data, list) and data else data
        text = entry.get("generated_text") if isinstance(entry, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ProviderDecodeError(self.name, "response has no generated_text")
        return text

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.info("Hugging Face HTTP session closed")
