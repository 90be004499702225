"""
Provider adapter base class and reply normalization.

Adapters translate the canonical PromptBundle into one provider's native
request, issue exactly one call (no retries) and normalize the reply into a
ChatTurn.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import ValidationError

import json_utils as json
from models import ChatAction, ChatTurn, PromptBundle

from .errors import ProviderDecodeError, ProviderLogicError

logger = logging.getLogger(__name__)

_VALID_ACTIONS = {action.value for action in ChatAction}


def parse_structured_reply(provider: str, raw_text: Optional[str]) -> ChatTurn:
    """
    Interpret a provider's primary text field as a ChatTurn.

    A JSON object ``{action, message, newContent?}`` (optionally inside a
    code fence) is validated as a structured reply. Any other text becomes a
    plain chat reply.

    Raises:
        ProviderDecodeError: the text is missing or blank
        ProviderLogicError: the JSON object carries an unknown action or is
            inconsistent (modify without newContent)
    """
    if raw_text is None or not str(raw_text).strip():
        raise ProviderDecodeError(provider, "response contained no text content")

    payload = json.try_loads_object(raw_text)
    if payload is None:
        return ChatTurn(action=ChatAction.CHAT, message=str(raw_text).strip())

    action = str(payload.get("action", "")).strip().lower()
    if action not in _VALID_ACTIONS:
        raise ProviderLogicError(provider, f"unusable action {payload.get('action')!r}")

    message = payload.get("message")
    if message is None:
        message = ""
    new_content = payload.get("newContent", payload.get("new_content"))
    if action == ChatAction.CHAT.value:
        new_content = None

    try:
        return ChatTurn(action=action, message=str(message), new_content=new_content)
    except ValidationError as exc:
        raise ProviderLogicError(provider, "inconsistent structured reply", cause=exc) from exc


class ProviderAdapter(ABC):
    """
    One provider behind the canonical contract.

    Subclasses implement ``_request`` (returning the provider's primary text
    field) and map every transport/SDK failure to a ProviderError subclass.
    """

    name: str = ""
    is_network: bool = True

    def __init__(self, credential: str = ""):
        self.credential = (credential or "").strip()

    def is_available(self) -> bool:
        """A network provider is available when its credential is configured."""
        return bool(self.credential)

    async def call(self, bundle: PromptBundle) -> ChatTurn:
        """Issue a single call and normalize the reply."""
        raw_text = await self._request(bundle)
        return parse_structured_reply(self.name, raw_text)

    @abstractmethod
    async def _request(self, bundle: PromptBundle) -> str:
        """Send the provider-native request and return the primary text field."""

    @property
    def model_id(self) -> str:
        return ""

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "model": self.model_id,
            "available": self.is_available(),
            "network": self.is_network,
        }

    async def close(self) -> None:
        """Release HTTP resources held by the adapter."""
        return None
