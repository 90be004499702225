"""
Offline simulation provider.

Always available. Chat mode sniffs the user's message for a document action
(grammar fix, added content, summary, formatting) and otherwise answers with
a canned reply. Edit mode delegates to the local TextTransformEngine. Both
modes wait on an injectable latency strategy so the UI sees realistic
loading states; tests use NoLatency.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Union

from models import ChatAction, ChatTurn, EditIntent, PromptBundle, ProviderName, TransformResult
from text_transform import TextTransformEngine, count_words, format_document, improve_document

from .base import ProviderAdapter

logger = logging.getLogger(__name__)


INTRODUCTION_BLOCK = (
    "\n\n## Introduction\n\nThis document serves as a comprehensive guide that aims to provide "
    "valuable insights and information on the topic at hand. Through careful analysis and research, "
    "we present the following findings and recommendations."
)
CONCLUSION_BLOCK = (
    "\n\n## Conclusion\n\nIn conclusion, the points discussed above highlight the importance of this "
    "topic and its implications for future development. We recommend continued research and "
    "implementation of the strategies outlined in this document."
)
GENERIC_BLOCK = (
    "\n\n[AI Generated Content]\nThis additional content has been generated based on your request. "
    "It provides supplementary information that complements the existing text and enhances the "
    "overall quality of the document."
)

CANNED_RESPONSES = (
    "I'm here to help! You can ask me to fix grammar, improve writing, add content, or format your document.",
    "That's an interesting question! I can also help you edit your document directly. Try asking me to 'fix grammar' or 'add an introduction'.",
    "I'd be happy to assist you! Some things I can do: improve text, add summaries, fix formatting, or just chat about your document.",
    "Great question! I can provide suggestions or directly modify your document. Just let me know what you need - I can add content, fix grammar, or organize your text.",
    "I'm your AI writing assistant! I can help improve your document's grammar, add new content, create summaries, or answer any questions you have.",
    "Feel free to ask me anything! I can also edit your document directly - try asking me to 'improve the writing' or 'add a conclusion'.",
    "I'm designed to help with both conversation and document editing. What would you like me to help you with today?",
    "That's a good point! I can also assist with your document - whether you need grammar fixes, additional content, or better formatting.",
    "Interesting! While we chat, remember I can also directly modify your document. Try commands like 'add an introduction' or 'fix the grammar'.",
    "I understand! Let me know if you'd like me to make any changes to your document. I can improve writing, add content, or organize the text better.",
)


class NoLatency:
    """Latency strategy that returns immediately."""

    async def wait(self) -> None:
        return None


class RandomLatency:
    """Sleep for a duration drawn uniformly from [min_seconds, max_seconds]."""

    def __init__(
        self,
        min_seconds: float = 1.0,
        max_seconds: float = 3.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_seconds < min_seconds:
            raise ValueError("max_seconds must be >= min_seconds")
        self.min_seconds = min_seconds
        self.max_seconds = max_seconds
        self._rng = rng or random.Random()
        self._sleep = sleep

    def next_delay(self) -> float:
        return self._rng.uniform(self.min_seconds, self.max_seconds)

    async def wait(self) -> None:
        await self._sleep(self.next_delay())


LatencyStrategy = Union[NoLatency, RandomLatency]


class SimulationProvider(ProviderAdapter):
    """Local stand-in for a network provider; never fails."""

    name = ProviderName.SIMULATION.value
    is_network = False

    def __init__(
        self,
        engine: Optional[TextTransformEngine] = None,
        latency: Optional[LatencyStrategy] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__("")
        self.engine = engine or TextTransformEngine()
        self.latency = latency or RandomLatency()
        self._rng = rng or random.Random()

    def is_available(self) -> bool:
        return True

    @property
    def model_id(self) -> str:
        return "local-heuristics"

    async def call(self, bundle: PromptBundle) -> ChatTurn:
        return await self.chat(bundle.user, bundle.context)

    async def _request(self, bundle: PromptBundle) -> str:
        turn = await self.chat(bundle.user, bundle.context)
        return turn.message

    async def chat(self, message: str, document: str = "") -> ChatTurn:
        """Answer a sidebar message, possibly returning a modified document."""
        await self.latency.wait()
        return self.respond(message, document)

    def respond(self, message: str, document: str = "") -> ChatTurn:
        """Synchronous core of chat mode (no latency)."""
        lowered = (message or "").lower()
        document = document or ""

        if "fix grammar" in lowered or "correct" in lowered or "improve" in lowered:
            return ChatTurn(
                action=ChatAction.MODIFY,
                message="I've improved the grammar and style of your document!",
                new_content=improve_document(document),
            )

        if "add" in lowered and any(word in lowered for word in ("content", "paragraph", "text")):
            if "introduction" in lowered or "intro" in lowered:
                added = INTRODUCTION_BLOCK
            elif "conclusion" in lowered:
                added = CONCLUSION_BLOCK
            else:
                added = GENERIC_BLOCK
            return ChatTurn(
                action=ChatAction.MODIFY,
                message="I've added relevant content to your document!",
                new_content=document + added,
            )

        if "summarize" in lowered or "summary" in lowered:
            if not document.strip():
                return ChatTurn(
                    action=ChatAction.CHAT,
                    message="There's no content to summarize yet. Please add some text first, "
                            "and I'll be happy to create a summary!",
                )
            summary = (
                f"\n\n## Summary\nThis document contains {count_words(document)} words covering the "
                "main topics discussed above. The key points have been organized to provide a clear "
                "understanding of the subject matter."
            )
            return ChatTurn(
                action=ChatAction.MODIFY,
                message="I've added a summary to your document!",
                new_content=document + summary,
            )

        if "format" in lowered or "organize" in lowered:
            return ChatTurn(
                action=ChatAction.MODIFY,
                message="I've improved the formatting and organization of your document!",
                new_content=format_document(document),
            )

        return ChatTurn(action=ChatAction.CHAT, message=self._rng.choice(CANNED_RESPONSES))

    async def edit(
        self,
        intent: Union[EditIntent, str],
        text: str,
        custom_instruction: Optional[str] = None,
    ) -> TransformResult:
        """Transform a selection locally."""
        await self.latency.wait()
        intent = EditIntent.coerce(intent)
        return TransformResult(
            original_text=text,
            edited_text=self.engine.transform(intent, text, custom_instruction),
            intent=intent,
            message=self.engine.describe(intent, custom_instruction),
            provider=self.name,
        )
