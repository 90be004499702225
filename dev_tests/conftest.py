"""Shared pytest fixtures for Inkwell AI Editing Engine tests."""

import asyncio
import os
import random
import sys
from typing import List, Optional
from unittest.mock import patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config, SelectorSettings, SyncSettings  # noqa: E402
from models import ChatAction, ChatTurn, PromptBundle  # noqa: E402
from providers import NoLatency, ProviderAdapter, ProviderNetworkError, SimulationProvider  # noqa: E402


# ============================================================================
# Environment Fixtures
# ============================================================================

PROVIDER_ENV_KEYS = [
    "OPENAI_API_KEY", "OPENAI_KEY", "ANTHROPIC_API_KEY", "CLAUDE_API_KEY",
    "GROQ_API_KEY", "HUGGINGFACE_API_KEY", "PROVIDER_PRIORITY",
]


@pytest.fixture
def mock_env_vars():
    """Provide test environment variables."""
    env = {
        "OPENAI_API_KEY": "sk-test-openai-key-12345",
        "ANTHROPIC_API_KEY": "sk-ant-test-key-12345",
        "GROQ_API_KEY": "gsk-test-key-12345",
        "HUGGINGFACE_API_KEY": "hf-test-key-12345",
        "APP_HOST": "127.0.0.1",
        "APP_PORT": "8000",
    }
    with patch.dict(os.environ, env, clear=False):
        yield env


@pytest.fixture
def clean_env():
    """Provide clean environment without API keys."""
    with patch.dict(os.environ, {}, clear=False):
        for key in PROVIDER_ENV_KEYS:
            os.environ.pop(key, None)
        yield


# ============================================================================
# Config Fixtures
# ============================================================================

@pytest.fixture
def offline_config():
    """Config with no credentials (explicit values skip environment loading)."""
    return Config(
        OPENAI_API_KEY="",
        ANTHROPIC_API_KEY="",
        GROQ_API_KEY="",
        HUGGINGFACE_API_KEY="",
        SELECTOR=SelectorSettings(window_size=4, min_samples=2, failure_threshold=0.5, cooldown_seconds=60),
        SYNC=SyncSettings(max_queue_size=3, reconnect_base_delay=0.5, reconnect_max_delay=4.0),
    )


@pytest.fixture
def simulation():
    """Deterministic simulation provider (no latency, seeded sampling)."""
    return SimulationProvider(latency=NoLatency(), rng=random.Random(7))


# ============================================================================
# Provider doubles
# ============================================================================

class ScriptedProvider(ProviderAdapter):
    """Network provider double returning queued replies or raising queued errors."""

    def __init__(self, name: str = "openai", replies: Optional[List] = None, available: bool = True):
        super().__init__("test-key" if available else "")
        self.name = name
        self.replies = list(replies or [])
        self.bundles: List[PromptBundle] = []
        self.closed = False

    async def _request(self, bundle: PromptBundle) -> str:
        self.bundles.append(bundle)
        if not self.replies:
            raise ProviderNetworkError(self.name, "no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def model_id(self) -> str:
        return f"{self.name}-test-model"

    async def close(self) -> None:
        self.closed = True


class AlwaysFailingProvider(ProviderAdapter):
    """Network provider whose every call fails."""

    def __init__(self, name: str = "openai", error: Optional[BaseException] = None):
        super().__init__("test-key")
        self.name = name
        self.error = error
        self.calls = 0

    async def call(self, bundle: PromptBundle) -> ChatTurn:
        self.calls += 1
        raise self.error or ProviderNetworkError(self.name, "connection refused")

    async def _request(self, bundle: PromptBundle) -> str:
        raise AssertionError("not reached")


@pytest.fixture
def scripted_provider_cls():
    return ScriptedProvider


@pytest.fixture
def failing_provider_cls():
    return AlwaysFailingProvider


def chat_turn(message: str, new_content: Optional[str] = None) -> ChatTurn:
    if new_content is None:
        return ChatTurn(action=ChatAction.CHAT, message=message)
    return ChatTurn(action=ChatAction.MODIFY, message=message, new_content=new_content)


# ============================================================================
# Sync doubles
# ============================================================================

class FakeConnection:
    """In-memory SyncConnection: feed inbound frames, inspect sent frames."""

    def __init__(self):
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.sent: List[str] = []
        self.closed = False
        self.fail_sends = False

    def feed(self, raw: Optional[str]) -> None:
        self.inbound.put_nowait(raw)

    def hang_up(self) -> None:
        self.inbound.put_nowait(None)

    async def send_str(self, data: str) -> None:
        if self.fail_sends:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def receive(self) -> Optional[str]:
        return await self.inbound.get()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_connection_cls():
    return FakeConnection


class RecordingSleep:
    """Sleep double that records requested delays and yields to the loop."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


async def wait_for(predicate, timeout: float = 1.0) -> None:
    """Yield to the loop until predicate() is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)
