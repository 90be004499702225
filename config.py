"""
Configuration for the Inkwell AI Editing Engine
===============================================

Central configuration for provider credentials, model ids, the offline
simulation, provider ranking and the document sync channel.

Values are read from environment variables (a local .env file is loaded
first). A provider whose credential is missing is simply unavailable; the
offline simulation provider needs no configuration at all.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


DEFAULT_PROVIDER_PRIORITY = ["openai", "claude", "groq", "huggingface", "simulation"]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class ProviderSettings(BaseModel):
    """Model ids, endpoints and request limits for the network providers."""

    openai_model: str = Field(default="gpt-3.5-turbo", description="Chat model used for OpenAI")
    claude_model: str = Field(default="claude-3-haiku-20240307", description="Messages model used for Claude")
    groq_model: str = Field(default="mixtral-8x7b-32768", description="Chat model used for Groq")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="OpenAI-compatible base URL of the Groq API",
    )
    huggingface_url: str = Field(
        default="https://api-inference.huggingface.co/models/microsoft/DialoGPT-large",
        description="Hosted inference endpoint receiving a single 'inputs' string",
    )
    max_tokens: int = Field(default=1000, ge=1, description="Completion token limit for chat providers")
    huggingface_max_length: int = Field(default=500, ge=1, description="max_length parameter for hosted inference")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    request_timeout: float = Field(default=60.0, gt=0, description="Per-request timeout in seconds")


class SimulationSettings(BaseModel):
    """Artificial latency of the offline simulation provider."""

    min_latency_seconds: float = Field(default=1.0, ge=0.0, description="Lower bound of simulated latency")
    max_latency_seconds: float = Field(default=3.0, ge=0.0, description="Upper bound of simulated latency")


class SelectorSettings(BaseModel):
    """Rolling failure tracking used to demote misbehaving providers."""

    window_size: int = Field(default=10, ge=1, description="Number of recent outcomes kept per provider")
    min_samples: int = Field(default=3, ge=1, description="Outcomes required before a provider can be demoted")
    failure_threshold: float = Field(
        default=0.5,
        gt=0.0,
        le=1.0,
        description="Failure rate at which a provider is ranked behind healthy ones",
    )
    cooldown_seconds: float = Field(
        default=300.0,
        ge=0.0,
        description="Seconds a demoted provider waits before it is probed again",
    )


class SyncSettings(BaseModel):
    """Document synchronization channel settings."""

    url: str = Field(default="ws://localhost:5000/ws", description="WebSocket URL of the document store")
    max_queue_size: int = Field(default=50, ge=1, description="Snapshots buffered while disconnected")
    reconnect_base_delay: float = Field(default=0.5, ge=0.0, description="First reconnect delay in seconds")
    reconnect_max_delay: float = Field(default=30.0, ge=0.0, description="Upper bound for the reconnect delay")
    max_reconnect_attempts: Optional[int] = Field(
        default=None,
        ge=0,
        description="Consecutive failed attempts before giving up (None retries forever)",
    )
    heartbeat_seconds: Optional[float] = Field(default=30.0, description="WebSocket ping interval")


class Config(BaseModel):
    """Configuration settings for the Inkwell AI Editing Engine."""

    # API keys (absence means the provider is unavailable)
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic Claude API key")
    GROQ_API_KEY: str = Field(default="", description="Groq API key")
    HUGGINGFACE_API_KEY: str = Field(default="", description="Hugging Face inference API key")

    PROVIDER_PRIORITY: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROVIDER_PRIORITY),
        description="Providers in the order they are tried (simulation is always appended last)",
    )

    PROVIDERS: ProviderSettings = Field(default_factory=ProviderSettings)
    SIMULATION: SimulationSettings = Field(default_factory=SimulationSettings)
    SELECTOR: SelectorSettings = Field(default_factory=SelectorSettings)
    SYNC: SyncSettings = Field(default_factory=SyncSettings)

    CHAT_SYSTEM_PROMPT: str = Field(default="""You are an AI assistant integrated into a collaborative text editor. You can either:
1. Provide helpful chat responses to user questions
2. Directly modify the document content when asked

When the user asks you to modify the document (fix grammar, improve text, add content, etc.), respond with a JSON object containing:
- action: 'modify'
- message: 'Brief description of what you did'
- newContent: 'The improved/modified document content'

For regular chat, respond with:
- action: 'chat'
- message: 'Your response'""")

    EDIT_SYSTEM_PROMPT: str = Field(
        default="You are a text editing AI. Edit the provided text according to the user's request. Return only the edited text.",
    )

    # FastAPI configuration
    APP_HOST: str = Field(default="0.0.0.0", description="FastAPI host")
    APP_PORT: int = Field(default=5000, description="FastAPI port")
    APP_RELOAD: bool = Field(default=False, description="Enable uvicorn auto-reload")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"], description="Origins allowed to call the API")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    def __init__(self, **data):
        super().__init__(**data)
        if not data:
            self.load_from_environment()

    def load_from_environment(self):
        """Load configuration overrides from environment variables."""
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "") or os.getenv("OPENAI_KEY", "")
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "") or os.getenv("CLAUDE_API_KEY", "")
        self.GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
        self.HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")

        priority_override = os.getenv("PROVIDER_PRIORITY")
        if priority_override:
            self.PROVIDER_PRIORITY = [
                item.strip().lower() for item in priority_override.split(",") if item.strip()
            ]

        providers = self.PROVIDERS
        providers.openai_model = os.getenv("OPENAI_MODEL", providers.openai_model)
        providers.claude_model = os.getenv("CLAUDE_MODEL", providers.claude_model)
        providers.groq_model = os.getenv("GROQ_MODEL", providers.groq_model)
        providers.huggingface_url = os.getenv("HUGGINGFACE_URL", providers.huggingface_url)
        providers.request_timeout = _env_float("PROVIDER_REQUEST_TIMEOUT", providers.request_timeout)

        simulation = self.SIMULATION
        simulation.min_latency_seconds = _env_float("SIMULATION_MIN_LATENCY", simulation.min_latency_seconds)
        simulation.max_latency_seconds = _env_float("SIMULATION_MAX_LATENCY", simulation.max_latency_seconds)

        selector = self.SELECTOR
        selector.window_size = _env_int("SELECTOR_WINDOW_SIZE", selector.window_size)
        selector.min_samples = _env_int("SELECTOR_MIN_SAMPLES", selector.min_samples)
        selector.failure_threshold = _env_float("SELECTOR_FAILURE_THRESHOLD", selector.failure_threshold)
        selector.cooldown_seconds = _env_float("SELECTOR_COOLDOWN_SECONDS", selector.cooldown_seconds)

        sync = self.SYNC
        sync.url = os.getenv("SYNC_URL", sync.url)
        sync.max_queue_size = _env_int("SYNC_MAX_QUEUE_SIZE", sync.max_queue_size)
        sync.reconnect_base_delay = _env_float("SYNC_RECONNECT_BASE_DELAY", sync.reconnect_base_delay)
        sync.reconnect_max_delay = _env_float("SYNC_RECONNECT_MAX_DELAY", sync.reconnect_max_delay)
        attempts_override = os.getenv("SYNC_MAX_RECONNECT_ATTEMPTS")
        if attempts_override:
            sync.max_reconnect_attempts = int(attempts_override)

        self.APP_HOST = os.getenv("APP_HOST", self.APP_HOST)
        self.APP_PORT = _env_int("APP_PORT", self.APP_PORT)
        self.APP_RELOAD = os.getenv("APP_RELOAD", "false").lower() in ("1", "true", "yes", "on")
        origins_override = os.getenv("CORS_ORIGINS")
        if origins_override:
            self.CORS_ORIGINS = [item.strip() for item in origins_override.split(",") if item.strip()]
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", self.LOG_LEVEL)

    def get_credential(self, provider: str) -> str:
        """Return the credential configured for a network provider ('' when absent)."""
        credentials = {
            "openai": self.OPENAI_API_KEY,
            "claude": self.ANTHROPIC_API_KEY,
            "groq": self.GROQ_API_KEY,
            "huggingface": self.HUGGINGFACE_API_KEY,
        }
        return (credentials.get(provider) or "").strip()


# Global configuration instance
config = Config()
