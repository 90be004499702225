"""
Provider adapters for the AI editing engine.

Each adapter normalizes one provider's request/response shape into the
canonical ChatTurn. ``build_providers`` creates the adapters for the
configured priority order; the simulation provider is always included last.
"""

import logging
from typing import List, Optional

from config import Config
from models import ProviderName

from .base import ProviderAdapter, parse_structured_reply
from .claude_provider import ClaudeProvider
from .errors import ProviderDecodeError, ProviderError, ProviderLogicError, ProviderNetworkError
from .huggingface_provider import HuggingFaceProvider
from .openai_provider import GroqProvider, OpenAIProvider
from .prompts import build_chat_bundle, build_edit_bundle
from .simulation import LatencyStrategy, NoLatency, RandomLatency, SimulationProvider

logger = logging.getLogger(__name__)

_NETWORK_PROVIDERS = {
    ProviderName.OPENAI.value: OpenAIProvider,
    ProviderName.CLAUDE.value: ClaudeProvider,
    ProviderName.GROQ.value: GroqProvider,
    ProviderName.HUGGINGFACE.value: HuggingFaceProvider,
}


def build_providers(
    cfg: Config,
    simulation: Optional[SimulationProvider] = None,
) -> List[ProviderAdapter]:
    """
    Instantiate adapters in priority order.

    Unknown names in the priority list are skipped with a warning; the
    simulation provider always terminates the list.
    """
    if simulation is None:
        simulation = SimulationProvider(
            latency=RandomLatency(
                cfg.SIMULATION.min_latency_seconds,
                cfg.SIMULATION.max_latency_seconds,
            )
        )

    providers: List[ProviderAdapter] = []
    seen = set()
    for name in cfg.PROVIDER_PRIORITY:
        if name in seen or name == ProviderName.SIMULATION.value:
            continue
        adapter_cls = _NETWORK_PROVIDERS.get(name)
        if adapter_cls is None:
            logger.warning("Unknown provider %r in PROVIDER_PRIORITY, skipping", name)
            continue
        seen.add(name)
        providers.append(adapter_cls(cfg.get_credential(name), settings=cfg.PROVIDERS))

    providers.append(simulation)
    return providers


__all__ = [
    "ProviderAdapter",
    "parse_structured_reply",
    "OpenAIProvider",
    "GroqProvider",
    "ClaudeProvider",
    "HuggingFaceProvider",
    "SimulationProvider",
    "LatencyStrategy",
    "NoLatency",
    "RandomLatency",
    "ProviderError",
    "ProviderNetworkError",
    "ProviderDecodeError",
    "ProviderLogicError",
    "build_providers",
    "build_chat_bundle",
    "build_edit_bundle",
]
