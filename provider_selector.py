"""
Provider Selector for the Inkwell AI Editing Engine
===================================================

Chooses the active provider from a fixed priority list. Availability
(credential present) is evaluated once, at construction. On top of the static
priority, every provider keeps a rolling window of call outcomes: a provider
whose failure rate reaches the configured threshold is ranked behind the
healthy ones until a cooldown elapses, after which its window is cleared and
it is probed again. Re-selection is lazy and happens on the next ``select()``.

The offline simulation provider is always available, never demoted and
always last, so ``select()`` can never come back empty.
"""

import logging
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

from config import SelectorSettings
from models import ProviderName
from providers import ProviderAdapter, SimulationProvider

logger = logging.getLogger(__name__)


class ProviderHealth:
    """Rolling outcome window for one provider."""

    def __init__(self, window_size: int):
        self.outcomes: Deque[bool] = deque(maxlen=window_size)
        self.demoted_at: Optional[float] = None
        self.total_calls = 0
        self.total_failures = 0

    @property
    def failure_rate(self) -> float:
        if not self.outcomes:
            return 0.0
        return sum(1 for ok in self.outcomes if not ok) / len(self.outcomes)

    @property
    def demoted(self) -> bool:
        return self.demoted_at is not None

    def record(self, ok: bool) -> None:
        self.outcomes.append(ok)
        self.total_calls += 1
        if not ok:
            self.total_failures += 1

    def reset(self) -> None:
        self.outcomes.clear()
        self.demoted_at = None


class ProviderSelector:
    """Static priority selection with failure-rate demotion."""

    def __init__(
        self,
        providers: Sequence[ProviderAdapter],
        settings: Optional[SelectorSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings or SelectorSettings()
        self._clock = clock

        ordered = [p for p in providers if p.name != ProviderName.SIMULATION.value]
        simulation = next((p for p in providers if p.name == ProviderName.SIMULATION.value), None)
        if simulation is None:
            simulation = SimulationProvider()
        ordered.append(simulation)

        self._providers: List[ProviderAdapter] = ordered
        self._simulation: SimulationProvider = simulation
        self._priority: Dict[str, int] = {p.name: index for index, p in enumerate(ordered)}
        self._available: Dict[str, bool] = {p.name: bool(p.is_available()) for p in ordered}
        self._available[simulation.name] = True
        self._health: Dict[str, ProviderHealth] = {
            p.name: ProviderHealth(self.settings.window_size) for p in ordered
        }
        self._active: Optional[ProviderAdapter] = None
        self._needs_selection = True

        available = [p.name for p in ordered if self._available[p.name]]
        logger.info("Available AI providers (priority order): %s", ", ".join(available))

    @property
    def providers(self) -> List[ProviderAdapter]:
        return list(self._providers)

    @property
    def simulation(self) -> SimulationProvider:
        return self._simulation

    def get(self, name: str) -> Optional[ProviderAdapter]:
        return next((p for p in self._providers if p.name == name), None)

    def select(self) -> ProviderAdapter:
        """Return the provider to use for the next call."""
        self._expire_cooldowns()
        if self._needs_selection or self._active is None:
            previous = self._active
            self._active = self._rank()[0]
            self._needs_selection = False
            if previous is None:
                logger.info("Using AI provider: %s", self._active.name)
            elif previous is not self._active:
                logger.warning("Switching AI provider: %s -> %s", previous.name, self._active.name)
        return self._active

    @property
    def active_name(self) -> str:
        return self.select().name

    def record_success(self, name: str) -> None:
        self._record(name, True)

    def record_failure(self, name: str) -> None:
        self._record(name, False)

    def _record(self, name: str, ok: bool) -> None:
        health = self._health.get(name)
        if health is None or name == self._simulation.name:
            return

        health.record(ok)
        settings = self.settings
        if (
            not ok
            and not health.demoted
            and len(health.outcomes) >= settings.min_samples
            and health.failure_rate >= settings.failure_threshold
        ):
            health.demoted_at = self._clock()
            logger.warning(
                "Demoting provider %s (failure rate %.0f%% over %d calls)",
                name,
                health.failure_rate * 100,
                len(health.outcomes),
            )
        self._needs_selection = True

    def _expire_cooldowns(self) -> None:
        now = self._clock()
        for name, health in self._health.items():
            if health.demoted and now - health.demoted_at >= self.settings.cooldown_seconds:
                logger.info("Cooldown elapsed for provider %s, probing again", name)
                health.reset()
                self._needs_selection = True

    def _rank(self) -> List[ProviderAdapter]:
        candidates = [p for p in self._providers if self._available[p.name]]
        return sorted(
            candidates,
            key=lambda p: (self._health[p.name].demoted, self._priority[p.name]),
        )

    def snapshot(self) -> List[Dict[str, Any]]:
        """Per-provider availability and health, in priority order."""
        active = self.select()
        report = []
        for provider in self._providers:
            health = self._health[provider.name]
            entry = provider.describe()
            entry.update({
                "priority": self._priority[provider.name],
                "available": self._available[provider.name],
                "active": provider is active,
                "demoted": health.demoted,
                "failure_rate": round(health.failure_rate, 3),
                "recent_calls": len(health.outcomes),
                "total_calls": health.total_calls,
                "total_failures": health.total_failures,
            })
            report.append(entry)
        return report
