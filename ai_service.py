"""
AI Service Module for the Inkwell AI Editing Engine
===================================================

The orchestrator the editor UI talks to. It asks the ProviderSelector for the
current provider, issues a single call, and converts any failure into the
offline simulation result. Callers never see a provider error: the worst
outcome is a local-heuristic answer.

The orchestrator is constructed explicitly (see ``build_orchestrator``) and
owned by whoever owns the editing session.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

from config import Config, config as default_config
from logging_utils import Phase, create_phase_logger
from models import ChatAction, ChatTurn, EditIntent, TransformRequest, TransformResult
from provider_selector import ProviderSelector
from providers import (
    LatencyStrategy,
    ProviderAdapter,
    ProviderError,
    ProviderLogicError,
    SimulationProvider,
    build_chat_bundle,
    build_edit_bundle,
    build_providers,
)
from text_transform import TextTransformEngine, remove_common_ai_artifacts


logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "No text selected; nothing was changed."
NO_INSTRUCTION_MESSAGE = "No custom instruction given; nothing was changed."


class AIOrchestrator:
    """Dispatches chat and edit requests with a guaranteed local fallback."""

    def __init__(
        self,
        selector: ProviderSelector,
        config: Optional[Config] = None,
        verbose: bool = False,
        extra_verbose: bool = False,
    ):
        self.selector = selector
        self.config = config or default_config
        self.verbose = verbose
        self.extra_verbose = extra_verbose

    @property
    def simulation(self) -> SimulationProvider:
        return self.selector.simulation

    def _phase_logger(self, kind: str):
        return create_phase_logger(
            request_id=f"{kind}-{uuid.uuid4().hex[:8]}",
            verbose=self.verbose,
            extra_verbose=self.extra_verbose,
        )

    def _select(self, phase_logger) -> ProviderAdapter:
        with phase_logger.phase(Phase.PROVIDER_SELECTION):
            provider = self.selector.select()
            phase_logger.debug(f"Selected provider: {provider.name}")
        return provider

    def _record_failure(self, provider: ProviderAdapter, exc: Exception, phase_logger) -> None:
        self.selector.record_failure(provider.name)
        if isinstance(exc, ProviderError):
            phase_logger.warning(f"{provider.name} failed ({exc.kind}): {exc.detail}")
        else:
            logger.exception("Unexpected error from provider %s", provider.name)

    async def chat_respond(self, message: str, document_text: str = "") -> ChatTurn:
        """
        Answer a sidebar chat message about the current document.

        Args:
            message: The user's message
            document_text: Plain-text snapshot of the current document

        Returns:
            ChatTurn; 'modify' replies carry the full replacement document
        """
        document_text = document_text or ""
        phase_logger = self._phase_logger("chat")
        provider = self._select(phase_logger)

        if provider.is_network:
            bundle = build_chat_bundle(self.config.CHAT_SYSTEM_PROMPT, message, document_text)
            try:
                with phase_logger.phase(Phase.PROVIDER_CALL, sub_label=provider.name):
                    phase_logger.log_bundle(provider.model_id, bundle)
                    turn = await provider.call(bundle)
                    phase_logger.log_reply(
                        provider.model_id,
                        turn.new_content if turn.action == ChatAction.MODIFY else turn.message,
                        action=turn.action.value,
                    )
                self.selector.record_success(provider.name)
                phase_logger.log_outcome("provider", f"{provider.name} answered")
                return turn
            except Exception as exc:
                self._record_failure(provider, exc, phase_logger)

            with phase_logger.phase(Phase.FALLBACK, sub_label="simulation"):
                turn = await self.simulation.chat(message, document_text)
            phase_logger.log_outcome("fallback", f"{provider.name} unavailable, used simulation")
            return turn

        with phase_logger.phase(Phase.LOCAL_TRANSFORM, sub_label="chat"):
            turn = await self.simulation.chat(message, document_text)
        phase_logger.log_outcome("local", "no network provider available")
        return turn

    async def edit_selection(
        self,
        intent: Union[EditIntent, str],
        text: str,
        custom_instruction: Optional[str] = None,
    ) -> TransformResult:
        """
        Rewrite a selection for a toolbar intent.

        A blank selection, or the custom intent without an instruction, does
        no work and returns the text unchanged.
        """
        intent = EditIntent.coerce(intent)
        if not isinstance(text, str):
            text = "" if text is None else str(text)
        instruction = (custom_instruction or "").strip()

        if not text.strip():
            return TransformResult(original_text=text, edited_text=text, intent=intent, message=NO_SELECTION_MESSAGE)
        if intent == EditIntent.CUSTOM and not instruction:
            return TransformResult(original_text=text, edited_text=text, intent=intent, message=NO_INSTRUCTION_MESSAGE)
        request = TransformRequest(
            intent=intent,
            source_text=text,
            custom_instruction=instruction if intent == EditIntent.CUSTOM else None,
        )
        text, instruction = request.source_text, request.custom_instruction

        phase_logger = self._phase_logger("edit")
        provider = self._select(phase_logger)

        if provider.is_network:
            bundle = build_edit_bundle(self.config.EDIT_SYSTEM_PROMPT, intent, text, instruction)
            try:
                with phase_logger.phase(Phase.PROVIDER_CALL, sub_label=provider.name):
                    phase_logger.log_bundle(provider.model_id, bundle, intent=intent.value)
                    turn = await provider.call(bundle)
                    edited = self._edited_text(provider.name, turn)
                    phase_logger.log_reply(provider.model_id, edited)
                self.selector.record_success(provider.name)
                phase_logger.log_outcome("provider", f"{provider.name} edited the selection")
                return TransformResult(
                    original_text=text,
                    edited_text=edited,
                    intent=intent,
                    message=TextTransformEngine.describe(intent, instruction),
                    provider=provider.name,
                )
            except Exception as exc:
                self._record_failure(provider, exc, phase_logger)

            with phase_logger.phase(Phase.FALLBACK, sub_label=intent.value):
                result = await self.simulation.edit(intent, text, instruction)
            phase_logger.log_outcome("fallback", f"{provider.name} unavailable, used local transform")
            return result

        with phase_logger.phase(Phase.LOCAL_TRANSFORM, sub_label=intent.value):
            result = await self.simulation.edit(intent, text, instruction)
        phase_logger.log_outcome("local", "no network provider available")
        return result

    @staticmethod
    def _edited_text(provider: str, turn: ChatTurn) -> str:
        raw = turn.new_content if turn.action == ChatAction.MODIFY else turn.message
        cleaned = remove_common_ai_artifacts(raw or "")
        if not cleaned.strip():
            raise ProviderLogicError(provider, "edit reply was empty after cleanup")
        return cleaned

    def provider_status(self) -> List[Dict[str, Any]]:
        return self.selector.snapshot()

    async def close(self):
        """Close HTTP clients held by the provider adapters."""
        for provider in self.selector.providers:
            try:
                await provider.close()
            except Exception as exc:
                logger.warning("Error closing provider %s: %s", provider.name, exc)


def build_orchestrator(
    cfg: Optional[Config] = None,
    latency: Optional[LatencyStrategy] = None,
    providers: Optional[List[ProviderAdapter]] = None,
    verbose: bool = False,
    extra_verbose: bool = False,
) -> AIOrchestrator:
    """
    Wire adapters, selector and orchestrator from configuration.

    Args:
        cfg: Configuration (defaults to the module-level config)
        latency: Latency strategy for the simulation provider
        providers: Pre-built adapters, mainly for tests
    """
    cfg = cfg or default_config
    if providers is None:
        simulation = SimulationProvider(latency=latency) if latency is not None else None
        providers = build_providers(cfg, simulation=simulation)
    selector = ProviderSelector(providers, settings=cfg.SELECTOR)
    return AIOrchestrator(selector, config=cfg, verbose=verbose, extra_verbose=extra_verbose)
