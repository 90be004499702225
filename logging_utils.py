"""
Phase Logging for the Inkwell AI Editing Engine
===============================================

Colored console output that brackets each step of a chat or edit request
(provider selection, the provider call, fallback, local transform) and the
lifetime of a sync connection.

Plain-text tags only; Windows consoles choke on emojis.
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from colorama import Fore, Style, init

from models import PromptBundle

init(autoreset=True)


class Phase:
    """Steps a request or sync session can be in"""
    PROVIDER_SELECTION = "PROVIDER_SELECTION"
    PROVIDER_CALL = "PROVIDER_CALL"
    FALLBACK = "FALLBACK"
    LOCAL_TRANSFORM = "LOCAL_TRANSFORM"
    SYNC = "SYNC"


# (color, tag) per phase
PHASE_STYLES = {
    Phase.PROVIDER_SELECTION: (Fore.CYAN, "[SEL]"),
    Phase.PROVIDER_CALL: (Fore.GREEN, "[AI ]"),
    Phase.FALLBACK: (Fore.YELLOW, "[FBK]"),
    Phase.LOCAL_TRANSFORM: (Fore.BLUE, "[TXT]"),
    Phase.SYNC: (Fore.MAGENTA, "[SYN]"),
}

OUTCOME_STYLES = {
    "provider": (Fore.GREEN + Style.BRIGHT, "[OK]"),
    "local": (Fore.BLUE + Style.BRIGHT, "[LOCAL]"),
    "fallback": (Fore.YELLOW + Style.BRIGHT, "[FALLBACK]"),
}

_RULE = "~" * 60


def _style(phase: Optional[str]):
    return PHASE_STYLES.get(phase, (Fore.WHITE, "[---]"))


class PhaseLogger:
    """
    Per-request logger that tags every line with the active phase.

    Headers, footers and debug lines only appear when ``verbose`` is set;
    prompt and reply dumps need ``extra_verbose``. Warnings always go out.

        phase_logger = PhaseLogger("edit-1a2b", verbose=True)
        with phase_logger.phase(Phase.PROVIDER_CALL, sub_label="openai"):
            phase_logger.log_bundle("gpt-3.5-turbo", bundle)
    """

    def __init__(
        self,
        request_id: str,
        verbose: bool = False,
        extra_verbose: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.request_id = request_id
        self.verbose = verbose or extra_verbose
        self.extra_verbose = extra_verbose
        self.logger = logger or logging.getLogger(__name__)
        self._stack: List[str] = []

    @property
    def current_phase(self) -> Optional[str]:
        return self._stack[-1] if self._stack else None

    @contextmanager
    def phase(self, phase_name: str, sub_label: Optional[str] = None):
        """Bracket a block with a header and a timed footer"""
        self._stack.append(phase_name)
        color, tag = _style(phase_name)
        label = f"{phase_name} - {sub_label}" if sub_label else phase_name
        if self.verbose:
            stamp = datetime.now().strftime("%H:%M:%S")
            self.logger.info(f"{color}{tag} {label} [{self.request_id}] [{stamp}]{Style.RESET_ALL}")
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            self._stack.pop()
            if self.verbose:
                self.logger.info(f"{color}{tag} {label} done in {elapsed:.2f}s{Style.RESET_ALL}")

    def info(self, message: str):
        color, tag = _style(self.current_phase)
        self.logger.info(f"{color}{tag}{Style.RESET_ALL} {message}")

    def debug(self, message: str):
        if self.verbose:
            self.logger.debug(f"{Style.DIM}[{self.request_id}] {message}{Style.RESET_ALL}")

    def warning(self, message: str):
        self.logger.warning(f"{Fore.YELLOW}[WARN] [{self.request_id}] {message}{Style.RESET_ALL}")

    def log_bundle(self, model: str, bundle: PromptBundle, **context):
        """Dump the prompt bundle sent to ``model`` (extra verbose only)"""
        if not self.extra_verbose:
            return
        color, _ = _style(self.current_phase)
        lines = [f"{color}{_RULE}", f"PROMPT TO {model}{Style.RESET_ALL}"]
        lines += [f"  {key}: {value}" for key, value in context.items()]
        lines += [f"{Fore.CYAN}[SYSTEM]{Style.RESET_ALL}", bundle.system,
                  f"{Fore.GREEN}[USER]{Style.RESET_ALL}", bundle.user,
                  f"{color}{_RULE}{Style.RESET_ALL}"]
        self.logger.info("\n".join(lines))

    def log_reply(self, model: str, text: str, **context):
        """Dump what ``model`` answered (extra verbose only)"""
        if not self.extra_verbose:
            return
        color, _ = _style(self.current_phase)
        lines = [f"{color}{_RULE}", f"REPLY FROM {model}{Style.RESET_ALL}"]
        lines += [f"  {key}: {value}" for key, value in context.items()]
        lines += [text or "", f"{color}{_RULE}{Style.RESET_ALL}"]
        self.logger.info("\n".join(lines))

    def log_outcome(self, source: str, reason: str):
        """Say where the answer came from: ``provider``, ``local`` or ``fallback``"""
        color, tag = OUTCOME_STYLES.get(source, OUTCOME_STYLES["fallback"])
        self.logger.info(f"{color}{tag} [{self.request_id}] {reason}{Style.RESET_ALL}")


def create_phase_logger(
    request_id: str,
    verbose: bool = False,
    extra_verbose: bool = False
) -> PhaseLogger:
    return PhaseLogger(request_id=request_id, verbose=verbose, extra_verbose=extra_verbose)
