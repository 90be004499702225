"""
Provider error taxonomy.

Every failure of a network adapter is raised as one of these types so the
orchestrator can convert it into the local fallback without inspecting SDK
specific exceptions.
"""

from typing import Optional


class ProviderError(RuntimeError):
    """Base class for failures of a single provider call."""

    kind = "provider"

    def __init__(self, provider: str, detail: str, cause: Optional[BaseException] = None):
        super().__init__(f"{provider} {self.kind} error: {detail}")
        self.provider = provider
        self.detail = detail
        self.cause = cause


class ProviderNetworkError(ProviderError):
    """The transport call itself failed (connection, timeout, DNS)."""

    kind = "network"


class ProviderDecodeError(ProviderError):
    """A response arrived but could not be decoded or had no usable content."""

    kind = "decode"


class ProviderLogicError(ProviderError):
    """The provider answered but declined or returned an unusable action."""

    kind = "logic"
