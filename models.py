"""
Data Models for the Inkwell AI Editing Engine
=============================================

Pydantic models for the canonical provider contract, the sync wire protocol
and the HTTP request/response payloads exchanged with the editor UI.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


logger = logging.getLogger(__name__)


class EditIntent(str, Enum):
    """Kind of transformation requested for a text selection."""
    SHORTEN = "shorten"
    LENGTHEN = "lengthen"
    IMPROVE = "improve"
    FORMAL = "formal"
    CASUAL = "casual"
    TABLE = "table"
    LIST = "list"
    SUMMARIZE = "summarize"
    CUSTOM = "custom"

    @classmethod
    def coerce(cls, value) -> "EditIntent":
        """Return the matching intent, defaulting to IMPROVE for unknown tags."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown edit intent %r, defaulting to improve", value)
            return cls.IMPROVE


class ChatAction(str, Enum):
    """What a chat reply asks the editor to do."""
    CHAT = "chat"
    MODIFY = "modify"


class ProviderName(str, Enum):
    """Identity of each provider, in default priority order."""
    OPENAI = "openai"
    CLAUDE = "claude"
    GROQ = "groq"
    HUGGINGFACE = "huggingface"
    SIMULATION = "simulation"


class PromptBundle(BaseModel):
    """Provider-neutral prompt handed to every adapter."""
    system: str = Field(..., description="System instructions")
    user: str = Field(..., description="User message or text to edit")
    context: str = Field(default="", description="Full document snapshot for reference")


class ChatTurn(BaseModel):
    """Canonical reply of a chat request."""

    model_config = {"populate_by_name": True}

    action: ChatAction = Field(..., description="'chat' for a plain reply, 'modify' to replace the document")
    message: str = Field(..., description="Text shown to the user in the sidebar")
    new_content: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("new_content", "newContent"),
        serialization_alias="newContent",
        description="Full replacement document, present only for 'modify'",
    )

    @model_validator(mode="after")
    def _check_new_content(self):
        if self.action == ChatAction.MODIFY and self.new_content is None:
            raise ValueError("newContent is required when action is 'modify'")
        if self.action == ChatAction.CHAT and self.new_content is not None:
            raise ValueError("newContent is only allowed when action is 'modify'")
        return self


class TransformRequest(BaseModel):
    """A request to transform a selection."""

    model_config = {"populate_by_name": True}

    intent: EditIntent
    source_text: str = Field(
        ...,
        validation_alias=AliasChoices("source_text", "sourceText", "text"),
        description="Selected text; must not be blank",
    )
    custom_instruction: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("custom_instruction", "customInstruction"),
    )

    @field_validator("source_text")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("source text must not be empty")
        return value

    @model_validator(mode="after")
    def _check_instruction(self):
        has_instruction = bool(self.custom_instruction and self.custom_instruction.strip())
        if self.intent == EditIntent.CUSTOM and not has_instruction:
            raise ValueError("customInstruction is required for the custom intent")
        if self.intent != EditIntent.CUSTOM and self.custom_instruction is not None:
            raise ValueError("customInstruction is only accepted for the custom intent")
        return self


class TransformResult(BaseModel):
    """Result of a selection transformation; edited_text is always defined."""

    model_config = {"populate_by_name": True}

    original_text: str = Field(..., serialization_alias="originalText")
    edited_text: str = Field(..., serialization_alias="editedText")
    intent: EditIntent = Field(..., serialization_alias="editType")
    message: str = Field(..., description="Human-readable description of the change")
    provider: str = Field(default=ProviderName.SIMULATION.value, description="Provider that produced the edit")


class SyncMessageType(str, Enum):
    """Message kinds of the sync wire protocol."""
    INIT = "init"
    UPDATE = "update"
    CHAT = "chat"


class SyncMessage(BaseModel):
    """One JSON message on the sync connection: {type, data}."""

    model_config = {"populate_by_name": True}

    kind: SyncMessageType = Field(..., validation_alias=AliasChoices("kind", "type"), serialization_alias="type")
    payload: str = Field(default="", validation_alias=AliasChoices("payload", "data"), serialization_alias="data")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------

class ChatRequest(BaseModel):
    """Body of POST /api/chat."""
    message: str = Field(..., min_length=1)
    document: str = Field(default="", description="Plain-text snapshot of the current document")


class SelectionRange(BaseModel):
    """Character range of the selection inside the document."""
    start: int = Field(..., ge=0, validation_alias=AliasChoices("start", "from"))
    end: int = Field(..., ge=0, validation_alias=AliasChoices("end", "to"))

    @model_validator(mode="after")
    def _ordered(self):
        if self.end < self.start:
            raise ValueError("range end must not precede range start")
        return self

    def as_tuple(self) -> Tuple[int, int]:
        return (self.start, self.end)


class EditRequest(BaseModel):
    """Body of POST /api/edit."""

    model_config = {"populate_by_name": True}

    intent: EditIntent
    text: str
    custom_instruction: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("custom_instruction", "customInstruction"),
    )
    range: Optional[SelectionRange] = None
    document: Optional[str] = None

    @field_validator("text")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("text must not be empty")
        return value


class EditResponse(TransformResult):
    """TransformResult plus the document with the edit applied, when requested."""
    updated_document: Optional[str] = Field(default=None, serialization_alias="updatedDocument")
