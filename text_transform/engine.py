"""
Text Transform Engine - Deterministic offline rewrites for each edit intent.

Every transformation is a pure function of its input: no network, no
randomness. ``TextTransformEngine.transform`` is total and returns the input
unchanged whenever a transformation does not make sense (for example
shortening a single sentence).
"""

from __future__ import annotations

import math
import re
import string
from typing import Callable, Dict, List, Optional, Tuple, Union

from models import EditIntent

from .document_ops import fix_grammar
from .tables import (
    CASUAL_SUBSTITUTIONS,
    CUSTOM_INSTRUCTION_CUES,
    FORMAL_SUBSTITUTIONS,
    GENERIC_WORDING,
    INTENT_MESSAGES,
    LENGTHEN_CLOSING_SENTENCE,
    LENGTHEN_EXPANSIONS,
    VERY_INTENSIFIERS,
)
from .text_utils import match_case, split_sentences

SHORTEN_RATIO = 0.7
SUMMARY_MIN_WORDS = 20
SUMMARY_MAX_KEY_TERMS = 5
KEY_TERM_MIN_LENGTH = 6

_LENGTHEN_RE = re.compile(r"\b(" + "|".join(LENGTHEN_EXPANSIONS) + r")\b", re.IGNORECASE)
_VERY_RE = re.compile(r"\bvery (\w+)", re.IGNORECASE)
_THIS_RE = re.compile(r"\bthis\b", re.IGNORECASE)


def _compile_table(table: List[Tuple[str, str]]) -> List[Tuple[re.Pattern, str]]:
    return [
        (re.compile(r"\b" + re.escape(source) + r"\b", re.IGNORECASE), target)
        for source, target in table
    ]


_FORMAL_TABLE = _compile_table(FORMAL_SUBSTITUTIONS)
_CASUAL_TABLE = _compile_table(CASUAL_SUBSTITUTIONS)


def _substitute(text: str, table: List[Tuple[re.Pattern, str]]) -> str:
    for pattern, target in table:
        text = pattern.sub(lambda match, target=target: match_case(match.group(0), target), text)
    return text


def shorten(text: str) -> str:
    """Keep the first ceil(70%) of the sentences."""
    sentences = split_sentences(text)
    if len(sentences) <= 1:
        return text
    keep = math.ceil(len(sentences) * SHORTEN_RATIO)
    return ". ".join(sentences[:keep]) + "."


def _expand_this(match: re.Match) -> str:
    # Capitalized only where a sentence starts, never after "Furthermore, "
    before = match.string[:match.start()].rstrip()
    if not before or before[-1] in ".!?":
        return match_case(match.group(0), "this particular aspect")
    return "this particular aspect"


def lengthen(text: str) -> str:
    """Expand intensifiers, chain sentences with "Furthermore" and add a closing sentence."""
    enhanced = _LENGTHEN_RE.sub(
        lambda match: match_case(match.group(0), LENGTHEN_EXPANSIONS[match.group(0).lower()]),
        text,
    )
    enhanced = re.sub(r"([.!?]) (?=\S)", r"\1 Furthermore, ", enhanced)
    enhanced = _THIS_RE.sub(_expand_this, enhanced)
    enhanced = enhanced.rstrip()
    if enhanced and enhanced[-1] not in ".!?":
        enhanced += "."
    return f"{enhanced} {LENGTHEN_CLOSING_SENTENCE}"


def improve(text: str) -> str:
    """Grammar cleanup followed by stronger, more precise wording; line breaks are kept."""
    improved = fix_grammar(text)

    def _intensify(match: re.Match) -> str:
        stronger = VERY_INTENSIFIERS.get(match.group(1).lower())
        if stronger is None:
            return match.group(0)
        return match_case(match.group(0), stronger)

    improved = _VERY_RE.sub(_intensify, improved)
    for pattern, replacement in GENERIC_WORDING:
        improved = re.sub(
            pattern,
            lambda match, replacement=replacement: match_case(match.group(0), match.expand(replacement)),
            improved,
            flags=re.IGNORECASE,
        )
    return improved


def formalize(text: str) -> str:
    return _substitute(text, _FORMAL_TABLE)


def casualize(text: str) -> str:
    return _substitute(text, _CASUAL_TABLE)


def tabulate(text: str) -> str:
    """Markdown table with one numbered row per sentence."""
    sentences = split_sentences(text)
    if len(sentences) < 2:
        return text
    rows = ["| Item | Description |", "|------|-------------|"]
    for index, sentence in enumerate(sentences, start=1):
        rows.append(f"| {index} | {sentence.replace('|', '/')} |")
    return "\n".join(rows) + "\n"


def listify(text: str) -> str:
    sentences = split_sentences(text)
    if len(sentences) < 2:
        return text
    return "\n".join(f"• {sentence}" for sentence in sentences)


def summarize(text: str) -> str:
    """First sentence plus up to five long words as key terms."""
    words = text.split()
    if len(words) <= SUMMARY_MIN_WORDS:
        return text
    sentences = split_sentences(text)
    first_sentence = sentences[0] if sentences else text.strip()
    key_terms = [
        word for word in (raw.strip(string.punctuation) for raw in words)
        if len(word) >= KEY_TERM_MIN_LENGTH
    ][:SUMMARY_MAX_KEY_TERMS]
    return f"Summary: {first_sentence}. Key terms: {', '.join(key_terms)}."


def resolve_custom_intent(instruction: Optional[str]) -> EditIntent:
    """Map a free-text instruction to the closest built-in intent."""
    lowered = (instruction or "").lower()
    for cues, intent in CUSTOM_INSTRUCTION_CUES:
        if any(cue in lowered for cue in cues):
            return EditIntent(intent)
    return EditIntent.IMPROVE


class TextTransformEngine:
    """
    Offline implementation of every edit intent.

    Example:
        engine = TextTransformEngine()
        engine.transform(EditIntent.SHORTEN, "One. Two. Three. Four.")
        # 'One. Two. Three.'
    """

    def __init__(self):
        self._handlers: Dict[EditIntent, Callable[[str], str]] = {
            EditIntent.SHORTEN: shorten,
            EditIntent.LENGTHEN: lengthen,
            EditIntent.IMPROVE: improve,
            EditIntent.FORMAL: formalize,
            EditIntent.CASUAL: casualize,
            EditIntent.TABLE: tabulate,
            EditIntent.LIST: listify,
            EditIntent.SUMMARIZE: summarize,
        }

    def transform(
        self,
        intent: Union[EditIntent, str],
        text: str,
        custom_instruction: Optional[str] = None,
    ) -> str:
        """
        Rewrite text for the given intent.

        Args:
            intent: Edit intent (unknown tags are treated as improve)
            text: Selected text
            custom_instruction: Free-text instruction, used for the custom intent

        Returns:
            The edited text, or the input unchanged when nothing applies
        """
        if not isinstance(text, str):
            text = "" if text is None else str(text)
        if not text.strip():
            return text

        intent = EditIntent.coerce(intent)
        if intent == EditIntent.CUSTOM:
            intent = resolve_custom_intent(custom_instruction)
        return self._handlers[intent](text)

    @staticmethod
    def describe(intent: Union[EditIntent, str], custom_instruction: Optional[str] = None) -> str:
        """Human-readable description of the change an intent makes."""
        intent = EditIntent.coerce(intent)
        if intent == EditIntent.CUSTOM:
            return f"Custom edit applied: {custom_instruction or ''}".rstrip()
        return INTENT_MESSAGES[intent.value]
