"""
Text Transform Utilities - Sentence splitting, cleanup and range replacement.

Shared helpers for the local transformation engine and for cleaning text
returned by network providers.
"""

import re
from typing import List, Tuple

_SENTENCE_TERMINATORS = re.compile(r"[.!?]+")


def split_sentences(text: str) -> List[str]:
    """
    Split text into trimmed, non-blank sentences.

    Runs of ``.``, ``!`` and ``?`` are treated as one boundary and are not
    kept in the returned sentences.

    Args:
        text: Text to split

    Returns:
        List of sentences without their terminators
    """
    if not text:
        return []
    return [piece.strip() for piece in _SENTENCE_TERMINATORS.split(text) if piece.strip()]


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len((text or "").split())


def normalize_whitespace(text: str) -> str:
    """Replace non-breaking spaces and collapse spaces/tabs into one space."""
    if not text:
        return ""
    text = text.replace("\u00A0", " ")
    text = re.sub(r"[ \t]+", " ", text)
    return text.strip()


def match_case(source: str, replacement: str) -> str:
    """Capitalize the replacement when the matched source starts with a capital."""
    if source[:1].isupper() and replacement[:1].islower():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def remove_common_ai_artifacts(text: str) -> str:
    """
    Remove common AI response artifacts from an edited selection.

    Removes:
    - Leading phrases like "Here is the edited text:"
    - Surrounding quotes
    - Markdown code block markers

    Args:
        text: Text to clean

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    text = text.strip()

    leading_patterns = [
        r"^Here(?:'s| is) the (?:edited|revised|corrected|updated|shortened|expanded) (?:text|version|paragraph)[:.]\s*",
        r"^The (?:edited|revised|corrected|updated) (?:text|version|paragraph):\s*",
        r"^(?:Edited|Revised|Corrected|Updated) (?:text|version|paragraph):\s*",
        r"^Sure[,!.]?\s*(?:here(?:'s| is)[^\n:]*)?[:\n]\s*",
        r"^Certainly[,!.]?\s*(?:here(?:'s| is)[^\n:]*)?[:\n]\s*",
    ]
    for pattern in leading_patterns:
        text = re.sub(pattern, "", text, flags=re.IGNORECASE)

    text = text.strip()

    if len(text) >= 2 and ((text.startswith('"') and text.endswith('"')) or
                           (text.startswith("'") and text.endswith("'"))):
        text = text[1:-1]

    if text.startswith("```") and text.endswith("```") and len(text) >= 6:
        text = text[3:-3]
        lines = text.split("\n", 1)
        if len(lines) > 1 and (not lines[0].strip() or lines[0].strip().isalpha()):
            text = lines[1]

    return text.strip()


def apply_replacement(document: str, start: int, end: int, replacement: str) -> str:
    """
    Replace ``document[start:end]`` with ``replacement``.

    Positions are clamped to the document bounds so a stale selection range
    never raises.

    Args:
        document: Full document text
        start: Selection start (inclusive)
        end: Selection end (exclusive)
        replacement: Text to insert

    Returns:
        The document with the selection replaced
    """
    start, end = clamp_range(len(document), start, end)
    return document[:start] + replacement + document[end:]


def clamp_range(length: int, start: int, end: int) -> Tuple[int, int]:
    start = max(0, min(start, length))
    end = max(start, min(end, length))
    return start, end
