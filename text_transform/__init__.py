"""
Text Transform Module - Deterministic offline editing for the editor toolbar.

This module is the guaranteed-success fallback of the AI editing engine. It
provides:

1. **Intent transforms**: shorten, lengthen, improve, formal, casual, table,
   list, summarize and custom (keyword-sniffed instruction)
2. **Document heuristics**: grammar cleanup and layout cleanup for whole
   documents, used by the simulated chat assistant
3. **Selection helpers**: sentence splitting, AI artifact cleanup and
   applying an edited selection back into the document

Usage:
    from text_transform import TextTransformEngine
    from models import EditIntent

    engine = TextTransformEngine()
    edited = engine.transform(EditIntent.LIST, "First point. Second point.")
"""

from .engine import (
    TextTransformEngine,
    casualize,
    formalize,
    improve,
    lengthen,
    listify,
    resolve_custom_intent,
    shorten,
    summarize,
    tabulate,
)
from .document_ops import fix_grammar, format_document, improve_document
from .text_utils import (
    apply_replacement,
    count_words,
    normalize_whitespace,
    remove_common_ai_artifacts,
    split_sentences,
)

__all__ = [
    "TextTransformEngine",
    "shorten",
    "lengthen",
    "improve",
    "formalize",
    "casualize",
    "tabulate",
    "listify",
    "summarize",
    "resolve_custom_intent",
    "fix_grammar",
    "improve_document",
    "format_document",
    "apply_replacement",
    "count_words",
    "normalize_whitespace",
    "remove_common_ai_artifacts",
    "split_sentences",
]
