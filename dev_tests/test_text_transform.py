"""
Tests for text_transform - the deterministic offline editing engine.

Covers every intent, the whole-document heuristics used by the simulated
chat, and the selection helpers.
"""

import math
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import EditIntent
from text_transform import (
    TextTransformEngine,
    apply_replacement,
    casualize,
    format_document,
    formalize,
    improve_document,
    remove_common_ai_artifacts,
    resolve_custom_intent,
    split_sentences,
)


MEETING_NOTES = (
    "The meeting went well. We discussed the budget. "
    "Everyone agreed to the plan. Next steps were assigned."
)


@pytest.fixture
def engine():
    return TextTransformEngine()


# ============================================================================
# Totality
# ============================================================================

class TestTotality:

    @pytest.mark.parametrize("intent", list(EditIntent))
    @pytest.mark.parametrize("text", ["", "   ", "One", "A. B! C?", "...", "\n\n", "x" * 500])
    def test_transform_always_returns_a_string(self, engine, intent, text):
        """
        Given: Any intent and any text, including blank and punctuation-only
        When: transform() is called
        Then: A string comes back without raising
        """
        result = engine.transform(intent, text, custom_instruction="make it shorter")
        assert isinstance(result, str)

    def test_blank_text_is_returned_unchanged(self, engine):
        assert engine.transform(EditIntent.LENGTHEN, "   ") == "   "

    def test_none_text_becomes_empty_string(self, engine):
        assert engine.transform(EditIntent.SHORTEN, None) == ""

    def test_unknown_intent_is_treated_as_improve(self, engine):
        assert engine.transform("sparkle", "i like teh stuff.") == engine.transform(
            EditIntent.IMPROVE, "i like teh stuff."
        )


# ============================================================================
# Shorten
# ============================================================================

class TestShorten:

    def test_single_sentence_is_unchanged(self, engine):
        text = "Only one sentence here."
        assert engine.transform(EditIntent.SHORTEN, text) == text

    @pytest.mark.parametrize("count", [2, 3, 4, 5, 7, 10])
    def test_keeps_ceil_seventy_percent_of_sentences(self, engine, count):
        text = " ".join(f"Sentence number {i}." for i in range(count))
        result = engine.transform(EditIntent.SHORTEN, text)
        assert len(split_sentences(result)) == math.ceil(0.7 * count)
        assert result.endswith(".")

    def test_meeting_notes_keep_three_sentences(self, engine):
        result = engine.transform(EditIntent.SHORTEN, MEETING_NOTES)
        assert split_sentences(result) == [
            "The meeting went well",
            "We discussed the budget",
            "Everyone agreed to the plan",
        ]
        assert result == "The meeting went well. We discussed the budget. Everyone agreed to the plan."


# ============================================================================
# Lengthen / Improve
# ============================================================================

class TestLengthen:

    def test_expands_intensifiers_and_appends_closing_sentence(self, engine):
        result = engine.transform(EditIntent.LENGTHEN, "The food was good. Service was bad.")
        assert "excellent and well-executed" in result
        assert "problematic and concerning" in result
        assert "Furthermore, " in result
        assert result.endswith("This demonstrates the complexity and importance of the matter at hand.")

    def test_replaces_standalone_this(self, engine):
        result = engine.transform(EditIntent.LENGTHEN, "This works")
        assert result.startswith("This particular aspect works.")

    def test_this_after_furthermore_stays_lowercase(self, engine):
        result = engine.transform(EditIntent.LENGTHEN, "The plan is set. This is final.")
        assert "Furthermore, this particular aspect is final." in result
        assert "Furthermore, This" not in result

    def test_result_is_longer(self, engine):
        text = "Short note"
        assert len(engine.transform(EditIntent.LENGTHEN, text)) > len(text)


class TestImprove:

    def test_fixes_typos_and_capitalization(self, engine):
        assert engine.transform(EditIntent.IMPROVE, "i think teh cat is nice.") == "I think the cat is nice."

    def test_upgrades_very_intensifiers(self, engine):
        result = engine.transform(EditIntent.IMPROVE, "It was very good and very important.")
        assert "exceptional" in result
        assert "crucial" in result
        assert "very" not in result

    def test_replaces_generic_wording(self, engine):
        result = engine.transform(EditIntent.IMPROVE, "We got a lot of stuff and things.")
        assert "obtained" in result
        assert "numerous" in result
        assert "material" in result
        assert "elements" in result

    def test_collapses_repeated_punctuation(self, engine):
        assert engine.transform(EditIntent.IMPROVE, "wow!!! really??") == "Wow! Really?"

    def test_keeps_line_breaks_of_multiline_selection(self, engine):
        text = "Shopping list:\n\nThe stuff is very good.\nmilk"
        result = engine.transform(EditIntent.IMPROVE, text)
        assert result == "Shopping list:\n\nThe material is exceptional.\nMilk"

    def test_collapses_spaces_but_not_newlines(self, engine):
        assert engine.transform(EditIntent.IMPROVE, "one  \t two\nthree") == "One two\nThree"


# ============================================================================
# Formal / Casual
# ============================================================================

class TestTone:

    def test_formal_expands_contractions(self):
        result = formalize("I can't go, maybe later guys.")
        assert result == "I cannot go, perhaps later individuals."

    def test_casual_contracts_expansions(self):
        result = casualize("We cannot attend. Perhaps the individuals will.")
        assert result == "We can't attend. Maybe the guys will."

    def test_formal_preserves_leading_capital(self):
        assert formalize("Maybe.") == "Perhaps."

    @pytest.mark.parametrize("text", [
        "I think we don't need it, okay?",
        "It isn't kind of fun, guys.",
        "They won't and can't.",
    ])
    def test_formal_is_a_fixed_point_after_one_application(self, text):
        once = formalize(text)
        assert formalize(once) == once

    @pytest.mark.parametrize("text", [
        "It is my opinion that we do not need it.",
        "It is not somewhat acceptable, individuals.",
        "They will not and cannot.",
    ])
    def test_casual_is_a_fixed_point_after_one_application(self, text):
        once = casualize(text)
        assert casualize(once) == once

    def test_casual_then_formal_round_trip_is_stable(self):
        text = "We don't know, maybe."
        assert formalize(casualize(formalize(text))) == formalize(text)


# ============================================================================
# Table / List / Summarize
# ============================================================================

class TestStructure:

    def test_table_requires_two_sentences(self, engine):
        assert engine.transform(EditIntent.TABLE, "Just one.") == "Just one."

    def test_table_has_header_plus_one_row_per_sentence(self, engine):
        result = engine.transform(EditIntent.TABLE, MEETING_NOTES)
        lines = result.strip().split("\n")
        assert lines[0] == "| Item | Description |"
        assert lines[1] == "|------|-------------|"
        assert len(lines) == 4 + 2
        assert lines[2] == "| 1 | The meeting went well |"
        assert lines[5] == "| 4 | Next steps were assigned |"

    def test_table_escapes_pipes(self, engine):
        result = engine.transform(EditIntent.TABLE, "A | B. C.")
        assert "| 1 | A / B |" in result

    def test_list_requires_two_sentences(self, engine):
        assert engine.transform(EditIntent.LIST, "Single") == "Single"

    def test_list_emits_one_bullet_per_sentence(self, engine):
        result = engine.transform(EditIntent.LIST, "Buy milk. Call mom! Fix bike?")
        assert result == "• Buy milk\n• Call mom\n• Fix bike"

    def test_summarize_leaves_short_text(self, engine):
        text = "Only a handful of words here."
        assert engine.transform(EditIntent.SUMMARIZE, text) == text

    def test_summarize_long_text(self, engine):
        text = (
            "Quarterly revenue increased substantially. Marketing initiatives delivered "
            "measurable improvements across several regions while operational expenses "
            "remained stable throughout the reporting period and beyond."
        )
        result = engine.transform(EditIntent.SUMMARIZE, text)
        assert result.startswith("Summary: Quarterly revenue increased substantially. Key terms: ")
        terms = result[len("Summary: Quarterly revenue increased substantially. Key terms: "):-1].split(", ")
        assert terms == ["Quarterly", "revenue", "increased", "substantially", "Marketing"]


# ============================================================================
# Custom
# ============================================================================

class TestCustom:

    @pytest.mark.parametrize("instruction,expected", [
        ("Make it more professional", EditIntent.FORMAL),
        ("sound FORMAL please", EditIntent.FORMAL),
        ("keep it friendly", EditIntent.CASUAL),
        ("more concise", EditIntent.SHORTEN),
        ("add detail", EditIntent.LENGTHEN),
        ("rhyme it", EditIntent.IMPROVE),
        ("", EditIntent.IMPROVE),
        (None, EditIntent.IMPROVE),
    ])
    def test_instruction_cues(self, instruction, expected):
        assert resolve_custom_intent(instruction) == expected

    def test_custom_transform_uses_resolved_intent(self, engine):
        result = engine.transform(EditIntent.CUSTOM, MEETING_NOTES, "make it shorter")
        assert result == engine.transform(EditIntent.SHORTEN, MEETING_NOTES)

    def test_describe_custom_includes_instruction(self):
        assert TextTransformEngine.describe(EditIntent.CUSTOM, "be brief") == "Custom edit applied: be brief"

    def test_describe_builtin(self):
        assert TextTransformEngine.describe("table") == "Converted to table format"


# ============================================================================
# Document heuristics and helpers
# ============================================================================

class TestDocumentOps:

    def test_improve_document_capitalizes_sentences(self):
        assert improve_document("hello there.  how are you?") == "Hello there. How are you?"

    def test_improve_document_fixes_doubled_words(self):
        assert improve_document("They was were here nad there.") == "They were here and there."

    def test_format_document_promotes_heading_and_bullets(self):
        text = "Shopping\n\n\n\n- eggs\n* milk\nDone.Next."
        assert format_document(text) == "# Shopping\n\n• eggs\n• milk\nDone. Next."

    def test_format_document_keeps_existing_heading(self):
        assert format_document("# Title\nBody.") == "# Title\nBody."


class TestHelpers:

    def test_split_sentences_drops_blanks(self):
        assert split_sentences("One... Two?! ") == ["One", "Two"]

    def test_remove_artifacts_strips_preamble_and_quotes(self):
        assert remove_common_ai_artifacts('Here is the edited text: "Clean copy."') == "Clean copy."

    def test_remove_artifacts_strips_code_fence(self):
        assert remove_common_ai_artifacts("```text\nFenced body\n```") == "Fenced body"

    def test_apply_replacement(self):
        assert apply_replacement("Hello world", 6, 11, "there") == "Hello there"

    def test_apply_replacement_clamps_stale_range(self):
        assert apply_replacement("abc", 2, 99, "Z") == "abZ"
