"""
Grammar and layout heuristics. The chat simulation runs them over whole
documents; the ``improve`` intent reuses the layout-preserving grammar step.
"""

import re

from .tables import TYPO_FIXES
from .text_utils import match_case, normalize_whitespace


def fix_grammar(text: str) -> str:
    """
    Grammar and punctuation fixes that keep the text's line layout.

    - Fix common typos ("teh", "nad") and doubled words ("was were")
    - Capitalize standalone "i"
    - Collapse runs of spaces and repeated punctuation
    - Capitalize the first letter of every sentence and every line
    """
    if not text:
        return text

    fixed = text
    for pattern, replacement in TYPO_FIXES:
        fixed = re.sub(
            pattern,
            lambda match, replacement=replacement: match_case(match.group(0), replacement),
            fixed,
            flags=re.IGNORECASE,
        )

    fixed = re.sub(r"\bi\b", "I", fixed)
    fixed = re.sub(r"\.+", ".", fixed)
    fixed = re.sub(r"\?+", "?", fixed)
    fixed = re.sub(r"!+", "!", fixed)
    fixed = re.sub(r",+", ",", fixed)
    fixed = normalize_whitespace(fixed)

    return re.sub(
        r"(^|[.!?]\s+)([a-z])",
        lambda match: match.group(1) + match.group(2).upper(),
        fixed,
        flags=re.MULTILINE,
    )


def improve_document(text: str) -> str:
    """Whole-document cleanup: joins all lines into prose, then fixes grammar."""
    if not text:
        return text
    return fix_grammar(re.sub(r"\s+", " ", text))


def format_document(text: str) -> str:
    """
    Tidy document layout.

    - Add a space after a period glued to the next sentence
    - Limit blank runs to one empty line
    - Turn "-" / "*" list markers into bullets
    - Promote a short first line without a period to a heading
    """
    if not text:
        return text

    formatted = re.sub(r"\.([A-Z])", r". \1", text)
    formatted = re.sub(r"\n{3,}", "\n\n", formatted)
    formatted = re.sub(r"^(?:-|\*)\s*(.+)$", r"• \1", formatted, flags=re.MULTILINE)

    lines = formatted.split("\n")
    first = lines[0]
    if first.strip() and len(first) < 60 and "." not in first and not first.startswith("#"):
        lines[0] = "# " + first
        formatted = "\n".join(lines)

    return formatted
