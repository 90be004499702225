"""
Substitution tables used by the local transformation engine.

The formal and casual tables are inverses of each other and disjoint: no
replacement produced by one table is matched again by the same table.
"""

from typing import Dict, List, Tuple

# lengthen: whole-word intensifier expansion
LENGTHEN_EXPANSIONS: Dict[str, str] = {
    "good": "excellent and well-executed",
    "bad": "problematic and concerning",
    "nice": "pleasant and appealing",
    "great": "outstanding and remarkable",
}

LENGTHEN_CLOSING_SENTENCE = "This demonstrates the complexity and importance of the matter at hand."

# improve: "very X" -> stronger word
VERY_INTENSIFIERS: Dict[str, str] = {
    "good": "exceptional",
    "bad": "terrible",
    "big": "enormous",
    "small": "tiny",
    "important": "crucial",
    "difficult": "challenging",
}

# improve: generic wording -> more precise wording (regex, replacement template)
GENERIC_WORDING: List[Tuple[str, str]] = [
    (r"\bthing(s?)\b", r"element\1"),
    (r"\bstuff\b", "material"),
    (r"\bgot\b", "obtained"),
    (r"\ba lot of\b", "numerous"),
]

# improve: common typos and doubled words
TYPO_FIXES: List[Tuple[str, str]] = [
    (r"\bteh\b", "the"),
    (r"\bnad\b", "and"),
    (r"\bwas\s+were\b", "were"),
    (r"\btheir\s+they\b", "they"),
    (r"\byour\s+you\b", "you"),
]

FORMAL_SUBSTITUTIONS: List[Tuple[str, str]] = [
    ("can't", "cannot"),
    ("won't", "will not"),
    ("doesn't", "does not"),
    ("don't", "do not"),
    ("isn't", "is not"),
    ("aren't", "are not"),
    ("I think", "It is my opinion that"),
    ("maybe", "perhaps"),
    ("okay", "acceptable"),
    ("kind of", "somewhat"),
    ("guys", "individuals"),
]

CASUAL_SUBSTITUTIONS: List[Tuple[str, str]] = [
    (expanded, contracted) for contracted, expanded in FORMAL_SUBSTITUTIONS
]

# custom: instruction keywords -> intent tag, checked in order
CUSTOM_INSTRUCTION_CUES: List[Tuple[Tuple[str, ...], str]] = [
    (("professional", "formal"), "formal"),
    (("casual", "friendly"), "casual"),
    (("shorter", "concise"), "shorten"),
    (("longer", "detail"), "lengthen"),
]

INTENT_MESSAGES: Dict[str, str] = {
    "shorten": "Text shortened while preserving key meaning",
    "lengthen": "Text expanded with additional detail",
    "improve": "Writing quality improved",
    "formal": "Text made more formal",
    "casual": "Text made more casual",
    "table": "Converted to table format",
    "list": "Converted to list format",
    "summarize": "Text summarized",
}
