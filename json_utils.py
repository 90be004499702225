"""
JSON utilities for the Inkwell AI Editing Engine
================================================

Thin orjson wrapper exposing the familiar ``dumps``/``loads`` interface.
Used for sync wire messages and provider payload parsing.
"""

import re
from typing import Any, Optional

import orjson


_CODE_FENCE_RE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def dumps(obj: Any, indent: Optional[int] = None, default: callable = None) -> str:
    """
    Serialize obj to a JSON string.

    Args:
        obj: Object to serialize
        indent: Indentation level for pretty printing (orjson only supports 2)
        default: Callable for objects that cannot be serialized (e.g., default=str)

    Returns:
        JSON string (orjson returns bytes, decoded here for compatibility)
    """
    option = orjson.OPT_NON_STR_KEYS
    if indent is not None:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, default=default, option=option).decode("utf-8")


def loads(s: Any) -> Any:
    """Deserialize a JSON string or bytes into a Python object."""
    return orjson.loads(s)


def strip_code_fences(text: str) -> str:
    """Remove a single surrounding markdown code fence, if present."""
    if not text:
        return text
    match = _CODE_FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def try_loads_object(text: str) -> Optional[dict]:
    """
    Parse text as a JSON object, tolerating a surrounding code fence.

    Returns:
        The decoded dict, or None when the text is not a JSON object
    """
    candidate = strip_code_fences(text or "")
    if not candidate.startswith("{"):
        return None
    try:
        value = orjson.loads(candidate)
    except orjson.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


JSONDecodeError = orjson.JSONDecodeError
