"""Locate the first complete JSON object inside free-form model output.

Model replies often wrap the payload in prose or markdown fences. The scanner
below tracks brace depth only outside string literals, so braces inside
strings and escaped quotes do not upset the balance.
"""

import json
from enum import Enum


class JSONExtractionError(ValueError):
    """No complete JSON object could be isolated or parsed."""


class _State(Enum):
    OUTSIDE = "outside"
    IN_STRING = "in_string"
    ESCAPE = "escape"


def find_json_object(text: str) -> str:
    """Return the text of the first brace-balanced object in ``text``.

    Raises JSONExtractionError when there is no opening brace or the object
    is never closed (e.g. a truncated reply).
    """
    start = text.find("{")
    if start == -1:
        raise JSONExtractionError("No '{' found in model reply")

    state = _State.OUTSIDE
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if state is _State.ESCAPE:
            state = _State.IN_STRING
        elif state is _State.IN_STRING:
            if ch == "\\":
                state = _State.ESCAPE
            elif ch == '"':
                state = _State.OUTSIDE
        elif ch == '"':
            state = _State.IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    raise JSONExtractionError("Unbalanced JSON object (reply probably truncated)")


def extract_json_object(text: str) -> dict:
    """Isolate and parse the first JSON object in ``text``."""
    raw = find_json_object(text)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise JSONExtractionError(f"Invalid JSON object: {e}") from e
    if not isinstance(parsed, dict):
        raise JSONExtractionError("Extracted JSON is not an object")
    return parsed
