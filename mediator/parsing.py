"""
Collaborator Response Parsing

Extracts JSON from content-generation answers that may be wrapped in
markdown fences, carry smart quotes, or contain raw control characters
inside string values. Anything that cannot be recovered raises
``MalformedResponseError``.
"""

import json
import re
from typing import Any, Optional

from mediator.errors import MalformedResponseError


_FENCED_BLOCK = re.compile(r'```(?:json)?\s*([\[{].*?[\]}])\s*```', re.DOTALL)

_SMART_QUOTES = {
    '“': '"',
    '”': '"',
    '‘': "'",
    '’': "'",
}

_CONTROL_ESCAPES = {
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
}


def escape_control_characters(text: str) -> str:
    """Escape control characters that appear inside JSON string values.

    Newlines between keys are valid JSON formatting, so only characters
    inside quoted strings are touched.
    """
    result = []
    in_string = False
    escape_next = False

    for char in text:
        if escape_next:
            result.append(char)
            escape_next = False
            continue

        if char == '\\':
            result.append(char)
            escape_next = True
            continue

        if char == '"':
            in_string = not in_string
            result.append(char)
            continue

        if in_string and char in _CONTROL_ESCAPES:
            result.append(_CONTROL_ESCAPES[char])
        else:
            result.append(char)

    return ''.join(result)


def _balanced_candidates(text: str):
    """Yield substrings that start at '{' or '[' and end at the matching bracket."""
    for start, opener in ((m.start(), m.group()) for m in re.finditer(r'[\[{]', text)):
        closer = '}' if opener == '{' else ']'
        depth = 0
        in_string = False
        escape_next = False
        for index in range(start, len(text)):
            char = text[index]
            if escape_next:
                escape_next = False
                continue
            if char == '\\':
                escape_next = True
                continue
            if char == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    yield text[start:index + 1]
                    break


def _try_load(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None


def _repair(text: str) -> str:
    """Apply light repairs for common LLM JSON mistakes."""
    repaired = re.sub(r',\s*}', '}', text)
    repaired = re.sub(r',\s*]', ']', repaired)
    # Unquoted keys: {key: "value"}
    repaired = re.sub(r'([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)', r'\1"\2"\3', repaired)
    return repaired


def extract_json(text: str) -> Any:
    """Extract the first JSON object or array from a collaborator answer.

    Args:
        text: Raw text returned by the content-generation service

    Returns:
        Parsed JSON value (dict or list)

    Raises:
        MalformedResponseError: If no JSON can be recovered
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from content service", response_text=text or "")

    for smart, plain in _SMART_QUOTES.items():
        text = text.replace(smart, plain)
    cleaned = escape_control_characters(text.strip())

    parsed = _try_load(cleaned)
    if isinstance(parsed, (dict, list)):
        return parsed

    for match in _FENCED_BLOCK.findall(cleaned):
        parsed = _try_load(match)
        if isinstance(parsed, (dict, list)):
            return parsed

    for candidate in _balanced_candidates(cleaned):
        parsed = _try_load(candidate)
        if parsed is None:
            parsed = _try_load(_repair(candidate))
        if isinstance(parsed, (dict, list)):
            return parsed

    raise MalformedResponseError(
        "No valid JSON found in content service response",
        response_text=text
    )


def expect_object(value: Any, what: str) -> dict:
    """Return value if it is a JSON object, else raise MalformedResponseError."""
    if not isinstance(value, dict):
        raise MalformedResponseError(
            f"Expected a JSON object for {what}, got {type(value).__name__}"
        )
    return value
