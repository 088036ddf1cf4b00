"""
Response parsing helpers for chat-model engines.

Chat models are asked for a JSON array but sometimes wrap it in markdown or
prose; these helpers recover the array.
"""

import json
from typing import List, Optional


def match_json_array(text: str) -> Optional[str]:
    """
    Extract the first top-level JSON array from mixed text using bracket matching.

    Returns:
        Extracted JSON array string, or None if not found
    """
    if not text:
        return None

    depth = 0
    start = -1
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
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

        if char == '[':
            if depth == 0:
                start = i
            depth += 1
        elif char == ']' and depth:
            depth -= 1
            if depth == 0 and start >= 0:
                return text[start:i + 1]

    return None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` fence (with optional language tag)."""
    text = text.strip()
    if not text.startswith('```'):
        return text
    lines = text.split('\n')[1:]
    if lines and lines[-1].strip() == '```':
        lines = lines[:-1]
    return '\n'.join(lines).strip()


def safe_parse_json_array(text: str) -> Optional[list]:
    """
    Parse a JSON array from potentially malformed text.

    Tries multiple strategies:
    1. Direct parse
    2. Remove markdown code fence and parse
    3. Extract with bracket matching and parse
    """
    if not text:
        return None

    candidates = [text.strip(), strip_code_fence(text), match_json_array(text)]
    for candidate in candidates:
        if not candidate:
            continue
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, list):
            return result

    return None


def parse_translations_response(text: str) -> Optional[List[str]]:
    """
    Parse a chat-model answer into translated lines.

    Accepts a bare array or an object with a "translations" array.

    Returns:
        List of strings, or None if nothing usable was found
    """
    if not text:
        return None

    result = safe_parse_json_array(text)
    if result is None:
        try:
            obj = json.loads(strip_code_fence(text))
        except json.JSONDecodeError:
            return None
        if not isinstance(obj, dict) or not isinstance(obj.get('translations'), list):
            return None
        result = obj['translations']

    return ["" if item is None else str(item) for item in result]
