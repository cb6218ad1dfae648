"""Lenient JSON extraction from model replies.

Models occasionally wrap JSON in a markdown fence even when a
structured response format was requested.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCED = re.compile(r"^```[A-Za-z]*\s*\n?(?P<body>.*?)\n?```\s*$", re.DOTALL)


def strip_code_fences(text: str | None) -> str:
    """Inner text of a fenced block, or the trimmed text when unfenced."""
    content = (text or "").strip()
    if match := _FENCED.match(content):
        return match["body"].strip()
    return content


def load_json_from_text(text: str | None) -> Any:
    """Decoded JSON value of *text*, or ``None`` if it does not parse."""
    content = strip_code_fences(text)
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return None


def load_json_list(text: str | None, wrapper_key: str = "results") -> list[Any] | None:
    """Decode a JSON array given bare or as ``{wrapper_key: [...]}``.

    Structured output must be an object at the top level, so batch
    replies normally arrive wrapped.
    """
    value = load_json_from_text(text)
    if isinstance(value, dict):
        value = value.get(wrapper_key)
    if isinstance(value, list):
        return value
    return None
