"""
JSON extraction from free-form model output.

Models tend to wrap JSON in Markdown fences or prepend prose, so decoding is
done in two stages: strip known wrapper markers, then locate the first
balanced top-level object by bracket-depth counting.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from .schema import StructureError

_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*")


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text)


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in ``text``, or None.

    Braces inside JSON string literals do not count towards depth.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json(text: str) -> Any:
    if not text or not text.strip():
        raise StructureError("empty model response")

    candidate = find_json_object(strip_code_fences(text))
    if candidate is None:
        raise StructureError("no JSON object found in model response")

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise StructureError(f"invalid JSON in model response: {e}") from e
