"""Lenient JSON recovery for free-form model replies.

Marketing prompts ask for raw JSON but vendors still wrap it in fences,
prepend prose, leave trailing commas, or stop mid-object when they hit the
token limit. Each step here is tried in order until one parses.
"""

from __future__ import annotations

import json
import re
from typing import Any

from json_repair import repair_json

_FENCE_START = re.compile(r"^```(?:json|JSON)?\s*\n?")
_FENCE_END = re.compile(r"\n?\s*```\s*$")
_TRAILING_COMMA_OBJ = re.compile(r",\s*}")
_TRAILING_COMMA_ARR = re.compile(r",\s*]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_ELLIPSIS_LINE = re.compile(r"\n\s*\.\.\.\s*\n")
_LINE_COMMENT = re.compile(r"^\s*//[^\n]*$", re.MULTILINE)

_CLOSERS = {"{": "}", "[": "]"}


class ReplyParseError(ValueError):
    pass


def _balanced_span(text: str, opener: str) -> str | None:
    start = text.find(opener)
    if start == -1:
        return None
    closer = _CLOSERS[opener]
    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_json(text: str) -> str:
    stripped = _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()
    try:
        json.loads(stripped)
        return stripped
    except ValueError:
        pass
    # Whichever bracket opens first is the outermost value.
    present = [o for o in _CLOSERS if o in stripped]
    for opener in sorted(present, key=stripped.find):
        span = _balanced_span(stripped, opener)
        if span:
            return span
    return stripped


def clean_json(text: str) -> str:
    text = _TRAILING_COMMA_OBJ.sub("}", text)
    text = _TRAILING_COMMA_ARR.sub("]", text)
    text = _CONTROL_CHARS.sub("", text)
    text = _ELLIPSIS_LINE.sub("\n", text)
    return _LINE_COMMENT.sub("", text)


def parse_ai_response(raw: str) -> Any:
    candidate = extract_json(raw)
    cleaned = clean_json(candidate)
    for attempt in (candidate, cleaned):
        try:
            return json.loads(attempt)
        except ValueError:
            continue

    # Truncated replies: close open strings and brackets.
    repaired = repair_json(cleaned, return_objects=True)
    if isinstance(repaired, (dict, list)) and repaired:
        return repaired
    raise ReplyParseError(f"Failed to parse AI response as JSON. First 200 chars: {raw[:200]!r}")
