"""Cleanup helpers for JSON returned by generative backends.

Models wrap JSON in markdown fences, sprinkle ``//`` and ``/* */`` comments,
and add prose before or after the object. These helpers peel all of that off
without touching the inside of JSON strings (URLs such as ``https://`` must
survive comment stripping).
"""

import json
import re
from typing import Any

_FENCE_OPEN = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing fence."""
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text, count=1)
        text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def strip_json_comments(text: str) -> str:
    """Remove // line comments and /* block */ comments outside of strings."""
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def extract_first_json_object(text: str) -> str | None:
    """Return the first balanced {...} block in ``text``, or None.

    Braces inside string literals do not count toward the balance.
    """
    start = text.find("{")
    while start != -1:
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
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_lenient_json(text: str) -> dict[str, Any]:
    """Parse a JSON object out of noisy model output.

    Raises:
        ValueError: if no JSON object can be recovered.
    """
    if not text or not text.strip():
        raise ValueError("Empty response content")

    cleaned = strip_code_fences(text)
    cleaned = strip_json_comments(cleaned)
    candidate = extract_first_json_object(cleaned)
    if candidate is None:
        raise ValueError("No JSON object found in response")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Top-level JSON value is not an object")
    return parsed
