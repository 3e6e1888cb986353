"""Colour string helpers shared by extraction and aggregation."""

import re

_BARE_HEX6 = re.compile(r"^[0-9a-fA-F]{6}$")


def normalize_color(color: str) -> str:
    """Upper-case hex colours and add the missing '#' to bare 6-digit hex.

    Anything that does not look like hex (named colours such as 'light-blue')
    is returned trimmed but otherwise unchanged.
    """
    if not color:
        return ""
    trimmed = color.strip()
    if trimmed.startswith("#"):
        return trimmed.upper()
    if _BARE_HEX6.match(trimmed):
        return f"#{trimmed.upper()}"
    return trimmed


def normalize_palette(colors: list) -> list[str]:
    """Normalize every string entry of a palette, dropping non-strings and blanks."""
    result = []
    for c in colors:
        if not isinstance(c, str):
            continue
        norm = normalize_color(c)
        if norm:
            result.append(norm)
    return result
