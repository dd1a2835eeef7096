"""Extractor: pulls payload strings out of the PreloadStart/PreloadEnd region of a preload script."""
from __future__ import annotations

import re
from typing import Iterable, List

START_MARKER = "PreloadStart"
END_MARKER = "PreloadEnd"

# Greedy on purpose: content runs from the first quote after "Preload(" to the last quote.
PRELOAD_CALL_RE = re.compile(r'call Preload\(\s*"(?P<content>.*)"\s*\)')
_ESCAPED_RE = re.compile(r'\\(["\\])')


def find_preload_region(lines: Iterable[str]) -> List[str]:
    """Return the lines strictly between the start marker and the first end marker.

    Scanning stops at the first line containing the end marker, even when later
    lines hold further markers. Without a start marker the region is empty; without
    an end marker it runs to the end of the input.
    """
    region: List[str] = []
    inside = False
    for line in lines:
        if END_MARKER in line:
            break
        if inside:
            region.append(line)
        # after the append, so the start line itself is never part of the region
        if START_MARKER in line:
            inside = True
    return region


def unescape_payload(text: str) -> str:
    """Undo the compiler's escaping: ``\\"`` -> ``"`` and ``\\\\`` -> ``\\``."""
    return _ESCAPED_RE.sub(r"\1", text)


def extract_payload(line: str, *, unescape: bool = True) -> str:
    """Payload of a single ``call Preload("...")`` line, or "" when it does not match."""
    m = PRELOAD_CALL_RE.search(line)
    if m is None:
        return ""
    content = m.group("content")
    return unescape_payload(content) if unescape else content


def extract(lines: Iterable[str], *, unescape: bool = True) -> List[str]:
    """Extract payload lines from a preload document, preserving order."""
    return [extract_payload(ln, unescape=unescape) for ln in find_preload_region(lines)]
