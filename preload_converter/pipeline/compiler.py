"""Compiler: wraps plain text lines into a preload function."""
from __future__ import annotations

import re
from typing import Iterable, List

from ..exceptions import InvalidFunctionNameError

# The consuming engine only accepts CRLF-terminated preload files.
CRLF = "\r\n"
INDENT = "    "

_FUNCTION_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def validate_function_name(name: str | None) -> str:
    """Return ``name`` if it is a valid function identifier, else raise."""
    if not name or not _FUNCTION_NAME_RE.match(name):
        raise InvalidFunctionNameError(
            f"Invalid function name {name!r}: use a letter followed by letters, digits or '_'"
        )
    return name


def escape_payload(text: str) -> str:
    """Backslash-escape characters that would end the quoted Preload argument."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def compile_lines(lines: Iterable[str], function_name: str, *, escape: bool = True) -> List[str]:
    """Wrap every input line in a Preload call inside a named function.

    With ``escape=False`` lines are embedded verbatim, so a line holding a double
    quote produces a script the engine cannot parse.
    """
    out = [
        f"function {function_name} takes nothing returns nothing",
        f"{INDENT}call PreloadStart()",
    ]
    for ln in lines:
        payload = escape_payload(ln) if escape else ln
        out.append(f'{INDENT}call Preload("{payload}")')
    out.append(f"{INDENT}call PreloadEnd(0.0)")
    out.append("endfunction")
    return out
