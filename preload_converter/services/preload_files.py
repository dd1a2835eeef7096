"""File actions: read a source, run the extractor or compiler, write the result.

Reads and writes run in a worker thread via ``asyncio.to_thread`` so the event
loop keeps serving other jobs and watch events. Errors are not handled here;
the orchestrator's job wrapper decides how to surface them.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import List, Optional

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import get_settings
from ..log import ConverterLogger, get_logger
from ..pipeline.compiler import CRLF, compile_lines
from ..pipeline.extractor import extract

_default_logger = get_logger(__name__)


def split_lines(text: str) -> List[str]:
    """Split text on line breaks; a trailing newline does not add an empty line."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _read_text(path: Path, encoding: str, errors: str = "strict") -> str:
    # newline="" keeps CR/LF as-is; split_lines normalizes them
    with open(path, "r", encoding=encoding, errors=errors, newline="") as f:
        return f.read()


def _write_text(path: Path, content: str, encoding: str) -> None:
    # newline="" so the chosen separator is written byte-for-byte
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(content)


async def read_lines(path: str | Path, *, encoding: Optional[str] = None) -> List[str]:
    """Read a whole file as a list of lines.

    A ``PermissionError`` (file still held by the program saving it) is retried a
    few times; the last error propagates unchanged.
    """
    settings = get_settings()
    encoding = encoding or settings.FILE_ENCODING

    @retry(
        reraise=True,
        stop=stop_after_attempt(settings.READ_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, max=1),
        retry=retry_if_exception_type(PermissionError),
    )
    async def _read() -> str:
        return await asyncio.to_thread(_read_text, Path(path), encoding, settings.FILE_DECODE_ERRORS)

    return split_lines(await _read())


async def write_lines(
    path: str | Path, lines: List[str], separator: str, *, encoding: Optional[str] = None
) -> None:
    """Replace ``path`` with ``lines`` joined by ``separator`` in a single write."""
    encoding = encoding or get_settings().FILE_ENCODING
    await asyncio.to_thread(_write_text, Path(path), separator.join(lines), encoding)


async def convert_preload_file(
    input_path: str | Path,
    output_path: str | Path,
    *,
    unescape: bool = True,
    logger: Optional[ConverterLogger] = None,
) -> int:
    """pld -> text. Returns the number of payload lines written."""
    log = logger or _default_logger
    log.info("Converting '%s' to '%s'", input_path, output_path)
    document = await read_lines(input_path)
    payloads = extract(document, unescape=unescape)
    log.info("Found %d lines.", len(payloads))
    await write_lines(output_path, payloads, os.linesep)
    log.info("Exported preload content to '%s'", output_path)
    return len(payloads)


async def compile_preload_file(
    input_path: str | Path,
    output_path: str | Path,
    function_name: str,
    *,
    escape: bool = True,
    logger: Optional[ConverterLogger] = None,
) -> int:
    """text -> pld. Returns the number of Preload calls written."""
    log = logger or _default_logger
    log.info("Compiling '%s' to '%s' as function '%s'", input_path, output_path, function_name)
    lines = await read_lines(input_path)
    log.info("Read %d lines.", len(lines))
    compiled = compile_lines(lines, function_name, escape=escape)
    await write_lines(output_path, compiled, CRLF)
    log.info("Exported preload file to '%s'", output_path)
    return len(lines)
