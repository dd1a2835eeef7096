"""Pytest configuration: importable project root, clean settings per test."""

import os
import sys

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from preload_converter.config import get_settings  # noqa: E402

SETTINGS_ENV = (
    "LOG_LEVEL",
    "FILE_ENCODING",
    "FILE_DECODE_ERRORS",
    "READ_RETRY_ATTEMPTS",
    "MAX_CONCURRENT_JOBS",
    "WATCH_POLL_INTERVAL_MS",
    "ESCAPE_PAYLOAD",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Each test starts from default settings, unaffected by the developer's env or .env."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("preload_converter.config.find_dotenv", lambda *a, **k: "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingLogger:
    """ConverterLogger that keeps messages for assertions."""

    def __init__(self) -> None:
        self.debugs: list[str] = []
        self.infos: list[str] = []
        self.fatals: list[tuple[BaseException, str]] = []

    def debug(self, msg, *args) -> None:
        self.debugs.append(msg % args if args else msg)

    def info(self, msg, *args) -> None:
        self.infos.append(msg % args if args else msg)

    def fatal(self, exc, msg="", *args) -> None:
        self.fatals.append((exc, msg % args if args else msg))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


SAMPLE_PLD = (
    "// generated\r\n"
    "globals\r\n"
    "endglobals\r\n"
    "function PreloadFiles takes nothing returns nothing\r\n"
    "    call PreloadStart()\r\n"
    '    call Preload("payload line 1")\r\n'
    '    call Preload( "payload line 2" )\r\n'
    "    call PreloadEnd(0.0)\r\n"
    "endfunction\r\n"
)


@pytest.fixture
def sample_pld(tmp_path):
    p = tmp_path / "sample.pld"
    p.write_bytes(SAMPLE_PLD.encode("utf-8"))
    return p
