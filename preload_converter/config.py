"""Application settings and configuration helpers."""
from __future__ import annotations

import os
from functools import lru_cache
from dotenv import load_dotenv, find_dotenv


class Settings:
    """Runtime configuration loaded from environment variables.

    Defaults suit interactive use from a terminal. Per-invocation choices
    (paths, watch flags) are not settings; they travel in ``RunOptions``.
    """

    APP_NAME: str = "Preload Converter"

    # Logging
    LOG_LEVEL: str

    # File I/O
    FILE_ENCODING: str
    FILE_DECODE_ERRORS: str
    READ_RETRY_ATTEMPTS: int

    # Batch / watch
    MAX_CONCURRENT_JOBS: int
    WATCH_POLL_INTERVAL_MS: int

    # Payload escaping (compile escapes, extract unescapes)
    ESCAPE_PAYLOAD: bool

    def __init__(self) -> None:
        # Load .env once (supports parent directories)
        load_dotenv(find_dotenv(usecwd=True), override=False)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").strip().upper() or "DEBUG"

        self.FILE_ENCODING = os.getenv("FILE_ENCODING", "utf-8")
        # "replace" keeps the other lines of a file holding a few undecodable bytes
        self.FILE_DECODE_ERRORS = os.getenv("FILE_DECODE_ERRORS", "replace")
        self.READ_RETRY_ATTEMPTS = max(1, int(os.getenv("READ_RETRY_ATTEMPTS", "3")))

        self.MAX_CONCURRENT_JOBS = max(1, int(os.getenv("MAX_CONCURRENT_JOBS", "16")))
        self.WATCH_POLL_INTERVAL_MS = max(50, int(os.getenv("WATCH_POLL_INTERVAL_MS", "500")))

        self.ESCAPE_PAYLOAD = os.getenv("ESCAPE_PAYLOAD", "true").lower() == "true"

    @property
    def watch_poll_interval(self) -> float:
        """Polling interval in seconds."""
        return self.WATCH_POLL_INTERVAL_MS / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
