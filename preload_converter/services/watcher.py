"""Change watching for a single file or a directory tree.

Polls modification times on the running event loop. Each detected change calls
``on_change(path)`` in its own task: events are neither debounced nor serialized,
so two quick saves of the same file may run two overlapping conversions.

Only modifications of files known at the previous poll are reported. A file that
appears while watching is recorded silently and reported on its next change.
"""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Set, Tuple

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Path], Awaitable[None]]
Snapshot = Dict[Path, Tuple[int, int]]  # path -> (mtime_ns, size)


def take_snapshot(root: Path, *, recursive: bool) -> Snapshot:
    """Stat every watched file under ``root`` (or ``root`` itself when it is a file)."""
    snap: Snapshot = {}
    if not recursive:
        try:
            st = root.stat()
        except OSError:
            return snap
        snap[root] = (st.st_mtime_ns, st.st_size)
        return snap

    for dirpath, _dirs, files in os.walk(root):
        for filename in files:
            p = Path(dirpath) / filename
            try:
                st = p.stat()
            except OSError:
                # removed between listing and stat
                continue
            snap[p] = (st.st_mtime_ns, st.st_size)
    return snap


def diff_snapshots(before: Snapshot, after: Snapshot) -> list[Path]:
    """Paths present in both snapshots whose (mtime, size) changed, in walk order."""
    return [p for p, sig in after.items() if p in before and before[p] != sig]


class WatchSubscription:
    """Handle on a running watch. ``stop()`` ends polling; ``wait()`` blocks until it does."""

    def __init__(
        self,
        path: Path,
        on_change: ChangeCallback,
        *,
        recursive: bool,
        interval: float,
    ) -> None:
        self.path = path
        self.recursive = recursive
        self.interval = interval
        self._on_change = on_change
        self._snapshot: Snapshot = {}
        self._task: Optional[asyncio.Task] = None
        # strong references so callback tasks are not garbage collected mid-flight
        self._callbacks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending_callbacks(self) -> int:
        return len(self._callbacks)

    def start(self) -> "WatchSubscription":
        if self._task is not None:
            return self
        self._snapshot = take_snapshot(self.path, recursive=self.recursive)
        self._task = asyncio.create_task(self._poll_loop(), name=f"watch:{self.path}")
        logger.debug("Watching %s (%d files)", self.path, len(self._snapshot))
        return self

    def stop(self) -> None:
        """Stop polling. Conversions already started keep running to completion."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug("Stopped watching %s", self.path)

    async def wait(self) -> None:
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise

    async def drain(self) -> None:
        """Wait for change callbacks that are currently in flight."""
        while self._callbacks:
            await asyncio.gather(*list(self._callbacks), return_exceptions=True)

    async def poll_once(self) -> list[Path]:
        """Take one snapshot, dispatch callbacks for changed files and return them."""
        current = await asyncio.to_thread(take_snapshot, self.path, recursive=self.recursive)
        changed = diff_snapshots(self._snapshot, current)
        self._snapshot = current
        for p in changed:
            logger.info("File change detected for: %s", p)
            self._dispatch(p)
        return changed

    def _dispatch(self, path: Path) -> None:
        task = asyncio.create_task(self._run_callback(path))
        self._callbacks.add(task)
        task.add_done_callback(self._callbacks.discard)

    async def _run_callback(self, path: Path) -> None:
        try:
            await self._on_change(path)
        except Exception:  # noqa: BLE001
            # one failed callback must not end the subscription
            logger.exception("Change handler failed for %s", path)

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.poll_once()
            except OSError as exc:
                logger.warning("Watch poll error for %s: %s", self.path, exc)


def watch_path(
    path: str | Path,
    on_change: ChangeCallback,
    *,
    recursive: bool,
    interval: float = 0.5,
) -> WatchSubscription:
    """Start watching ``path`` on the running loop and return the subscription."""
    return WatchSubscription(Path(path), on_change, recursive=recursive, interval=interval).start()
