from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterator, List, Optional, Set

from ...config import Settings, get_settings
from ...exceptions import (
    InputNotFoundError,
    MissingExtensionError,
    OutputTypeMismatchError,
)
from ...log import ConverterLogger, get_logger
from ...models import ConversionJob, JobResult, Operation, RunOptions
from ...pipeline.compiler import validate_function_name
from ...services.preload_files import compile_preload_file, convert_preload_file
from ...services.watcher import WatchSubscription, watch_path


class OutputDirectoryRegistry:
    """Creates each output directory at most once.

    Check, mark and ``mkdir`` happen under one lock: a job that finds its directory
    already marked can rely on it existing.
    """

    def __init__(self) -> None:
        self._created: Set[Path] = set()
        self._lock = asyncio.Lock()
        self.mkdir_calls = 0

    def __contains__(self, directory: Path) -> bool:
        return directory in self._created

    async def ensure(self, directory: Path) -> bool:
        """Create ``directory`` unless already done. Returns True if this call created it."""
        async with self._lock:
            if directory in self._created:
                return False
            self.mkdir_calls += 1
            # exist_ok: a directory created outside this run is fine
            await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
            self._created.add(directory)
        return True


class ConversionOrchestrator:
    """Runs one CLI invocation: plan jobs, convert them once, optionally keep watching.

    Configuration problems raise before any job starts. Job failures are caught
    and logged one by one and never stop sibling jobs or the watch loop.
    """

    def __init__(
        self,
        options: RunOptions,
        *,
        logger: Optional[ConverterLogger] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.options = options
        self.settings = settings or get_settings()
        self.log = logger or get_logger(__name__)
        self.directories = OutputDirectoryRegistry()
        self.folder_mode: Optional[bool] = None
        self._semaphore = asyncio.Semaphore(self.settings.MAX_CONCURRENT_JOBS)

    # --- Planning ---

    def plan(self) -> bool:
        """Validate the invocation and decide between file and folder mode.

        Returns True for folder mode. Raises a ``ConfigurationError`` subclass on
        invalid input; nothing has been written at that point.
        """
        opts = self.options
        if opts.operation == Operation.COMPILE:
            validate_function_name(opts.function_name)

        input_path = opts.input_path
        if not (input_path.exists() or input_path.is_symlink()):
            raise InputNotFoundError(f"Input file or directory doesn't exist: {input_path}")

        output_path = opts.output_path
        folder_mode = False
        if input_path.is_dir():
            if output_path.exists() and not output_path.is_dir():
                raise OutputTypeMismatchError(
                    "Input is a directory, output path exists and was identified as not a directory."
                )
            if not opts.output_extension:
                raise MissingExtensionError(
                    "Input and output are directories, you must define an outputFileExtension!"
                )
            folder_mode = True

        self.folder_mode = folder_mode
        self.log.debug(
            "Planned %s in %s mode: %s -> %s",
            opts.operation.value,
            "folder" if folder_mode else "file",
            input_path,
            output_path,
        )
        return folder_mode

    def _require_plan(self) -> bool:
        if self.folder_mode is None:
            return self.plan()
        return self.folder_mode

    def output_path_for(self, input_file: Path) -> Path:
        """Output location for ``input_file``: mirrored with a new extension in folder mode."""
        if not self._require_plan():
            return self.options.output_path
        relative = Path(os.path.relpath(input_file, self.options.input_path))
        return (self.options.output_path / relative).with_suffix(self.options.output_extension or "")

    def job_for(self, input_file: Path) -> ConversionJob:
        return ConversionJob(
            input_path=input_file,
            output_path=self.output_path_for(input_file),
            operation=self.options.operation,
            function_name=self.options.function_name,
        )

    def iter_jobs(self) -> Iterator[ConversionJob]:
        """Lazily yield one job per input file, depth-first in directory listing order."""
        if not self._require_plan():
            yield self.job_for(self.options.input_path)
            return
        for dirpath, _dirs, files in os.walk(self.options.input_path):
            for filename in files:
                yield self.job_for(Path(dirpath) / filename)

    # --- Execution ---

    async def _convert(self, job: ConversionJob) -> int:
        if job.operation == Operation.EXTRACT:
            return await convert_preload_file(
                job.input_path, job.output_path, unescape=self.options.escape, logger=self.log
            )
        return await compile_preload_file(
            job.input_path,
            job.output_path,
            job.function_name or "",
            escape=self.options.escape,
            logger=self.log,
        )

    async def run_job(self, job: ConversionJob) -> JobResult:
        """Protected run of one job: every failure is logged as fatal and returned, never raised."""
        try:
            if self._require_plan():
                await self.directories.ensure(job.output_path.parent)
            count = await self._convert(job)
            return JobResult(job=job, ok=True, line_count=count)
        except Exception as exc:  # noqa: BLE001
            self.log.fatal(exc, "Conversion of '%s' failed", job.input_path)
            return JobResult(job=job, ok=False, error=f"{type(exc).__name__}: {exc}")

    async def _run_bounded(self, job: ConversionJob) -> JobResult:
        async with self._semaphore:
            return await self.run_job(job)

    async def run_all(self) -> List[JobResult]:
        """Schedule every planned job and wait for all of them to finish."""
        tasks = [asyncio.create_task(self._run_bounded(job)) for job in self.iter_jobs()]
        results = list(await asyncio.gather(*tasks))
        failed = sum(1 for r in results if not r.ok)
        self.log.info("Finished %d job(s), %d failed.", len(results), failed)
        return results

    # --- Watching ---

    async def _on_change(self, changed: Path) -> None:
        await self.run_job(self.job_for(changed))

    def start_watching(self, *, interval: Optional[float] = None) -> WatchSubscription:
        """Subscribe to changes of the input path; the caller owns the stop handle."""
        folder_mode = self._require_plan()
        self.log.info("Watching '%s' for changes", self.options.input_path)
        return watch_path(
            self.options.input_path,
            self._on_change,
            recursive=folder_mode,
            interval=interval if interval is not None else self.settings.watch_poll_interval,
        )

    async def run(self) -> List[JobResult]:
        """Plan, run the initial pass unless skipped, then watch until the process ends."""
        self.plan()
        results: List[JobResult] = []
        if not self.options.skip_initial_run:
            results = await self.run_all()
        if self.options.watch:
            subscription = self.start_watching()
            await subscription.wait()
        return results
