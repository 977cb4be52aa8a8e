"""Structured concurrency helpers for running async workloads in parallel."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeVar

from tqdm import tqdm

from .log_utils import logger


class ProgressReporter(Protocol):
    """Lightweight progress reporter abstraction."""

    def start(self, total: int) -> None: ...

    def increment(self) -> None: ...

    def close(self) -> None: ...


class TqdmProgressReporter:
    """Progress reporter backed by tqdm."""

    def __init__(self, desc: str, *, unit: str = "page") -> None:
        self._desc = desc
        self._unit = unit
        self._pbar: tqdm | None = None

    def start(self, total: int) -> None:
        self._pbar = tqdm(
            total=total,
            desc=self._desc,
            unit=self._unit,
            smoothing=0,
            leave=False,
        )

    def increment(self) -> None:
        if self._pbar is not None:
            self._pbar.update(1)

    def close(self) -> None:
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None


T = TypeVar("T")


class ParallelExecutor:
    """Run async callables with a fixed number of workers draining a FIFO queue.

    At most ``max_concurrency`` jobs are in flight at any moment and jobs are
    admitted in submission order. A failing job never cancels its siblings;
    by default every submitted job runs exactly once. With ``fail_fast`` the
    workers stop admitting queued jobs after the first failure, while jobs
    already running are allowed to settle.

    Failures are surfaced per job when ``return_exceptions`` is set (the
    exception takes the job's result slot). Otherwise the failure of the
    lowest-indexed failed job is raised once all admitted jobs have finished.
    """

    def __init__(
        self,
        *,
        max_concurrency: int,
        progress_reporter: ProgressReporter | None = None,
        return_exceptions: bool = False,
        fail_fast: bool = False,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._max_concurrency = max_concurrency
        self._progress = progress_reporter
        self._return_exceptions = return_exceptions
        self._fail_fast = fail_fast

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def map(
        self,
        fn: Callable[..., Awaitable[T]],
        *iterables: Sequence[object],
    ) -> list[T | BaseException | None]:
        """Execute `fn` across provided iterables with bounded concurrency."""
        if not iterables:
            return []

        lengths = [len(it) for it in iterables]
        if any(length != lengths[0] for length in lengths):
            raise ValueError("All iterables must have the same length.")

        jobs = list(enumerate(zip(*iterables, strict=True)))
        total = len(jobs)
        results: list[T | BaseException | None] = [None] * total
        if not total:
            return results

        queue: asyncio.Queue[tuple[int, tuple[object, ...]]] = asyncio.Queue()
        for index, args in jobs:
            queue.put_nowait((index, tuple(args)))

        errors: dict[int, Exception] = {}

        async def worker() -> None:
            while not (self._fail_fast and errors):
                try:
                    index, args = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break

                try:
                    results[index] = await fn(*args)
                except Exception as exc:
                    errors[index] = exc
                    if self._return_exceptions:
                        results[index] = exc
                    logger.debug(f"Parallel executor job {index} failed: {exc!r}")
                queue.task_done()
                if self._progress:
                    self._progress.increment()

        if self._progress:
            self._progress.start(total)
        try:
            async with asyncio.TaskGroup() as tg:
                for _ in range(min(self._max_concurrency, total)):
                    tg.create_task(worker())
        finally:
            if self._progress:
                self._progress.close()

        if errors and not self._return_exceptions:
            skipped = queue.qsize()
            if skipped:
                logger.debug(f"Parallel executor skipped {skipped} queued job(s) after a failure.")
            raise errors[min(errors)]
        return results

