"""Cancellation, counting and spawn/join strategies shared by both query modes."""
import itertools
import logging
import os
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import Callable, Iterable, Sequence

from ..core.errors import SelfIntersectionError, ParallelExecutionError


logger = logging.getLogger(__name__)

Task = Callable[[], object]


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class RelaxedCounter:
    """Counter shared by workers without a critical section.

    ``increment`` hands out unique, increasing tickets (``next`` on an
    ``itertools.count`` is atomic under the GIL). ``value`` is a relaxed read:
    it may lag behind tickets already handed to other threads.
    """

    def __init__(self, start: int = 0) -> None:
        self._tickets = itertools.count(start + 1)
        self._value = start

    def increment(self) -> int:
        ticket = next(self._tickets)
        self._value = ticket
        return ticket

    @property
    def value(self) -> int:
        return self._value


class ConcurrentPairs:
    """Append-only pair collection; ``deque.append`` is thread-safe."""

    def __init__(self) -> None:
        self._items = deque()

    def append(self, pair) -> None:
        self._items.append(pair)

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


class SequentialExecution:
    workers = 1

    def run(self, tasks: Iterable[Task], token: CancellationToken) -> None:
        for task in tasks:
            if token.cancelled:
                break
            task()


class ParallelExecution:
    def __init__(self, max_workers: int | None = None) -> None:
        self.workers = int(max_workers or os.cpu_count() or 1)

    def run(self, tasks: Sequence[Task], token: CancellationToken) -> None:
        tasks = list(tasks)
        logger.debug("running %d tasks on %d workers", len(tasks), self.workers)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="selfx") as pool:
            futures = [pool.submit(_guarded, task, token) for task in tasks]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in done if not f.cancelled() and f.exception() is not None]
            if not failed:
                return
            token.cancel()
            for f in pending:
                f.cancel()
        exc = failed[0].exception()
        if isinstance(exc, SelfIntersectionError):
            raise exc
        raise ParallelExecutionError(f"worker task failed: {exc!r}") from exc


def _guarded(task: Task, token: CancellationToken):
    if token.cancelled:
        return None
    return task()


def make_execution(parallel: bool, max_workers: int | None = None):
    if parallel:
        return ParallelExecution(max_workers)
    return SequentialExecution()
