"""Completion barrier, counters and the task group that schedules work on a thread pool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

logger = logging.getLogger(__name__)


class Counter:
    """Monotonic integer safe to increment from any thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class CompletionBarrier:
    """Waits for a dynamically growing set of tasks.

    A task must be registered before it is handed to a worker, and a task
    that spawns children registers them before it completes itself, so the
    pending count can only reach zero once the whole task graph has drained.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending = 0

    def register(self) -> None:
        with self._cond:
            self._pending += 1

    def complete(self) -> None:
        with self._cond:
            if self._pending == 0:
                raise RuntimeError("complete() called without a matching register()")
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def await_all(self, timeout: float | None = None) -> bool:
        """Block until no task is pending.

        Returns:
            True once drained, False if ``timeout`` elapsed first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0, timeout=timeout)


class TaskGroup:
    """Runs independent tasks on a shared pool and tracks them with a barrier.

    Exceptions escaping a task are logged and swallowed so one failing task
    never affects its siblings.
    """

    def __init__(self, max_workers: int = 16) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="untrash")
        self.barrier = CompletionBarrier()

    def spawn(self, fn: Callable[..., Any], *args: Any) -> None:
        self.barrier.register()
        try:
            self._pool.submit(self._run, fn, *args)
        except Exception:
            self.barrier.complete()
            raise

    def _run(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("[_run] task failed; task:%s", getattr(fn, "__name__", fn))
        finally:
            self.barrier.complete()

    def wait(self, timeout: float | None = None) -> bool:
        return self.barrier.await_all(timeout)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> TaskGroup:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
