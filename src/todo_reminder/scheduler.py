"""
Recurring task scheduler.

Runs named callables at a fixed interval on background threads. Each name has
at most one active timer; registering a name again replaces the previous
timer. A failing tick is logged and reported to an optional error sink and
never stops the timer.

Ticks of one task run on that task's own thread, so they never overlap. When a
tick takes longer than the interval, the missed slots are skipped instead of
being run back to back.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

TaskFunc = Callable[[], Union[None, Awaitable[Any]]]
ErrorSink = Callable[[str, BaseException], None]


# PUBLIC_INTERFACE
class RecurringScheduler(ABC):
    """Abstract contract for a named-task interval runner."""

    @abstractmethod
    def schedule_recurring(self, name: str, interval_seconds: float, func: TaskFunc) -> None:
        """Run func every interval_seconds, replacing any task registered under name."""

    @abstractmethod
    def stop(self, name: str) -> None:
        """Stop the task registered under name. No-op if unknown."""

    @abstractmethod
    def stop_all(self) -> None:
        """Stop every registered task."""


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class _RecurringTask:
    def __init__(
        self,
        name: str,
        interval_seconds: float,
        func: TaskFunc,
        on_error: Optional[ErrorSink],
    ) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self.tick_count = 0
        self._func = func
        self._on_error = on_error
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"scheduler:{name}", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not threading.current_thread() and self._thread.is_alive():
            self._thread.join(timeout)

    def _run(self) -> None:
        next_run = time.monotonic() + self.interval_seconds
        while not self._stopped.wait(max(next_run - time.monotonic(), 0.0)):
            if self._stopped.is_set():
                break
            self._tick()

            next_run += self.interval_seconds
            now = time.monotonic()
            if next_run <= now:
                skipped = int((now - next_run) // self.interval_seconds) + 1
                next_run += skipped * self.interval_seconds
                logger.warning(
                    "Task '%s' overran its %.3fs interval; skipped %d tick(s)",
                    self.name, self.interval_seconds, skipped,
                )

    def _tick(self) -> None:
        self.tick_count += 1
        logger.debug("Running task: %s", self.name)
        try:
            result = self._func()
            if inspect.isawaitable(result):
                asyncio.run(_await(result))
        except Exception as exc:
            logger.exception("Error in task '%s'", self.name)
            self._report(exc)

    def _report(self, exc: BaseException) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(self.name, exc)
        except Exception:
            logger.exception("Error sink failed while reporting task '%s'", self.name)


# PUBLIC_INTERFACE
class ThreadScheduler(RecurringScheduler):
    """
    RecurringScheduler backed by one daemon thread per task.

    The scheduler is an explicitly owned resource: create it, register tasks,
    and call stop_all() (or use it as a context manager) to tear it down.
    Stopping never interrupts a tick that has already started.
    """

    def __init__(self, on_error: Optional[ErrorSink] = None) -> None:
        self._lock = threading.RLock()
        self._tasks: Dict[str, _RecurringTask] = {}
        self._on_error = on_error

    def schedule_recurring(self, name: str, interval_seconds: float, func: TaskFunc) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        with self._lock:
            if name in self._tasks:
                self.stop(name)
            task = _RecurringTask(name, float(interval_seconds), func, self._on_error)
            self._tasks[name] = task
            task.start()
        logger.info("Scheduled task '%s' every %.3fs", name, interval_seconds)

    def stop(self, name: str) -> None:
        with self._lock:
            task = self._tasks.pop(name, None)
        if task is None:
            return
        task.stop()
        logger.info("Stopped task: %s", name)

    def stop_all(self, wait: bool = False, timeout: Optional[float] = None) -> None:
        """
        Stop every task. With wait=True, block until in-flight ticks finish
        (each for at most timeout seconds).
        """
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.stop()
            logger.info("Stopped task: %s", task.name)
        if wait:
            for task in tasks:
                task.join(timeout)

    def is_scheduled(self, name: str) -> bool:
        with self._lock:
            return name in self._tasks

    def scheduled_tasks(self) -> List[str]:
        with self._lock:
            return list(self._tasks)

    def interval_of(self, name: str) -> Optional[float]:
        with self._lock:
            task = self._tasks.get(name)
            return None if task is None else task.interval_seconds

    def tick_count(self, name: str) -> int:
        """Number of ticks started by the task currently registered under name."""
        with self._lock:
            task = self._tasks.get(name)
            return 0 if task is None else task.tick_count

    def __enter__(self) -> "ThreadScheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop_all(wait=True)
