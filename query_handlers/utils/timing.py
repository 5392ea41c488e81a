# query_handlers/utils/timing.py
from __future__ import annotations

import functools
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar, ParamSpec

from query_handlers.utils.logger import get_logger

P = ParamSpec("P")
T = TypeVar("T")


# ---------------- Clock ----------------

def now_ms() -> int:
    """Monotonic clock in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def sleep_ms(ms: int) -> None:
    """Blocking sleep; used when no page is available to wait on."""
    if ms > 0:
        time.sleep(ms / 1000.0)


@dataclass
class Stopwatch:
    """Elapsed-time counter, started on construction or on `with` entry."""
    started_at: int = field(default_factory=now_ms)

    def restart(self) -> "Stopwatch":
        self.started_at = now_ms()
        return self

    def elapsed_ms(self) -> int:
        return max(0, now_ms() - self.started_at)

    def __enter__(self) -> "Stopwatch":
        return self.restart()

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


@dataclass
class Deadline:
    """A timeout in ms measured from creation. 0 means no deadline."""
    timeout_ms: int
    clock: Stopwatch = field(default_factory=Stopwatch)

    @property
    def unbounded(self) -> bool:
        return self.timeout_ms <= 0

    def remaining_ms(self) -> Optional[int]:
        if self.unbounded:
            return None
        return max(0, self.timeout_ms - self.clock.elapsed_ms())

    def expired(self) -> bool:
        return not self.unbounded and self.clock.elapsed_ms() >= self.timeout_ms


# ---------------- Polling ----------------

def wait_for(
    predicate: Callable[[], T],
    timeout_ms: int,
    interval_ms: int = 100,
    description: Optional[str] = None,
    sleep: Optional[Callable[[int], None]] = None,
) -> T:
    """
    Call `predicate()` every `interval_ms` until it returns something truthy,
    and return that value.

    `sleep` is the pause between polls. Callers bound to a page pass the
    page's own timed wait so the driver connection keeps processing events
    while we wait. `timeout_ms=0` polls until the predicate succeeds.
    Exceptions from `predicate` propagate immediately.

    Raises:
        TimeoutError when the deadline passes first.
    """
    log = get_logger(__name__)
    pause = sleep or sleep_ms
    deadline = Deadline(timeout_ms)
    polls = 0

    while True:
        value = predicate()
        polls += 1
        if value:
            return value
        if deadline.expired():
            what = f" ({description})" if description else ""
            raise TimeoutError(f"wait_for timed out after {timeout_ms} ms{what}")
        remaining = deadline.remaining_ms()
        pause(max(1, interval_ms if remaining is None else min(interval_ms, max(1, remaining))))
        if polls % 50 == 0:
            log.debug(f"still waiting after {polls} polls{': ' + description if description else ''}")


# ---------------- Decorators ----------------

def measure(label: str = "", level: str = "DEBUG") -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Log how long each call of the decorated function took.

        @measure("query")
        def run_query(...): ...
    """
    log = get_logger(__name__)
    emit = getattr(log, level.lower(), log.debug)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            sw = Stopwatch()
            try:
                return func(*args, **kwargs)
            finally:
                ms = sw.elapsed_ms()
                emit(f"{name} took {ms} ms" if ms < 1000 else f"{name} took {ms / 1000:.3f} s")
        return wrapper
    return decorator
