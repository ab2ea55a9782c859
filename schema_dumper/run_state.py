"""
Shared state for one dump run.

A single RunState is built before the first worker starts and handed to every
worker. Counters, the error set and the cancellation signal are the only
things more than one worker mutates.
"""

import threading
from typing import Optional


class SafeCounter:
    """Integer counter safe to update from several threads."""

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        """Decrement and return the new value. Never goes below zero."""
        with self._lock:
            if self._value <= 0:
                raise ValueError("Counter cannot go below zero")
            self._value -= 1
            return self._value

    def add(self, amount: int) -> int:
        with self._lock:
            self._value += amount
            return self._value

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"SafeCounter({self._value})"


class ErrorNameSet:
    """Set of object names that failed to script."""

    def __init__(self):
        self._names: set[str] = set()
        self._lock = threading.Lock()

    def add(self, name: str) -> None:
        with self._lock:
            self._names.add(name)

    def sorted(self) -> list[str]:
        with self._lock:
            return sorted(self._names)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def __bool__(self) -> bool:
        return len(self) > 0


class RunState:
    """Progress counters, failed names and the run-wide cancellation signal.

    Attributes:
        queued: Descriptors enumerated but not yet attempted. Goes up and down.
        max_seen: Descriptors ever enumerated. Only goes up.
        written: Files successfully written.
        error_names: Full names of objects that failed to script.
    """

    def __init__(self):
        self.queued = SafeCounter()
        self.max_seen = SafeCounter()
        self.written = SafeCounter()
        self.error_names = ErrorNameSet()
        self._cancelled = threading.Event()
        self._fatal_lock = threading.Lock()
        self._fatal_error: Optional[BaseException] = None

    def record_enumerated(self) -> None:
        self.queued.increment()
        self.max_seen.increment()

    def record_written(self) -> None:
        self.written.increment()

    def release(self) -> None:
        """One descriptor has been attempted, whatever the outcome."""
        self.queued.decrement()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def fatal_error(self) -> Optional[BaseException]:
        return self._fatal_error

    def record_fatal(self, error: BaseException) -> bool:
        """Record the cause of an aborted run and cancel it.

        Only the first cause is kept. Returns True if this call recorded it.
        """
        with self._fatal_lock:
            first = self._fatal_error is None
            if first:
                self._fatal_error = error
        self.cancel()
        return first
