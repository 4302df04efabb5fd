from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """
    Framework-agnostic observer used for analysis notifications.
    Subscribers run synchronously, in connection order, on the emitting thread.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._lock: RLock = RLock()
        self._blocked = 0

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @contextmanager
    def blocked(self) -> Iterator[None]:
        """Suppress emission while a host replays several passes."""
        with self._lock:
            self._blocked += 1
        try:
            yield
        finally:
            with self._lock:
                self._blocked -= 1

    def emit(self, payload: T) -> int:
        with self._lock:
            if self._blocked:
                return 0
            subscribers = list(self._subscribers)
        delivered = 0
        stale: list[Callable[[T], None]] = []
        for callback in subscribers:
            try:
                callback(payload)
                delivered += 1
            except RuntimeError as exc:
                # Qt-bound slots outlive their QObject: "Internal C++ object ... already deleted."
                msg = str(exc).lower()
                if "already deleted" in msg or "has been deleted" in msg:
                    stale.append(callback)
                    continue
                raise
            except ReferenceError:
                stale.append(callback)
        if stale:
            with self._lock:
                for callback in stale:
                    if callback in self._subscribers:
                        self._subscribers.remove(callback)
        return delivered
