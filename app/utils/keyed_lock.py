"""Per-key mutual exclusion for in-process writers."""

from __future__ import annotations

import contextlib
import threading
from typing import Hashable, Iterator


class KeyedLock:
    """
    One lock per key, created on demand and dropped when no holder or waiter
    remains. Serialises writers that share a process; the store's row lock
    covers writers in other processes.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, tuple[threading.Lock, int]] = {}

    @contextlib.contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock, refs = self._locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[key] = (lock, refs + 1)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                _, refs = self._locks[key]
                if refs <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, refs - 1)
