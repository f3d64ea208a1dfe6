"""
Per-competition critical sections.

Writes to one competition (bracket results, standings updates) are
serialized through a lock keyed by competition id. Writes to different
competitions never wait on each other.
"""

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Generator


class CompetitionLocks:
    """
    Lock registry owned by one application context.

    Usage:
        locks = CompetitionLocks()
        with locks.hold(competition_id):
            ...
    """

    def __init__(self):
        self._lock = Lock()
        self._locks: dict[int, RLock] = {}

    def lock_for(self, competition_id: int) -> RLock:
        with self._lock:
            lock = self._locks.get(competition_id)
            if lock is None:
                lock = RLock()
                self._locks[competition_id] = lock
            return lock

    @contextmanager
    def hold(self, competition_id: int) -> Generator[None, None, None]:
        lock = self.lock_for(competition_id)
        with lock:
            yield

    def forget(self, competition_id: int) -> None:
        """Drop the lock of a deleted competition."""
        with self._lock:
            self._locks.pop(competition_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._locks)
