"""Per-account locks serializing balance read-modify-write sequences."""

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator


class AccountLockRegistry:
    """Hands out one lock per account ID.

    Locks for several accounts are always taken in ascending ID order, so two
    transfers between the same pair of accounts cannot deadlock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, account_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock

    @contextmanager
    def hold(self, account_ids: Iterable[int]) -> Iterator[tuple[int, ...]]:
        """Hold the locks for every listed account for the duration of the block."""
        ordered = tuple(sorted(set(account_ids)))
        acquired: list[threading.Lock] = []
        try:
            for account_id in ordered:
                lock = self._lock_for(account_id)
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()
