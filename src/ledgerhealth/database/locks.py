"""Keyed serialization tokens for period imports."""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class KeyedLockRegistry:
    """In-process locks keyed by string, created on demand and dropped when idle."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every database instance in the process
period_locks = KeyedLockRegistry()


def acquire_advisory_lock(session: Session, key: str) -> None:
    """Take a transaction-scoped advisory lock on PostgreSQL; no-op elsewhere."""
    if session.get_bind().dialect.name != "postgresql":
        return
    logger.debug("Acquiring advisory lock for %s", key)
    session.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
