import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, Optional

from app.core.config import LOCK_TIMEOUT_SECONDS
from app.core.errors import LockTimeoutError


class KeyedLocks:
    """
    Locks re-entrantes por clave (p. ej. ("statements", user_id, account_id)).
    Varias claves se toman siempre en el mismo orden para no cruzarse.
    """

    def __init__(self, timeout: float = LOCK_TIMEOUT_SECONDS):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.RLock] = {}

    def _lock_for(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, *keys: Hashable, timeout: Optional[float] = None) -> Iterator[None]:
        wait = self.timeout if timeout is None else timeout
        ordered = sorted(set(keys), key=repr)
        acquired = []
        try:
            for key in ordered:
                lock = self._lock_for(key)
                if not lock.acquire(timeout=wait):
                    raise LockTimeoutError(f"Operación en curso sobre {key!r}, intenta de nuevo.")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


# Compartido por todo el proceso: las sesiones son por request, los locks no
engine_locks = KeyedLocks()
