import threading
from contextlib import contextmanager
from typing import Iterator


class SingleFlightGuard:
    """
    Shared flag ensuring at most one backup cycle runs at a time.

    A failed acquire never waits: callers are expected to skip their cycle.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._running: bool = False

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def try_acquire(self) -> bool:
        """
        Set the flag if it was clear.

        Returns:
            bool: True if this caller now owns the cycle, False if one is already running.
        """
        with self._lock:
            if self._running:
                return False
            self._running = True
            return True

    def release(self) -> None:
        with self._lock:
            self._running = False

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """
        Acquire for the duration of the block and release on every exit path.
        Yields whether the acquire succeeded; a refused acquire is never released.
        """
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
