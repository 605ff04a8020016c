# inventory/utils/rw_lock.py
# Reader/writer lock built on threading.Condition.

import threading
from contextlib import contextmanager
from typing import Generator


class ReadWriteLock:
    """
    Allows any number of concurrent readers, or a single writer.

    Writers take priority: once a writer is waiting, new readers queue behind it
    so a steady stream of reads cannot starve a write.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            if self._readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire_read().")
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True

    def release_write(self):
        with self._cond:
            if not self._writer_active:
                raise RuntimeError("release_write() called without a matching acquire_write().")
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Generator[None, None, None]:
        """Context manager holding the lock in shared (read) mode."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Generator[None, None, None]:
        """Context manager holding the lock in exclusive (write) mode."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
