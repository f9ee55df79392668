"""Reader/writer lock for thread-shared state."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Every acquirer passes through a turnstile first. A waiting writer holds
    the turnstile, so readers arriving after it queue behind it instead of
    overtaking it forever, and once the writer leaves the queued readers
    enter together. Neither side can be starved by a steady stream of the
    other.
    """

    def __init__(self) -> None:
        self._turnstile = threading.Lock()
        # Held while any reader or a writer is inside; released by whichever
        # thread empties the room, so it must be a plain Lock.
        self._room_empty = threading.Lock()
        self._readers_lock = threading.Lock()
        self._readers = 0

    def acquire_read(self) -> None:
        with self._turnstile:
            pass
        with self._readers_lock:
            self._readers += 1
            if self._readers == 1:
                self._room_empty.acquire()

    def release_read(self) -> None:
        with self._readers_lock:
            if self._readers == 0:
                raise RuntimeError("release_read called without a matching acquire")
            self._readers -= 1
            if self._readers == 0:
                self._room_empty.release()

    def acquire_write(self) -> None:
        self._turnstile.acquire()
        self._room_empty.acquire()

    def release_write(self) -> None:
        self._turnstile.release()
        self._room_empty.release()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def active_readers(self) -> int:
        with self._readers_lock:
            return self._readers
