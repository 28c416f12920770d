"""In-process lock registry keyed by any hashable, orderable value.

Stock mutations lock on fabric/color keys; cutting use cases lock on lot
numbers so that loading a batch, checking its state, moving stock and
saving the batch happen as one step.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterable, Iterator
from contextlib import contextmanager


class KeyedLocks:
    """One lock per key, acquired in sorted order to avoid deadlock."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    @contextmanager
    def hold(self, keys: Iterable[Hashable]) -> Iterator[None]:
        ordered = sorted(set(keys))
        with self._guard:
            locks = [self._locks.setdefault(key, threading.Lock()) for key in ordered]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


# Shared by every cutting and worker-process handler, keyed by lot number
LOT_LOCKS = KeyedLocks()

# Shared by vendor edits, keyed by vendor id
VENDOR_LOCKS = KeyedLocks()

# Shared by delivery creation, keyed by delivery number
DELIVERY_LOCKS = KeyedLocks()
