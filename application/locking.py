from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Dict, Hashable, Iterator


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class LockRegistry:
    """
    Hands out one mutex per key (an account id, a login, ...).

    Keys passed to a single `hold` call are acquired in sorted order, so two
    operations touching the same pair of accounts cannot deadlock. Keys in
    one call must therefore be mutually comparable.

    An entry lives only while some caller holds or waits on it, so the
    registry stays as small as the number of keys in use.

    Locks only serialize callers in this process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, _Entry] = {}

    def _check_out(self, key: Hashable) -> _Entry:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = _Entry()
                self._locks[key] = entry
            entry.users += 1
            return entry

    def _check_in(self, key: Hashable) -> None:
        with self._guard:
            entry = self._locks[key]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                entry = self._check_out(key)
                stack.callback(self._check_in, key)
                stack.enter_context(entry.lock)
            yield
