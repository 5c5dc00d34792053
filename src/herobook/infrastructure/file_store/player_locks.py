import threading
from contextlib import contextmanager
from typing import Iterator, Set

from herobook.domain.errors import LockedError


class PlayerLockTable:
    """Fail-fast advisory locks keyed by player id.

    A held lock is never waited on: the second caller gets ``LockedError``.
    """

    def __init__(self) -> None:
        self._held: Set[str] = set()
        self._guard = threading.Lock()

    def try_acquire(self, player_id: str) -> bool:
        with self._guard:
            if player_id in self._held:
                return False
            self._held.add(player_id)
            return True

    def release(self, player_id: str) -> None:
        with self._guard:
            self._held.discard(player_id)

    def is_locked(self, player_id: str) -> bool:
        with self._guard:
            return player_id in self._held

    def clear(self) -> None:
        with self._guard:
            self._held.clear()

    @contextmanager
    def hold(self, player_id: str) -> Iterator[None]:
        if not self.try_acquire(player_id):
            raise LockedError(player_id)
        try:
            yield
        finally:
            self.release(player_id)
