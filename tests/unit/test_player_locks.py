import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.domain.errors import LockedError
from herobook.infrastructure.file_store.player_locks import PlayerLockTable


class PlayerLockTableTests(unittest.TestCase):
    def test_second_holder_fails_fast(self) -> None:
        locks = PlayerLockTable()
        with locks.hold("p1"):
            with self.assertRaises(LockedError) as ctx:
                with locks.hold("p1"):
                    pass
            self.assertEqual("p1", ctx.exception.player_id)
            self.assertEqual("LOCKED", ctx.exception.code)

    def test_locks_are_per_player(self) -> None:
        locks = PlayerLockTable()
        with locks.hold("p1"), locks.hold("p2"):
            self.assertTrue(locks.is_locked("p1"))
            self.assertTrue(locks.is_locked("p2"))

    def test_released_after_exception(self) -> None:
        locks = PlayerLockTable()
        with self.assertRaises(RuntimeError):
            with locks.hold("p1"):
                raise RuntimeError("boom")
        self.assertFalse(locks.is_locked("p1"))

    def test_clear_drops_all_locks(self) -> None:
        locks = PlayerLockTable()
        self.assertTrue(locks.try_acquire("p1"))
        self.assertFalse(locks.try_acquire("p1"))
        locks.clear()
        self.assertTrue(locks.try_acquire("p1"))


if __name__ == "__main__":
    unittest.main()
