import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.application.services.combat_service import CombatService
from herobook.domain.models.character import Character
from herobook.domain.models.npc import Npc


class _ScriptedRng:
    """Returns queued values from ``randint`` in order."""

    def __init__(self, rolls: list[int]) -> None:
        self._rolls = list(rolls)

    def randint(self, a: int, b: int) -> int:
        value = self._rolls.pop(0)
        assert a <= value <= b
        return value


class _Plain:
    def __init__(self, hp: int, atk: int = 0) -> None:
        self.hp = hp
        self.atk = atk


class ResolveAttackTests(unittest.TestCase):
    def test_hit_applies_damage_after_defense(self) -> None:
        attacker = Character(name="Ayla", atk=7, spd=1)
        defender = Npc(name="Goblin L1", hp=13, atk=4, level=1, defense=3)
        service = CombatService(rng=_ScriptedRng([5, 0]))

        damage = service.resolve_attack(attacker, defender)

        # raw = 7 + 5 - 2 = 10; minus floor(3 * 0.5) = 1
        self.assertEqual(9, damage)
        self.assertEqual(4, defender.hp)

    def test_miss_returns_zero_and_leaves_defender(self) -> None:
        attacker = Character(name="Ayla", atk=7, spd=1)
        defender = Npc(name="Goblin L1", hp=13, atk=4, level=1)
        # spd 1 -> hit chance 60, roll 60 misses
        service = CombatService(rng=_ScriptedRng([3, 60]))

        self.assertEqual(0, service.resolve_attack(attacker, defender))
        self.assertEqual(13, defender.hp)

    def test_damage_floor_is_one(self) -> None:
        attacker = Character(name="Weak", atk=0, spd=0)
        defender = Character(name="Tank", hp=20, max_hp=20, defense=40)
        service = CombatService(rng=_ScriptedRng([0, 0]))

        self.assertEqual(1, service.resolve_attack(attacker, defender))
        self.assertEqual(19, defender.hp)

    def test_hp_may_go_negative(self) -> None:
        attacker = Character(name="Ayla", atk=30, spd=5)
        defender = Npc(name="Goblin L1", hp=2, atk=4, level=1, defense=0)
        service = CombatService(rng=_ScriptedRng([5, 10]))

        service.resolve_attack(attacker, defender)
        self.assertLess(defender.hp, 0)
        self.assertTrue(defender.defeated)

    def test_opponent_without_stats_uses_fallback_defense_and_speed(self) -> None:
        attacker = _Plain(hp=10, atk=5)
        defender = _Plain(hp=10)
        # fallback spd 2 -> hit chance 70; roll 69 hits
        service = CombatService(rng=_ScriptedRng([2, 69]))

        # raw = 5 + 2 - 2 = 5; fallback def 2 -> minus 1
        self.assertEqual(4, service.resolve_attack(attacker, defender))
        self.assertEqual(6, defender.hp)

    def test_hit_chance_caps_at_95(self) -> None:
        attacker = Character(name="Quick", atk=5, spd=50)
        defender = Npc(name="Goblin L1", hp=10, atk=1, level=1)
        service = CombatService(rng=_ScriptedRng([2, 95]))

        self.assertEqual(0, service.resolve_attack(attacker, defender))


class EncounterGenerationTests(unittest.TestCase):
    def test_monster_scaling(self) -> None:
        monster = CombatService().generate_monster(3)
        self.assertEqual("Goblin L3", monster.name)
        self.assertEqual((19, 6, 3), (monster.hp, monster.atk, monster.level))
        self.assertFalse(monster.boss)

    def test_boss_scaling(self) -> None:
        boss = CombatService().generate_boss(5)
        self.assertEqual("Dragon L5", boss.name)
        self.assertEqual((150, 18), (boss.hp, boss.atk))
        self.assertTrue(boss.boss)

    def test_seeded_event_types_repeat(self) -> None:
        first = CombatService()
        second = CombatService()
        first.set_seed(42)
        second.set_seed(42)

        left = [first.random_event_type() for _ in range(10)]
        right = [second.random_event_type() for _ in range(10)]
        self.assertEqual(left, right)
        self.assertTrue(set(left) <= {"monster", "treasure", "trap", "npc"})


if __name__ == "__main__":
    unittest.main()
