import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.application.services.progression_service import ProgressionService
from herobook.domain.errors import InsufficientFundsError, InvalidArgumentError
from herobook.domain.events import LevelUpApplied, SkillPointsSpent
from herobook.domain.models.character import Character


class LevelFromXpTests(unittest.TestCase):
    def test_level_boundaries(self) -> None:
        self.assertEqual(1, ProgressionService.level_from_xp(0))
        self.assertEqual(1, ProgressionService.level_from_xp(19))
        self.assertEqual(2, ProgressionService.level_from_xp(20))
        self.assertEqual(6, ProgressionService.level_from_xp(100))


class ApplyXpTests(unittest.TestCase):
    def setUp(self) -> None:
        self.events: list[object] = []
        self.service = ProgressionService(event_publisher=self.events.append)

    def test_xp_within_level_does_not_grant_points(self) -> None:
        character = Character(name="Ayla", hp=5, max_hp=20)
        result = self.service.apply_xp(character, 19, player_id="p1")

        self.assertFalse(result.leveled_up)
        self.assertEqual(1, character.level)
        self.assertEqual(0, character.skill_points)
        self.assertEqual(5, character.hp)
        self.assertEqual(19, character.session_xp_gained)
        self.assertEqual([], self.events)

    def test_multi_level_jump_grants_one_point_per_level_and_heals(self) -> None:
        character = Character(name="Ayla", hp=3, max_hp=25, mp=1, max_mp=10)
        result = self.service.apply_xp(character, 65, player_id="p1")

        self.assertEqual(1, result.old_level)
        self.assertEqual(4, result.new_level)
        self.assertEqual(3, result.levels_gained)
        self.assertEqual(3, character.skill_points)
        self.assertEqual(25, character.hp)
        self.assertEqual(10, character.mp)
        self.assertEqual(1, len(self.events))
        event = self.events[0]
        self.assertIsInstance(event, LevelUpApplied)
        self.assertEqual((1, 4, 3), (event.from_level, event.to_level, event.skill_points_gained))

    def test_zero_xp_is_accepted(self) -> None:
        character = Character(name="Ayla", xp=10)
        result = self.service.apply_xp(character, 0)
        self.assertEqual(10, result.xp)

    def test_rejects_negative_and_non_integer_amounts(self) -> None:
        character = Character(name="Ayla")
        for bad in (-1, 2.5, "10", True):
            with self.subTest(bad=bad):
                with self.assertRaises(InvalidArgumentError):
                    self.service.apply_xp(character, bad)
        self.assertEqual(0, character.xp)

    def test_session_counter_grows_past_cap(self) -> None:
        character = Character(name="Ayla", session_xp_gained=990)
        self.service.apply_xp(character, 50)
        self.assertEqual(1040, character.session_xp_gained)


class SpendSkillPointsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.events: list[object] = []
        self.service = ProgressionService(event_publisher=self.events.append)

    def test_maxhp_raises_cap_and_current(self) -> None:
        character = Character(name="Ayla", hp=10, max_hp=20, skill_points=2)
        self.service.spend_skill_points(character, "maxhp", 2)

        self.assertEqual(30, character.max_hp)
        self.assertEqual(14, character.hp)
        self.assertEqual(0, character.skill_points)
        self.assertIsInstance(self.events[-1], SkillPointsSpent)

    def test_hp_gain_is_clamped_to_max(self) -> None:
        character = Character(name="Ayla", hp=19, max_hp=20, skill_points=3)
        self.service.spend_skill_points(character, "hp", 3)
        self.assertEqual(20, character.hp)

    def test_mp_and_maxmp_effects(self) -> None:
        character = Character(name="Ayla", mp=0, max_mp=10, skill_points=2)
        self.service.spend_skill_points(character, "mp", 1)
        self.assertEqual(3, character.mp)
        self.service.spend_skill_points(character, "maxmp", 1)
        self.assertEqual(15, character.max_mp)
        self.assertEqual(6, character.mp)

    def test_combat_stats_gain_one_per_point(self) -> None:
        character = Character(name="Ayla", atk=5, defense=2, spd=2, skill_points=3)
        self.service.spend_skill_points(character, "ATK", 1)
        self.service.spend_skill_points(character, "def", 1)
        self.service.spend_skill_points(character, "spd", 1)
        self.assertEqual((6, 3, 3), (character.atk, character.defense, character.spd))

    def test_insufficient_points(self) -> None:
        character = Character(name="Ayla", skill_points=1)
        with self.assertRaises(InsufficientFundsError):
            self.service.spend_skill_points(character, "atk", 2)
        self.assertEqual(1, character.skill_points)

    def test_invalid_stat_and_amounts(self) -> None:
        character = Character(name="Ayla", skill_points=500)
        with self.assertRaises(InvalidArgumentError):
            self.service.spend_skill_points(character, "luck", 1)
        for bad in (0, -1, 101, 1.5):
            with self.subTest(bad=bad):
                with self.assertRaises(InvalidArgumentError):
                    self.service.spend_skill_points(character, "atk", bad)
        self.assertEqual(500, character.skill_points)


if __name__ == "__main__":
    unittest.main()
