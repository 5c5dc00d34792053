import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.application.services.balance_tables import (
    DAILY_EXPLORATION_LIMIT,
    ROLLING_WINDOW_MS,
    SESSION_XP_CAP,
    crafting_xp_reward,
    hit_chance,
    quest_gold_reward,
    quest_xp_reward,
)
from herobook.domain.models.quest import QuestRequirement


class BalanceTablesTests(unittest.TestCase):
    def test_gate_constants(self) -> None:
        self.assertEqual(10, DAILY_EXPLORATION_LIMIT)
        self.assertEqual(1000, SESSION_XP_CAP)
        self.assertEqual(86_400_000, ROLLING_WINDOW_MS)

    def test_hit_chance_curve(self) -> None:
        self.assertEqual(50, hit_chance(0))
        self.assertEqual(70, hit_chance(2))
        self.assertEqual(95, hit_chance(9))

    def test_crafting_xp_scales_with_level(self) -> None:
        self.assertEqual(2, crafting_xp_reward(1))
        self.assertEqual(16, crafting_xp_reward(8))

    def test_quest_rewards_follow_type_multipliers(self) -> None:
        self.assertEqual(114, quest_xp_reward(QuestRequirement.GOBLINS_DEFEATED, 7))
        self.assertEqual(72, quest_gold_reward(QuestRequirement.GOBLINS_DEFEATED, 7))
        self.assertEqual(750, quest_gold_reward(QuestRequirement.GOLD_EARNED, 150))

    def test_plain_quests_use_unit_multiplier(self) -> None:
        self.assertEqual(52, quest_xp_reward(None, 1))
        self.assertEqual(30, quest_gold_reward(None, 1))


if __name__ == "__main__":
    unittest.main()
