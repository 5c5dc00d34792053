import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from herobook.domain.models.character import Character
from herobook.infrastructure.file_store.record_codec import (
    SCHEMA_VERSION,
    character_from_record,
    character_to_record,
    upgrade_record,
)


NOW_MS = 1_700_000_000_000


class UpgradeRecordTests(unittest.TestCase):
    def test_legacy_record_gets_defaults(self) -> None:
        record = upgrade_record({"name": "Old Timer", "xp": 45}, player_id="1234567", now_ms=NOW_MS)

        self.assertEqual(SCHEMA_VERSION, record["schemaVersion"])
        self.assertEqual("warrior", record["class"])
        self.assertEqual(20, record["hp"])
        self.assertEqual(2, record["def"])
        self.assertEqual({}, record["inventory"])
        self.assertIsNone(record["equipped_weapon"])
        self.assertEqual(NOW_MS, record["lastDailyReset"])
        self.assertEqual(["Power Strike", "Shield Block", "Battle Cry"], record["abilities"])

    def test_legacy_record_keeps_existing_values(self) -> None:
        record = upgrade_record(
            {"name": "Mira", "class": "mage", "hp": 3, "gold": 40, "createdAt": 5},
            player_id="9999",
            now_ms=NOW_MS,
        )
        self.assertEqual("mage", record["class"])
        self.assertEqual(3, record["hp"])
        self.assertEqual(40, record["gold"])
        self.assertEqual(5, record["createdAt"])

    def test_missing_name_defaults_to_player_prefix(self) -> None:
        record = upgrade_record({}, player_id="123456789", now_ms=NOW_MS)
        self.assertEqual("Player1234", record["name"])

    def test_current_records_pass_through(self) -> None:
        original = character_to_record(Character(name="Ayla", class_name="rogue", gold=3))
        upgraded = upgrade_record(original, player_id="p1", now_ms=NOW_MS)
        self.assertEqual(original, upgraded)


class CodecTests(unittest.TestCase):
    def test_record_uses_legacy_field_names(self) -> None:
        record = character_to_record(
            Character(name="Ayla", max_hp=25, defense=4, skill_points=2, equipped_armor="chain_mail", xp=41)
        )
        for key in ("maxHp", "def", "skillPoints", "lvl", "dailyExplorations", "createdAt", "equipped_armor"):
            self.assertIn(key, record)
        self.assertEqual(3, record["lvl"])
        self.assertEqual("chain_mail", record["equipped_armor"])

    def test_decoding_derives_level_from_xp(self) -> None:
        record = upgrade_record({"name": "Ayla", "xp": 100, "lvl": 2}, player_id="p1", now_ms=NOW_MS)
        character = character_from_record(record)
        self.assertEqual(6, character.level)

    def test_decoding_drops_zero_quantities(self) -> None:
        record = upgrade_record(
            {"name": "Ayla", "inventory": {"wood": 0, "iron_ore": 2}},
            player_id="p1",
            now_ms=NOW_MS,
        )
        self.assertEqual({"iron_ore": 2}, character_from_record(record).inventory)


if __name__ == "__main__":
    unittest.main()
