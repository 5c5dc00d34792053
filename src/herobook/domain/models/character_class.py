from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class CharacterClass(str, Enum):
    WARRIOR = "warrior"
    MAGE = "mage"
    ROGUE = "rogue"
    PALADIN = "paladin"

    @classmethod
    def normalize(cls, value: str | None) -> str | None:
        raw = str(value or "").strip().lower()
        valid = {item.value for item in cls}
        return raw if raw in valid else None


@dataclass(frozen=True)
class ClassProfile:
    slug: str
    name: str
    description: str
    base_stats: Mapping[str, int]
    stat_growth: Mapping[str, int]
    abilities: tuple[str, ...] = ()
    color: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_stats", MappingProxyType(dict(self.base_stats)))
        object.__setattr__(self, "stat_growth", MappingProxyType(dict(self.stat_growth)))


CLASS_PROFILES: Mapping[str, ClassProfile] = MappingProxyType(
    {
        CharacterClass.WARRIOR.value: ClassProfile(
            slug="warrior",
            name="Warrior",
            description="Strong melee fighter with high HP and defense",
            base_stats={"hp": 25, "maxHp": 25, "mp": 10, "maxMp": 10, "atk": 7, "def": 3, "spd": 1},
            stat_growth={"hp": 3, "maxHp": 3, "mp": 1, "maxMp": 1, "atk": 2, "def": 1, "spd": 0},
            abilities=("Power Strike", "Shield Block", "Battle Cry"),
            color=0xFF0000,
        ),
        CharacterClass.MAGE.value: ClassProfile(
            slug="mage",
            name="Mage",
            description="Powerful spellcaster with magic attacks",
            base_stats={"hp": 15, "maxHp": 15, "mp": 30, "maxMp": 30, "atk": 10, "def": 1, "spd": 2},
            stat_growth={"hp": 1, "maxHp": 1, "mp": 4, "maxMp": 4, "atk": 3, "def": 0, "spd": 1},
            abilities=("Fireball", "Magic Shield", "Mana Surge"),
            color=0x9933FF,
        ),
        CharacterClass.ROGUE.value: ClassProfile(
            slug="rogue",
            name="Rogue",
            description="Fast and agile with critical strike chance",
            base_stats={"hp": 18, "maxHp": 18, "mp": 15, "maxMp": 15, "atk": 6, "def": 2, "spd": 4},
            stat_growth={"hp": 2, "maxHp": 2, "mp": 2, "maxMp": 2, "atk": 2, "def": 1, "spd": 2},
            abilities=("Backstab", "Dodge", "Sprint"),
            color=0x333333,
        ),
        CharacterClass.PALADIN.value: ClassProfile(
            slug="paladin",
            name="Paladin",
            description="Holy warrior with healing and protective abilities",
            base_stats={"hp": 22, "maxHp": 22, "mp": 20, "maxMp": 20, "atk": 5, "def": 4, "spd": 1},
            stat_growth={"hp": 3, "maxHp": 3, "mp": 3, "maxMp": 3, "atk": 1, "def": 2, "spd": 0},
            abilities=("Holy Strike", "Heal", "Divine Shield"),
            color=0xFFD700,
        ),
    }
)

DEFAULT_CLASS = CharacterClass.WARRIOR.value


def class_profile(slug: str | None) -> ClassProfile | None:
    normalized = CharacterClass.normalize(slug)
    if normalized is None:
        return None
    return CLASS_PROFILES[normalized]
