from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class ItemType(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    MATERIAL = "material"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


SLOT_BY_ITEM_TYPE: Mapping[ItemType, str] = MappingProxyType(
    {
        ItemType.WEAPON: "weapon",
        ItemType.ARMOR: "armor",
    }
)


@dataclass(frozen=True)
class ItemDefinition:
    id: str
    name: str
    type: ItemType
    rarity: Rarity
    value: int
    description: str = ""
    atk: int = 0
    defense: int = 0
    hp_restore: int = 0
    mp_restore: int = 0
    revive: bool = False
    level_requirement: int = 1

    @property
    def equippable(self) -> bool:
        return self.type in SLOT_BY_ITEM_TYPE

    @property
    def slot(self) -> str | None:
        return SLOT_BY_ITEM_TYPE.get(self.type)

    @property
    def stat_bonus(self) -> tuple[str, int] | None:
        """Return the character attribute and amount this item adds when equipped."""
        if self.type == ItemType.WEAPON:
            return "atk", int(self.atk)
        if self.type == ItemType.ARMOR:
            return "defense", int(self.defense)
        return None


@dataclass(frozen=True)
class RarityTier:
    rarity: Rarity
    color: int
    chance: int


@dataclass(frozen=True)
class CraftingRecipe:
    item_id: str
    materials: Mapping[str, int] = field(default_factory=dict)
    required_level: int = 1
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "materials", MappingProxyType(dict(self.materials)))
