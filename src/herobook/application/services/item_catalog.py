from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from herobook.domain.errors import NotFoundError
from herobook.domain.models.item import CraftingRecipe, ItemDefinition, ItemType, Rarity, RarityTier


BASELINE_HEALING_ITEM = "health_potion"


def _item(item_id: str, name: str, item_type: ItemType, rarity: Rarity, value: int, level: int, description: str, **payload) -> ItemDefinition:
    return ItemDefinition(
        id=item_id,
        name=name,
        type=item_type,
        rarity=rarity,
        value=value,
        description=description,
        level_requirement=level,
        **payload,
    )


DEFAULT_ITEMS: tuple[ItemDefinition, ...] = (
    _item("rusty_sword", "Rusty Sword", ItemType.WEAPON, Rarity.COMMON, 10, 1, "A worn but serviceable blade", atk=3),
    _item("iron_sword", "Iron Sword", ItemType.WEAPON, Rarity.UNCOMMON, 50, 3, "A well-crafted iron blade", atk=7),
    _item("magic_staff", "Magic Staff", ItemType.WEAPON, Rarity.RARE, 200, 8, "Channels magical energy", atk=12),
    _item("legendary_blade", "Legendary Blade", ItemType.WEAPON, Rarity.LEGENDARY, 1000, 15, "A blade of ancient power", atk=20),
    _item("leather_armor", "Leather Armor", ItemType.ARMOR, Rarity.COMMON, 15, 1, "Basic protective gear", defense=2),
    _item("chain_mail", "Chain Mail", ItemType.ARMOR, Rarity.UNCOMMON, 75, 4, "Interlinked metal rings", defense=5),
    _item("plate_armor", "Plate Armor", ItemType.ARMOR, Rarity.RARE, 300, 10, "Heavy steel protection", defense=10),
    _item("dragon_armor", "Dragon Armor", ItemType.ARMOR, Rarity.LEGENDARY, 1500, 20, "Forged from dragon scales", defense=18),
    _item("health_potion", "Health Potion", ItemType.CONSUMABLE, Rarity.COMMON, 25, 1, "Restores 20 HP", hp_restore=20),
    _item("mana_potion", "Mana Potion", ItemType.CONSUMABLE, Rarity.UNCOMMON, 40, 5, "Restores 30 MP", mp_restore=30),
    _item("revive_crystal", "Revive Crystal", ItemType.CONSUMABLE, Rarity.RARE, 150, 12, "Brings you back from defeat", revive=True),
    _item("iron_ore", "Iron Ore", ItemType.MATERIAL, Rarity.COMMON, 5, 1, "Raw iron for crafting"),
    _item("magic_crystal", "Magic Crystal", ItemType.MATERIAL, Rarity.RARE, 100, 7, "Contains magical energy"),
    _item("dragon_scale", "Dragon Scale", ItemType.MATERIAL, Rarity.LEGENDARY, 500, 18, "Priceless crafting material"),
    _item("gold_ore", "Gold Ore", ItemType.MATERIAL, Rarity.UNCOMMON, 50, 5, "Shiny gold for high-value crafting"),
    _item("mithril_ingot", "Mithril Ingot", ItemType.MATERIAL, Rarity.LEGENDARY, 2000, 25, "Lightweight and incredibly strong"),
    _item("wood", "Wood", ItemType.MATERIAL, Rarity.COMMON, 2, 1, "Basic building material"),
    _item("leather", "Leather", ItemType.MATERIAL, Rarity.COMMON, 3, 1, "Tough animal hide"),
    _item("gemstone", "Gemstone", ItemType.MATERIAL, Rarity.RARE, 150, 10, "Sparkling precious stone"),
)

DEFAULT_RECIPES: tuple[CraftingRecipe, ...] = (
    CraftingRecipe("iron_sword", {"iron_ore": 3, "wood": 1}, 3, "Craft an iron sword from iron ore and wood"),
    CraftingRecipe("chain_mail", {"iron_ore": 5, "leather": 2}, 4, "Craft chain mail armor from iron and leather"),
    CraftingRecipe("health_potion", {"magic_crystal": 1, "wood": 1}, 1, "Craft a health potion using magic and wood"),
    CraftingRecipe("mana_potion", {"magic_crystal": 2, "gemstone": 1}, 5, "Craft a mana potion using crystals and gems"),
    CraftingRecipe("magic_staff", {"wood": 2, "magic_crystal": 3, "gemstone": 1}, 8, "Craft a powerful magic staff"),
    CraftingRecipe("plate_armor", {"iron_ore": 8, "leather": 3, "mithril_ingot": 1}, 10, "Craft heavy plate armor"),
)

DEFAULT_RARITY_TIERS: tuple[RarityTier, ...] = (
    RarityTier(Rarity.COMMON, 0x8B8B8B, 50),
    RarityTier(Rarity.UNCOMMON, 0x4CAF50, 25),
    RarityTier(Rarity.RARE, 0x2196F3, 15),
    RarityTier(Rarity.LEGENDARY, 0xFF9800, 10),
)


class ItemCatalog:
    """Read-only lookup over item definitions, rarity tiers and crafting recipes."""

    def __init__(
        self,
        items: Iterable[ItemDefinition] = DEFAULT_ITEMS,
        recipes: Iterable[CraftingRecipe] = DEFAULT_RECIPES,
        rarity_tiers: Iterable[RarityTier] = DEFAULT_RARITY_TIERS,
    ) -> None:
        self._items: Mapping[str, ItemDefinition] = MappingProxyType({item.id: item for item in items})
        self._recipes: Mapping[str, CraftingRecipe] = MappingProxyType({recipe.item_id: recipe for recipe in recipes})
        self._tiers: Mapping[Rarity, RarityTier] = MappingProxyType({tier.rarity: tier for tier in rarity_tiers})

    def get(self, item_id: str) -> ItemDefinition | None:
        return self._items.get(str(item_id or "").strip())

    def require(self, item_id: str) -> ItemDefinition:
        item = self.get(item_id)
        if item is None:
            raise NotFoundError(f"Unknown item: {item_id}")
        return item

    def items(self) -> list[ItemDefinition]:
        return list(self._items.values())

    def by_rarity(self, rarity: Rarity, *, max_level: int) -> list[ItemDefinition]:
        return [
            item
            for item in self._items.values()
            if item.rarity == rarity and item.level_requirement <= int(max_level)
        ]

    def rarity_info(self, rarity: Rarity | str) -> RarityTier:
        try:
            key = Rarity(rarity)
        except ValueError:
            key = Rarity.COMMON
        return self._tiers.get(key) or self._tiers[Rarity.COMMON]

    def recipe(self, item_id: str) -> CraftingRecipe | None:
        return self._recipes.get(str(item_id or "").strip())

    def recipes(self) -> list[CraftingRecipe]:
        return list(self._recipes.values())

    def baseline_healing_item(self) -> ItemDefinition:
        return self.require(BASELINE_HEALING_ITEM)
