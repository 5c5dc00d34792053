from __future__ import annotations

import logging
import random

from herobook.application.dtos import ConsumeResult, EquipResult
from herobook.application.services.item_catalog import ItemCatalog
from herobook.domain.errors import (
    InsufficientQuantityError,
    InvalidArgumentError,
    NotConsumableError,
    NotEquippableError,
    NothingEquippedError,
    NotInInventoryError,
)
from herobook.domain.models.character import EQUIPMENT_SLOTS, Character
from herobook.domain.models.item import ItemDefinition, ItemType
from herobook.domain.models.progression import require_positive_int
from herobook.domain.services.rarity_table import (
    WeightedEntry,
    pick_weighted,
    rarity_table_for_level,
    total_weight,
)


logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, catalog: ItemCatalog, rng: random.Random | None = None) -> None:
        self.catalog = catalog
        self.rng = rng or random.Random()
        self._base_weights = tuple(
            WeightedEntry(tier.rarity, tier.chance)
            for tier in (catalog.rarity_info(rarity) for rarity in ("common", "uncommon", "rare", "legendary"))
        )

    def _known_item(self, item_id: str) -> ItemDefinition:
        item = self.catalog.get(item_id)
        if item is None:
            raise InvalidArgumentError(f"Unknown item: {item_id}")
        return item

    def add_item(self, character: Character, item_id: str, quantity: int = 1) -> Character:
        item = self._known_item(item_id)
        qty = require_positive_int(quantity, label="Quantity")
        character.inventory[item.id] = int(character.inventory.get(item.id, 0)) + qty
        return character

    def remove_item(self, character: Character, item_id: str, quantity: int = 1) -> Character:
        qty = require_positive_int(quantity, label="Quantity")
        key = str(item_id or "").strip()
        held = int(character.inventory.get(key, 0))
        if held < qty:
            raise InsufficientQuantityError(f"Not enough {key}. Have: {held}, Need: {qty}")
        remaining = held - qty
        if remaining > 0:
            character.inventory[key] = remaining
        else:
            character.inventory.pop(key, None)
        return character

    def inventory_value(self, character: Character) -> int:
        total = 0
        for item_id, quantity in character.inventory.items():
            item = self.catalog.get(item_id)
            if item is not None:
                total += int(item.value) * int(quantity)
        return total

    def use_consumable(self, character: Character, item_id: str) -> ConsumeResult:
        item = self.catalog.get(item_id)
        if item is None or item.type != ItemType.CONSUMABLE:
            raise NotConsumableError(f"{item_id} cannot be consumed")
        if int(character.inventory.get(item.id, 0)) <= 0:
            raise NotInInventoryError(f"{item.name} is not in your inventory")

        result = ConsumeResult(character=character, item_id=item.id)
        if item.hp_restore:
            before = character.hp
            character.hp = min(character.max_hp, character.hp + int(item.hp_restore))
            result.hp_restored = character.hp - before
        if item.mp_restore:
            before = character.mp
            character.mp = min(character.max_mp, character.mp + int(item.mp_restore))
            result.mp_restored = character.mp - before
        if item.revive:
            result.hp_restored += character.max_hp - character.hp
            character.hp = character.max_hp
            result.revived = True

        self.remove_item(character, item.id, 1)
        character.clamp_vitals()
        return result

    @staticmethod
    def _apply_bonus(character: Character, item: ItemDefinition, sign: int) -> None:
        bonus = item.stat_bonus
        if bonus is None:
            return
        attr, amount = bonus
        setattr(character, attr, max(0, int(getattr(character, attr)) + sign * amount))

    def equip(self, character: Character, item_id: str) -> EquipResult:
        item = self.catalog.get(item_id)
        if item is None or not item.equippable:
            raise NotEquippableError(f"{item_id} cannot be equipped")
        if int(character.inventory.get(item.id, 0)) <= 0:
            raise NotInInventoryError(f"{item.name} is not in your inventory")

        slot = item.slot
        previous_id = character.equipped_in(slot)
        if previous_id:
            previous = self.catalog.get(previous_id)
            if previous is not None:
                self._apply_bonus(character, previous, -1)
            character.inventory[previous_id] = int(character.inventory.get(previous_id, 0)) + 1

        self._apply_bonus(character, item, +1)
        character.set_equipped(slot, item.id)
        self.remove_item(character, item.id, 1)
        return EquipResult(character=character, item_id=item.id, slot=slot, replaced_item_id=previous_id)

    def unequip(self, character: Character, slot: str) -> EquipResult:
        normalized = str(slot or "").strip().lower()
        if normalized not in EQUIPMENT_SLOTS:
            raise InvalidArgumentError(f"Unknown equipment slot: {slot}")
        current_id = character.equipped_in(normalized)
        if not current_id:
            raise NothingEquippedError(f"No {normalized} equipped")

        current = self.catalog.get(current_id)
        if current is not None:
            self._apply_bonus(character, current, -1)
        character.set_equipped(normalized, None)
        character.inventory[current_id] = int(character.inventory.get(current_id, 0)) + 1
        return EquipResult(character=character, item_id=current_id, slot=normalized)

    def generate_random_item(self, level: int = 1) -> ItemDefinition:
        table = rarity_table_for_level(level, base=self._base_weights)
        rarity = pick_weighted(table, self.rng.random() * total_weight(table))
        candidates = self.catalog.by_rarity(rarity, max_level=level)
        if not candidates:
            logger.warning(
                "No drop candidates; falling back to baseline healing item",
                extra={"rarity": rarity.value, "drop_level": int(level)},
            )
            return self.catalog.baseline_healing_item()
        return self.rng.choice(candidates)
