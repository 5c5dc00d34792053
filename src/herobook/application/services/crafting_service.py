from __future__ import annotations

import logging

from herobook.application.dtos import CraftResult
from herobook.application.services.balance_tables import crafting_xp_reward
from herobook.application.services.inventory_service import InventoryService
from herobook.application.services.item_catalog import ItemCatalog
from herobook.application.services.progression_service import ProgressionService
from herobook.domain.errors import LevelTooLowError, MissingMaterialsError, NotFoundError
from herobook.domain.events import ItemCrafted
from herobook.domain.models.character import Character
from herobook.domain.models.item import CraftingRecipe


logger = logging.getLogger(__name__)


class CraftingService:
    def __init__(
        self,
        catalog: ItemCatalog,
        inventory: InventoryService,
        progression: ProgressionService,
        event_publisher=None,
    ) -> None:
        self.catalog = catalog
        self.inventory = inventory
        self.progression = progression
        self._event_publisher = event_publisher

    def validate(self, character: Character, item_id: str) -> CraftingRecipe:
        recipe = self.catalog.recipe(item_id)
        if recipe is None:
            raise NotFoundError(f"{item_id} cannot be crafted")
        if int(character.level) < int(recipe.required_level):
            raise LevelTooLowError(
                f"Level {recipe.required_level} required to craft {item_id}",
                required=recipe.required_level,
            )

        missing: dict[str, int] = {}
        for material_id, required in recipe.materials.items():
            held = int(character.inventory.get(material_id, 0))
            if held < int(required):
                missing[material_id] = int(required) - held
        if missing:
            raise MissingMaterialsError(recipe.item_id, missing)
        return recipe

    def can_craft(self, character: Character, item_id: str) -> bool:
        try:
            self.validate(character, item_id)
        except (NotFoundError, LevelTooLowError, MissingMaterialsError):
            return False
        return True

    def craft(self, character: Character, item_id: str, *, player_id: str = "") -> CraftResult:
        """Consume the recipe's materials and grant one crafted item plus XP.

        Everything is validated before the first mutation, so a failed craft
        leaves ``character`` unchanged.
        """
        recipe = self.validate(character, item_id)
        item = self.catalog.require(recipe.item_id)
        xp_reward = crafting_xp_reward(character.level)

        for material_id, required in recipe.materials.items():
            self.inventory.remove_item(character, material_id, int(required))
        self.inventory.add_item(character, item.id, 1)
        xp_result = self.progression.apply_xp(character, xp_reward, player_id=player_id)

        logger.info("Item crafted", extra={"player_id": player_id, "item_id": item.id, "xp_gained": xp_reward})
        if callable(self._event_publisher):
            self._event_publisher(ItemCrafted(player_id=player_id, item_id=item.id, xp_gained=xp_reward))
        return CraftResult(
            character=character,
            item=item,
            xp_gained=xp_reward,
            materials_used=dict(recipe.materials),
            xp_result=xp_result,
        )
