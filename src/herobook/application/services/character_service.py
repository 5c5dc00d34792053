from __future__ import annotations

import logging
from typing import List, Optional

from herobook.application.dtos import (
    ClassInfoView,
    ConsumeResult,
    CraftResult,
    EquipResult,
    LeaderboardRow,
    XpResult,
)
from herobook.application.services.crafting_service import CraftingService
from herobook.application.services.inventory_service import InventoryService
from herobook.application.services.item_catalog import ItemCatalog
from herobook.application.services.progression_service import ProgressionService
from herobook.domain.errors import InvalidArgumentError, NotFoundError
from herobook.domain.events import CharacterCreated, CharacterDeleted, CharacterReset, ItemEquipped
from herobook.domain.models.character import Character
from herobook.domain.models.character_class import CLASS_PROFILES, ClassProfile, class_profile
from herobook.domain.models.item import ItemDefinition
from herobook.domain.models.progression import require_positive_int
from herobook.domain.repositories import CharacterRepository


LEADERBOARD_MAX_LIMIT = 100


def _class_view(profile: ClassProfile) -> ClassInfoView:
    return ClassInfoView(
        slug=profile.slug,
        name=profile.name,
        description=profile.description,
        abilities=list(profile.abilities),
        base_stats=dict(profile.base_stats),
        color=profile.color,
    )


class CharacterService:
    """One coroutine per player command.

    Every mutation runs inside ``character_repo.transaction`` so it holds the
    player's lock, works on a copy, and is persisted only if nothing raised.
    """

    def __init__(
        self,
        character_repo: CharacterRepository,
        catalog: ItemCatalog,
        progression: ProgressionService,
        inventory: InventoryService,
        crafting: CraftingService,
        event_publisher=None,
    ) -> None:
        self.character_repo = character_repo
        self.catalog = catalog
        self.progression = progression
        self.inventory = inventory
        self.crafting = crafting
        self._event_publisher = event_publisher
        self._logger = logging.getLogger(__name__)

    def _publish(self, event: object) -> None:
        if callable(self._event_publisher):
            self._event_publisher(event)

    # lifecycle

    async def create_character(self, player_id: str, name: str | None, class_name: str) -> Character:
        character = await self.character_repo.create(player_id, name, class_name)
        self._publish(CharacterCreated(player_id=player_id, name=character.name, class_name=character.class_name))
        return character

    async def get_character(self, player_id: str) -> Optional[Character]:
        return await self.character_repo.get(player_id)

    async def require_character(self, player_id: str) -> Character:
        character = await self.character_repo.get(player_id)
        if character is None:
            raise NotFoundError(f"No character for {player_id}")
        return character

    async def reset_character(self, player_id: str, class_name: str) -> Character:
        character = await self.character_repo.reset(player_id, class_name)
        self._publish(CharacterReset(player_id=player_id, class_name=character.class_name))
        return character

    async def delete_character(self, player_id: str) -> bool:
        deleted = await self.character_repo.delete(player_id)
        if deleted:
            self._publish(CharacterDeleted(player_id=player_id))
        return deleted

    # progression

    async def grant_xp(self, player_id: str, amount: int) -> XpResult:
        async with self.character_repo.transaction(player_id) as character:
            return self.progression.apply_xp(character, amount, player_id=player_id)

    async def grant_gold(self, player_id: str, amount: int) -> Character:
        gold = require_positive_int(amount, label="Gold amount")
        async with self.character_repo.transaction(player_id) as character:
            character.gold = int(character.gold) + gold
        self._logger.debug("Gold granted", extra={"player_id": player_id, "amount": gold})
        return character

    async def spend_skill_points(self, player_id: str, stat: str, amount: int = 1) -> Character:
        async with self.character_repo.transaction(player_id) as character:
            self.progression.spend_skill_points(character, stat, amount, player_id=player_id)
        return character

    # inventory

    async def add_item(self, player_id: str, item_id: str, quantity: int = 1) -> Character:
        async with self.character_repo.transaction(player_id) as character:
            self.inventory.add_item(character, item_id, quantity)
        return character

    async def remove_item(self, player_id: str, item_id: str, quantity: int = 1) -> Character:
        async with self.character_repo.transaction(player_id) as character:
            self.inventory.remove_item(character, item_id, quantity)
        return character

    async def use_item(self, player_id: str, item_id: str) -> ConsumeResult:
        async with self.character_repo.transaction(player_id) as character:
            return self.inventory.use_consumable(character, item_id)

    async def equip_item(self, player_id: str, item_id: str) -> EquipResult:
        async with self.character_repo.transaction(player_id) as character:
            result = self.inventory.equip(character, item_id)
        self._publish(
            ItemEquipped(
                player_id=player_id,
                item_id=result.item_id,
                slot=result.slot,
                replaced_item_id=result.replaced_item_id,
            )
        )
        return result

    async def unequip_item(self, player_id: str, slot: str) -> EquipResult:
        async with self.character_repo.transaction(player_id) as character:
            return self.inventory.unequip(character, slot)

    async def craft_item(self, player_id: str, item_id: str) -> CraftResult:
        async with self.character_repo.transaction(player_id) as character:
            return self.crafting.craft(character, item_id, player_id=player_id)

    async def award_random_item(self, player_id: str, level: int | None = None) -> ItemDefinition:
        async with self.character_repo.transaction(player_id) as character:
            drop_level = int(level) if level is not None else int(character.level)
            item = self.inventory.generate_random_item(drop_level)
            self.inventory.add_item(character, item.id, 1)
        self._logger.debug("Random item awarded", extra={"player_id": player_id, "item_id": item.id})
        return item

    async def inventory_value(self, player_id: str) -> int:
        character = await self.require_character(player_id)
        return self.inventory.inventory_value(character)

    # leaderboard

    async def leaderboard(self, limit: int = 10, offset: int = 0) -> List[LeaderboardRow]:
        limit = require_positive_int(limit, label="Limit", maximum=LEADERBOARD_MAX_LIMIT)
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise InvalidArgumentError("Offset must be a non-negative whole number")

        everyone = await self.character_repo.list_all()
        rows = [
            LeaderboardRow(
                player_id=player_id,
                name=character.name,
                level=int(character.level),
                xp=int(character.xp),
                atk=int(character.atk),
            )
            for player_id, character in everyone.items()
        ]
        rows.sort(key=lambda row: (-row.level, -row.xp, -row.atk))
        return rows[offset : offset + limit]

    async def leaderboard_count(self) -> int:
        return await self.character_repo.count()

    # classes

    def class_info(self, class_name: str) -> Optional[ClassInfoView]:
        profile = class_profile(class_name)
        return _class_view(profile) if profile is not None else None

    def class_catalog(self) -> List[ClassInfoView]:
        return [_class_view(profile) for profile in CLASS_PROFILES.values()]
