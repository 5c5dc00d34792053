from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Callable, List

from herobook.application.dtos import QuestCompletion
from herobook.application.services.balance_tables import quest_gold_reward, quest_xp_reward
from herobook.application.services.progression_service import ProgressionService
from herobook.domain.errors import InvalidArgumentError, NotFoundError, PersistenceFailureError
from herobook.domain.events import QuestCompleted
from herobook.domain.models.character import validate_player_id
from herobook.domain.models.quest import Quest, QuestDraft, QuestRequirement
from herobook.domain.repositories import CharacterRepository, QuestRepository


logger = logging.getLogger(__name__)

QUEST_TITLE_MAX_LENGTH = 120


def quest_templates(level: int) -> tuple[QuestDraft, ...]:
    level = max(1, int(level))
    return (
        QuestDraft(
            f"Slay {5 + level * 2} Goblins",
            f"Defeat {5 + level * 2} goblins in combat.",
            QuestRequirement.GOBLINS_DEFEATED,
            5 + level * 2,
        ),
        QuestDraft(
            f"Collect {3 + level} Health Potions",
            f"Gather {3 + level} health potions from exploration.",
            QuestRequirement.POTIONS_COLLECTED,
            3 + level,
        ),
        QuestDraft(
            f"Reach Level {level + 5}",
            f"Gain enough XP to reach level {level + 5}.",
            QuestRequirement.LEVEL_REACHED,
            level + 5,
        ),
        QuestDraft(
            f"Earn {100 + level * 50} Gold",
            f"Accumulate {100 + level * 50} gold through various activities.",
            QuestRequirement.GOLD_EARNED,
            100 + level * 50,
        ),
        QuestDraft(
            f"Explore {2 + level} Locations",
            f"Discover and explore {2 + level} new locations.",
            QuestRequirement.LOCATIONS_EXPLORED,
            2 + level,
        ),
        QuestDraft(
            f"Craft {1 + level} Items",
            f"Use materials to craft {1 + level} new items.",
            QuestRequirement.ITEMS_CRAFTED,
            1 + level,
        ),
    )


class QuestService:
    """Per-player quest board.

    Quest rows live in a ``QuestRepository``; rewards land on the character
    through ``CharacterRepository.transaction`` so they share its lock.
    """

    def __init__(
        self,
        quest_repo: QuestRepository,
        character_repo: CharacterRepository,
        progression: ProgressionService,
        event_publisher=None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.quest_repo = quest_repo
        self.character_repo = character_repo
        self.progression = progression
        self._event_publisher = event_publisher
        self.rng = rng or random.Random()
        self._clock = clock

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _add(self, player_id: str, draft: QuestDraft) -> Quest:
        validate_player_id(player_id)
        quest = await asyncio.to_thread(self.quest_repo.add, player_id, draft, created_at=self._now_ms())
        logger.info("Quest created", extra={"player_id": player_id, "quest_id": quest.id})
        return quest

    async def create_quest(self, player_id: str, title: str, description: str = "") -> Quest:
        clean_title = str(title or "").strip()
        if not clean_title or len(clean_title) > QUEST_TITLE_MAX_LENGTH:
            raise InvalidArgumentError(f"Quest title must be 1-{QUEST_TITLE_MAX_LENGTH} characters long")
        return await self._add(player_id, QuestDraft(clean_title, str(description or "").strip()))

    async def generate_random_quest(self, player_id: str, level: int = 1) -> Quest:
        draft = self.rng.choice(quest_templates(level))
        return await self._add(player_id, draft)

    async def list_quests(self, player_id: str) -> List[Quest]:
        validate_player_id(player_id)
        return await asyncio.to_thread(self.quest_repo.list_for_player, player_id)

    async def complete_quest(self, player_id: str, quest_id: int) -> QuestCompletion:
        """Mark an open quest completed and pay its XP and gold to the character."""
        validate_player_id(player_id)
        try:
            quest_key = int(quest_id)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Invalid quest id: {quest_id!r}") from exc

        open_quest = None
        try:
            async with self.character_repo.transaction(player_id) as character:
                quest = await asyncio.to_thread(self.quest_repo.get, player_id, quest_key)
                if quest is None:
                    raise NotFoundError(f"Quest {quest_key} not found")
                if quest.is_completed:
                    raise InvalidArgumentError(f"Quest {quest_key} is already completed")

                xp_reward = quest_xp_reward(quest.requirement, quest.amount)
                gold_reward = quest_gold_reward(quest.requirement, quest.amount)
                xp_result = self.progression.apply_xp(character, xp_reward, player_id=player_id)
                character.gold = int(character.gold) + gold_reward

                open_quest = quest
                quest = quest.completed()
                await asyncio.to_thread(self.quest_repo.save, quest)
        except PersistenceFailureError:
            # Rewards never reached disk; reopen the quest.
            if open_quest is not None:
                await asyncio.to_thread(self.quest_repo.save, open_quest)
                logger.warning("Quest reopened after failed reward write", extra={"player_id": player_id, "quest_id": quest_key})
            raise

        logger.info(
            "Quest completed",
            extra={"player_id": player_id, "quest_id": quest.id, "xp_reward": xp_reward, "gold_reward": gold_reward},
        )
        if callable(self._event_publisher):
            self._event_publisher(
                QuestCompleted(player_id=player_id, quest_id=quest.id, xp_reward=xp_reward, gold_reward=gold_reward)
            )
        return QuestCompletion(quest=quest, xp_reward=xp_reward, gold_reward=gold_reward, xp_result=xp_result)
