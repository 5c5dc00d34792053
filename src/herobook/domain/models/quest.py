from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class QuestStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class QuestRequirement(str, Enum):
    GOBLINS_DEFEATED = "goblins_defeated"
    POTIONS_COLLECTED = "potions_collected"
    LEVEL_REACHED = "level_reached"
    GOLD_EARNED = "gold_earned"
    LOCATIONS_EXPLORED = "locations_explored"
    ITEMS_CRAFTED = "items_crafted"


@dataclass(frozen=True)
class Quest:
    id: int
    player_id: str
    title: str
    description: str
    status: QuestStatus = QuestStatus.OPEN
    requirement: QuestRequirement | None = None
    amount: int = 1
    created_at: int = 0

    @property
    def is_completed(self) -> bool:
        return self.status == QuestStatus.COMPLETED

    def completed(self) -> "Quest":
        return replace(self, status=QuestStatus.COMPLETED)


@dataclass(frozen=True)
class QuestDraft:
    title: str
    description: str
    requirement: QuestRequirement | None = None
    amount: int = 1
