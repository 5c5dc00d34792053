from dataclasses import dataclass, field
from typing import Dict, List, Optional

from herobook.domain.models.character import Character
from herobook.domain.models.item import ItemDefinition
from herobook.domain.models.quest import Quest


@dataclass
class XpResult:
    old_level: int
    new_level: int
    levels_gained: int
    xp: int

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


@dataclass
class LimitStatus:
    allowed: bool
    used: int
    max: int
    remaining: int
    reset_at: int


@dataclass
class ConsumeResult:
    character: Character
    item_id: str
    hp_restored: int = 0
    mp_restored: int = 0
    revived: bool = False


@dataclass
class EquipResult:
    character: Character
    item_id: str
    slot: str
    replaced_item_id: Optional[str] = None


@dataclass
class CraftResult:
    character: Character
    item: ItemDefinition
    xp_gained: int
    materials_used: Dict[str, int] = field(default_factory=dict)
    xp_result: Optional[XpResult] = None


@dataclass
class LeaderboardRow:
    player_id: str
    name: str
    level: int
    xp: int
    atk: int


@dataclass
class QuestCompletion:
    quest: Quest
    xp_reward: int
    gold_reward: int
    xp_result: Optional[XpResult] = None


@dataclass
class ClassInfoView:
    slug: str
    name: str
    description: str
    abilities: List[str] = field(default_factory=list)
    base_stats: Dict[str, int] = field(default_factory=dict)
    color: int = 0
