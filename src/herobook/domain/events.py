from dataclasses import dataclass


@dataclass
class CharacterCreated:
    player_id: str
    name: str
    class_name: str


@dataclass
class CharacterReset:
    player_id: str
    class_name: str


@dataclass
class CharacterDeleted:
    player_id: str


@dataclass
class LevelUpApplied:
    player_id: str
    from_level: int
    to_level: int
    skill_points_gained: int
    xp: int


@dataclass
class SkillPointsSpent:
    player_id: str
    stat: str
    amount: int
    remaining: int


@dataclass
class ItemEquipped:
    player_id: str
    item_id: str
    slot: str
    replaced_item_id: str | None


@dataclass
class ItemCrafted:
    player_id: str
    item_id: str
    xp_gained: int


@dataclass
class QuestCompleted:
    player_id: str
    quest_id: int
    xp_reward: int
    gold_reward: int
