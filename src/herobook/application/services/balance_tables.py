from __future__ import annotations

import math

from herobook.domain.models.quest import QuestRequirement


ROLLING_WINDOW_MS = 24 * 60 * 60 * 1000

DAILY_EXPLORATION_LIMIT = 10
SESSION_XP_CAP = 1000

MONSTER_BASE_HP = 10
MONSTER_HP_PER_LEVEL = 3
MONSTER_BASE_ATK = 3
MONSTER_ATK_PER_LEVEL = 1

BOSS_BASE_HP = 50
BOSS_HP_PER_LEVEL = 20
BOSS_BASE_ATK = 8
BOSS_ATK_PER_LEVEL = 2

DAMAGE_OFFSET_MAX = 5
DAMAGE_OFFSET_SHIFT = 2
DEFENSE_REDUCTION_RATIO = 0.5
HIT_CHANCE_BASE = 50
HIT_CHANCE_PER_SPEED = 10
HIT_CHANCE_CAP = 95

CRAFTING_XP_PER_LEVEL = 2

SKILL_POINT_EFFECTS: dict[str, dict[str, int]] = {
    "hp": {"hp": 2},
    "maxhp": {"max_hp": 5, "hp": 2},
    "mp": {"mp": 3},
    "maxmp": {"max_mp": 5, "mp": 3},
    "atk": {"atk": 1},
    "def": {"defense": 1},
    "spd": {"spd": 1},
}

QUEST_BASE_XP = 50
QUEST_BASE_GOLD = 25

_QUEST_XP_MULTIPLIERS: dict[QuestRequirement, float] = {
    QuestRequirement.GOBLINS_DEFEATED: 2,
    QuestRequirement.POTIONS_COLLECTED: 1.5,
    QuestRequirement.LEVEL_REACHED: 3,
    QuestRequirement.GOLD_EARNED: 1,
    QuestRequirement.LOCATIONS_EXPLORED: 2.5,
    QuestRequirement.ITEMS_CRAFTED: 2,
}

_QUEST_GOLD_MULTIPLIERS: dict[QuestRequirement, float] = {
    QuestRequirement.GOBLINS_DEFEATED: 1.5,
    QuestRequirement.POTIONS_COLLECTED: 1,
    QuestRequirement.LEVEL_REACHED: 2,
    QuestRequirement.GOLD_EARNED: 0,
    QuestRequirement.LOCATIONS_EXPLORED: 1.8,
    QuestRequirement.ITEMS_CRAFTED: 1.2,
}


def monster_hp(level: int) -> int:
    return MONSTER_BASE_HP + int(level) * MONSTER_HP_PER_LEVEL


def monster_atk(level: int) -> int:
    return MONSTER_BASE_ATK + int(level) * MONSTER_ATK_PER_LEVEL


def boss_hp(level: int) -> int:
    return BOSS_BASE_HP + int(level) * BOSS_HP_PER_LEVEL


def boss_atk(level: int) -> int:
    return BOSS_BASE_ATK + int(level) * BOSS_ATK_PER_LEVEL


def hit_chance(speed: int) -> int:
    return min(HIT_CHANCE_CAP, HIT_CHANCE_BASE + int(speed) * HIT_CHANCE_PER_SPEED)


def crafting_xp_reward(level: int) -> int:
    return max(0, int(level)) * CRAFTING_XP_PER_LEVEL


def quest_xp_reward(requirement: QuestRequirement | None, amount: int) -> int:
    multiplier = _QUEST_XP_MULTIPLIERS.get(requirement, 1) if requirement else 1
    return math.floor(QUEST_BASE_XP * multiplier + max(1, int(amount or 1)) * 2)


def quest_gold_reward(requirement: QuestRequirement | None, amount: int) -> int:
    multiplier = _QUEST_GOLD_MULTIPLIERS.get(requirement, 1) if requirement else 1
    return math.floor(QUEST_BASE_GOLD * multiplier + max(1, int(amount or 1)) * 5)
