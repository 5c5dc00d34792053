import logging
import math
import random
from typing import Tuple

from herobook.application.services.balance_tables import (
    DAMAGE_OFFSET_MAX,
    DAMAGE_OFFSET_SHIFT,
    DEFENSE_REDUCTION_RATIO,
    boss_atk,
    boss_hp,
    hit_chance,
    monster_atk,
    monster_hp,
)
from herobook.domain.models.npc import Npc


logger = logging.getLogger(__name__)

# Opponents that carry no stat of their own fight with these values.
_FALLBACK_DEFENSE = 2
_FALLBACK_SPEED = 2


def _stat(combatant: object, attr: str, fallback: int) -> int:
    value = getattr(combatant, attr, None)
    if value is None:
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


class CombatService:
    EVENT_TYPES: Tuple[str, ...] = ("monster", "treasure", "trap", "npc")

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def set_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    def resolve_attack(self, attacker: object, defender: object) -> int:
        """Roll one attack and apply its damage to ``defender.hp`` on a hit.

        Damage on a hit is at least 1. A miss returns 0 and leaves the
        defender untouched. ``defender.hp`` may drop below zero; callers
        decide what defeat means.
        """
        offset = self.rng.randint(0, DAMAGE_OFFSET_MAX)
        raw_damage = max(1, _stat(attacker, "atk", 0) + offset - DAMAGE_OFFSET_SHIFT)

        defense = _stat(defender, "defense", _FALLBACK_DEFENSE)
        damage = max(1, raw_damage - math.floor(defense * DEFENSE_REDUCTION_RATIO))

        chance = hit_chance(_stat(attacker, "spd", _FALLBACK_SPEED))
        hit_roll = self.rng.randint(0, 99)
        if hit_roll >= chance:
            logger.debug("Attack missed", extra={"hit_chance": chance, "hit_roll": hit_roll})
            return 0

        defender.hp = int(defender.hp) - damage
        logger.debug("Attack hit", extra={"damage": damage, "defender_hp": defender.hp})
        return damage

    def generate_monster(self, level: int = 1) -> Npc:
        level = int(level)
        return Npc(name=f"Goblin L{level}", hp=monster_hp(level), atk=monster_atk(level), level=level)

    def generate_boss(self, level: int = 5) -> Npc:
        level = int(level)
        return Npc(name=f"Dragon L{level}", hp=boss_hp(level), atk=boss_atk(level), level=level, boss=True)

    def random_event_type(self) -> str:
        return self.rng.choice(self.EVENT_TYPES)
