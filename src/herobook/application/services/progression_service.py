from __future__ import annotations

import logging

from herobook.application.dtos import XpResult
from herobook.application.services.balance_tables import SKILL_POINT_EFFECTS
from herobook.domain.errors import InsufficientFundsError, InvalidArgumentError
from herobook.domain.events import LevelUpApplied, SkillPointsSpent
from herobook.domain.models.character import Character
from herobook.domain.models.progression import (
    MAX_SKILL_POINT_SPEND,
    ExperiencePoints,
    level_from_xp,
    normalize_skill_stat,
    require_positive_int,
)


logger = logging.getLogger(__name__)


class ProgressionService:
    def __init__(self, event_publisher=None) -> None:
        self._event_publisher = event_publisher

    @staticmethod
    def level_from_xp(xp: int) -> int:
        return level_from_xp(xp)

    def apply_xp(self, character: Character, amount: int, *, player_id: str = "") -> XpResult:
        """Add XP, derive the level and pay out skill points for every level gained.

        The session XP counter grows even past its cap; the cap is a gate that
        callers check before starting an action.
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidArgumentError("XP amount must be a whole number")
        gained_xp = ExperiencePoints(amount).value

        old_level = level_from_xp(character.xp)
        character.xp = int(character.xp) + gained_xp
        new_level = level_from_xp(character.xp)
        character.level = new_level

        levels_gained = max(0, new_level - old_level)
        if levels_gained:
            character.skill_points = int(character.skill_points) + levels_gained
            character.hp = character.max_hp
            character.mp = character.max_mp
            logger.info(
                "Level up",
                extra={"player_id": player_id, "old_level": old_level, "new_level": new_level, "xp": character.xp},
            )
            if callable(self._event_publisher):
                self._event_publisher(
                    LevelUpApplied(
                        player_id=player_id,
                        from_level=old_level,
                        to_level=new_level,
                        skill_points_gained=levels_gained,
                        xp=int(character.xp),
                    )
                )

        character.session_xp_gained = int(character.session_xp_gained) + gained_xp
        logger.debug(
            "XP applied",
            extra={"player_id": player_id, "amount": gained_xp, "xp": character.xp, "levels_gained": levels_gained},
        )
        return XpResult(old_level=old_level, new_level=new_level, levels_gained=levels_gained, xp=int(character.xp))

    def spend_skill_points(self, character: Character, stat: str, amount: int = 1, *, player_id: str = "") -> Character:
        normalized = normalize_skill_stat(stat)
        points = require_positive_int(amount, label="Amount", maximum=MAX_SKILL_POINT_SPEND)

        available = int(character.skill_points or 0)
        if available < points:
            raise InsufficientFundsError(f"Not enough skill points. Have: {available}, Need: {points}")

        for attr, per_point in SKILL_POINT_EFFECTS[normalized].items():
            setattr(character, attr, int(getattr(character, attr)) + per_point * points)
        character.skill_points = available - points
        character.clamp_vitals()

        logger.info(
            "Skill points spent",
            extra={"player_id": player_id, "stat": normalized, "amount": points, "remaining": character.skill_points},
        )
        if callable(self._event_publisher):
            self._event_publisher(
                SkillPointsSpent(
                    player_id=player_id,
                    stat=normalized,
                    amount=points,
                    remaining=int(character.skill_points),
                )
            )
        return character
