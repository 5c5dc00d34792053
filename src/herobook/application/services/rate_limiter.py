"""Rolling 24 hour gates for explorations and session XP.

Both gates are advisory: callers check, run the gated action, then persist.
Nothing here stops XP that is already in flight.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from herobook.application.dtos import LimitStatus
from herobook.application.services.balance_tables import (
    DAILY_EXPLORATION_LIMIT,
    ROLLING_WINDOW_MS,
    SESSION_XP_CAP,
)
from herobook.domain.errors import DailyLimitReachedError, NotFoundError, SessionCapReachedError
from herobook.domain.models.character import Character
from herobook.domain.repositories import CharacterRepository


logger = logging.getLogger(__name__)


def roll_daily_window(character: Character, now_ms: int) -> bool:
    if now_ms - int(character.last_daily_reset or 0) >= ROLLING_WINDOW_MS:
        character.daily_explorations = 0
        character.last_daily_reset = int(now_ms)
        return True
    return False


def roll_session_window(character: Character, now_ms: int) -> bool:
    if now_ms - int(character.last_session_reset or 0) >= ROLLING_WINDOW_MS:
        character.session_xp_gained = 0
        character.last_session_reset = int(now_ms)
        return True
    return False


def daily_status(character: Character) -> LimitStatus:
    used = int(character.daily_explorations or 0)
    return LimitStatus(
        allowed=used < DAILY_EXPLORATION_LIMIT,
        used=used,
        max=DAILY_EXPLORATION_LIMIT,
        remaining=max(0, DAILY_EXPLORATION_LIMIT - used),
        reset_at=int(character.last_daily_reset or 0),
    )


def session_status(character: Character) -> LimitStatus:
    used = int(character.session_xp_gained or 0)
    return LimitStatus(
        allowed=used < SESSION_XP_CAP,
        used=used,
        max=SESSION_XP_CAP,
        remaining=max(0, SESSION_XP_CAP - used),
        reset_at=int(character.last_session_reset or 0),
    )


class RateLimiter:
    def __init__(self, character_repo: CharacterRepository, clock: Callable[[], float] = time.time) -> None:
        self._repo = character_repo
        self._clock = clock

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _load(self, player_id: str) -> Character:
        character = await self._repo.get(player_id)
        if character is None:
            raise NotFoundError(f"No character for {player_id}")
        return character

    async def _checked(
        self,
        player_id: str,
        roll: Callable[[Character, int], bool],
        status: Callable[[Character], LimitStatus],
    ) -> LimitStatus:
        now = self.now_ms()
        character = await self._load(player_id)
        if roll(character, now):
            async with self._repo.transaction(player_id) as working:
                roll(working, now)
                character = working
            logger.debug("Rolling window reset", extra={"player_id": player_id, "gate": roll.__name__})
        return status(character)

    async def check_daily_limit(self, player_id: str) -> LimitStatus:
        return await self._checked(player_id, roll_daily_window, daily_status)

    async def check_session_xp_cap(self, player_id: str) -> LimitStatus:
        return await self._checked(player_id, roll_session_window, session_status)

    async def increment_daily_exploration(self, player_id: str) -> LimitStatus:
        now = self.now_ms()
        async with self._repo.transaction(player_id) as character:
            roll_daily_window(character, now)
            current = daily_status(character)
            if not current.allowed:
                raise DailyLimitReachedError(
                    f"Daily exploration limit reached ({current.used}/{current.max})"
                )
            character.daily_explorations = current.used + 1
        return daily_status(character)

    async def require_session_xp(self, player_id: str) -> LimitStatus:
        current = await self.check_session_xp_cap(player_id)
        if not current.allowed:
            raise SessionCapReachedError(f"Session XP cap reached ({current.used}/{current.max})")
        return current
