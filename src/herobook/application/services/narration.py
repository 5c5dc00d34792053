import logging
from typing import Awaitable, Callable, Optional

from herobook.domain.models.npc import Npc


NarrateFn = Callable[[str, str], Awaitable[str]]

logger = logging.getLogger(__name__)


class Narrator:
    """Flavour text with a guaranteed fallback.

    ``narrate`` is any coroutine taking ``(context, prompt)``. Failures and
    empty replies both resolve to ``fallback``; nothing here touches
    character state.
    """

    def __init__(self, narrate: Optional[NarrateFn] = None) -> None:
        self._narrate = narrate

    @property
    def enabled(self) -> bool:
        return self._narrate is not None

    async def describe(self, context: str, prompt: str, fallback: str = "") -> str:
        if self._narrate is None:
            return fallback
        try:
            text = await self._narrate(context, prompt)
        except Exception as exc:
            logger.warning(
                "Narration failed; using fallback",
                extra={"context": context, "error": type(exc).__name__},
            )
            return fallback
        text = str(text or "").strip()
        return text or fallback

    async def describe_encounter(self, context: str, npc: Npc, *, adventurer_level: int) -> str:
        if npc.boss:
            prompt = (
                f"A level {adventurer_level} adventurer faces the boss {npc.name}. "
                "Provide a short, dramatic battle intro."
            )
            fallback = f"{npc.name} blocks your path!"
        else:
            prompt = f"A level {adventurer_level} adventurer encounters a {npc.name}. Provide a short battle intro."
            fallback = f"You encounter {npc.name}!"
        return await self.describe(context, prompt, fallback)
