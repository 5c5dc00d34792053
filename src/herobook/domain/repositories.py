from abc import ABC, abstractmethod
from typing import AsyncContextManager, Dict, List, Optional

from herobook.domain.models.character import Character
from herobook.domain.models.quest import Quest, QuestDraft


class CharacterRepository(ABC):
    @abstractmethod
    async def get(self, player_id: str) -> Optional[Character]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, player_id: str, name: str | None, class_name: str) -> Character:
        raise NotImplementedError

    @abstractmethod
    async def save(self, player_id: str, character: Character) -> None:
        raise NotImplementedError

    @abstractmethod
    async def reset(self, player_id: str, class_name: str) -> Character:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, player_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def list_all(self) -> Dict[str, Character]:
        raise NotImplementedError

    @abstractmethod
    def transaction(self, player_id: str) -> AsyncContextManager[Character]:
        """Hold the player's lock around a working copy that is persisted on clean exit."""
        raise NotImplementedError

    async def count(self) -> int:
        return len(await self.list_all())


class QuestRepository(ABC):
    @abstractmethod
    def add(self, player_id: str, draft: QuestDraft, *, created_at: int) -> Quest:
        raise NotImplementedError

    @abstractmethod
    def get(self, player_id: str, quest_id: int) -> Optional[Quest]:
        raise NotImplementedError

    @abstractmethod
    def list_for_player(self, player_id: str) -> List[Quest]:
        raise NotImplementedError

    @abstractmethod
    def save(self, quest: Quest) -> None:
        raise NotImplementedError
