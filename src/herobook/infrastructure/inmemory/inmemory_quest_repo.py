import threading
from typing import Dict, List, Optional

from herobook.domain.models.quest import Quest, QuestDraft, QuestStatus
from herobook.domain.repositories import QuestRepository


class InMemoryQuestRepository(QuestRepository):
    def __init__(self) -> None:
        self._quests: Dict[int, Quest] = {}
        self._next_id = 1
        self._guard = threading.Lock()

    def add(self, player_id: str, draft: QuestDraft, *, created_at: int) -> Quest:
        with self._guard:
            quest = Quest(
                id=self._next_id,
                player_id=player_id,
                title=draft.title,
                description=draft.description,
                status=QuestStatus.OPEN,
                requirement=draft.requirement,
                amount=int(draft.amount),
                created_at=int(created_at),
            )
            self._quests[quest.id] = quest
            self._next_id += 1
            return quest

    def get(self, player_id: str, quest_id: int) -> Optional[Quest]:
        quest = self._quests.get(int(quest_id))
        if quest is None or quest.player_id != player_id:
            return None
        return quest

    def list_for_player(self, player_id: str) -> List[Quest]:
        return sorted(
            (quest for quest in self._quests.values() if quest.player_id == player_id),
            key=lambda quest: quest.id,
        )

    def save(self, quest: Quest) -> None:
        with self._guard:
            self._quests[quest.id] = quest
