from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from herobook.domain.models.quest import Quest, QuestDraft, QuestRequirement, QuestStatus
from herobook.domain.repositories import QuestRepository
from herobook.infrastructure.db.connection import build_session_factory


_ID_COLUMN = {
    "sqlite": "quest_id INTEGER PRIMARY KEY AUTOINCREMENT",
    "mysql": "quest_id INTEGER PRIMARY KEY AUTO_INCREMENT",
}


def _row_to_quest(row) -> Quest:
    requirement = None
    if row.requirement:
        try:
            requirement = QuestRequirement(row.requirement)
        except ValueError:
            requirement = None
    return Quest(
        id=int(row.quest_id),
        player_id=row.player_id,
        title=row.title,
        description=row.description or "",
        status=QuestStatus(row.status),
        requirement=requirement,
        amount=int(row.amount if row.amount is not None else 1),
        created_at=int(row.created_at or 0),
    )


class SqlQuestRepository(QuestRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        id_column = _ID_COLUMN.get(self._engine.dialect.name, _ID_COLUMN["sqlite"])
        with self._session_factory.begin() as session:
            session.execute(
                text(
                    f"""
                    CREATE TABLE IF NOT EXISTS quest (
                        {id_column},
                        player_id VARCHAR(64) NOT NULL,
                        title VARCHAR(120) NOT NULL,
                        description TEXT,
                        status VARCHAR(16) NOT NULL DEFAULT 'open',
                        requirement VARCHAR(32),
                        amount INTEGER NOT NULL DEFAULT 1,
                        created_at BIGINT NOT NULL
                    )
                    """
                )
            )

    def add(self, player_id: str, draft: QuestDraft, *, created_at: int) -> Quest:
        with self._session_factory.begin() as session:
            result = session.execute(
                text(
                    """
                    INSERT INTO quest (player_id, title, description, status, requirement, amount, created_at)
                    VALUES (:player_id, :title, :description, :status, :requirement, :amount, :created_at)
                    """
                ),
                {
                    "player_id": player_id,
                    "title": draft.title,
                    "description": draft.description,
                    "status": QuestStatus.OPEN.value,
                    "requirement": draft.requirement.value if draft.requirement else None,
                    "amount": int(draft.amount),
                    "created_at": int(created_at),
                },
            )
            quest_id = int(result.lastrowid)
        return Quest(
            id=quest_id,
            player_id=player_id,
            title=draft.title,
            description=draft.description,
            status=QuestStatus.OPEN,
            requirement=draft.requirement,
            amount=int(draft.amount),
            created_at=int(created_at),
        )

    def get(self, player_id: str, quest_id: int) -> Optional[Quest]:
        with self._session_factory() as session:
            row = session.execute(
                text(
                    """
                    SELECT quest_id, player_id, title, description, status, requirement, amount, created_at
                    FROM quest
                    WHERE quest_id = :quest_id AND player_id = :player_id
                    """
                ),
                {"quest_id": int(quest_id), "player_id": player_id},
            ).first()
        return _row_to_quest(row) if row else None

    def list_for_player(self, player_id: str) -> List[Quest]:
        with self._session_factory() as session:
            rows = session.execute(
                text(
                    """
                    SELECT quest_id, player_id, title, description, status, requirement, amount, created_at
                    FROM quest
                    WHERE player_id = :player_id
                    ORDER BY quest_id
                    """
                ),
                {"player_id": player_id},
            ).all()
        return [_row_to_quest(row) for row in rows]

    def save(self, quest: Quest) -> None:
        with self._session_factory.begin() as session:
            session.execute(
                text("UPDATE quest SET status = :status WHERE quest_id = :quest_id AND player_id = :player_id"),
                {"status": quest.status.value, "quest_id": int(quest.id), "player_id": quest.player_id},
            )
