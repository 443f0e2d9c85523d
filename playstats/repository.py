from __future__ import annotations

import logging
from typing import Iterable, Mapping, Any

from sqlalchemy.orm import selectinload

from .models import Game
from .records import GameRecord


logger = logging.getLogger(__name__)


class SQLAlchemyGameRepository:
    """Read-only snapshot access to the games table."""

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id

    def get_all(self) -> tuple[GameRecord, ...]:
        query = Game.query.options(selectinload(Game.play_logs)).order_by(Game.id)
        if self.user_id is not None:
            query = query.filter(Game.user_id == self.user_id)
        records = tuple(game.to_record() for game in query.all())
        logger.info("Loaded %d games into analytics snapshot", len(records))
        return records

    def get(self, game_id: str) -> GameRecord | None:
        try:
            key = int(game_id)
        except (TypeError, ValueError):
            return None
        game = Game.query.options(selectinload(Game.play_logs)).filter_by(id=key).first()
        if game is None or (self.user_id is not None and game.user_id != self.user_id):
            return None
        return game.to_record()


class InMemoryGameRepository:
    """Repository over records already held in memory."""

    def __init__(self, games: Iterable[GameRecord] = ()) -> None:
        self._games = tuple(games)

    @classmethod
    def from_mappings(cls, rows: Iterable[Mapping[str, Any]]) -> "InMemoryGameRepository":
        return cls(GameRecord.from_mapping(row) for row in rows)

    def get_all(self) -> tuple[GameRecord, ...]:
        return self._games

    def get(self, game_id: str) -> GameRecord | None:
        for game in self._games:
            if game.id == str(game_id):
                return game
        return None
