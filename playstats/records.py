from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from .dates import parse_local_date
from .statuses import WISHLIST, is_owned, normalize_status_value


def _coerce_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class PlayLogRecord:
    """A single recorded play session."""

    id: str
    date: date | None
    hours: float
    notes: str | None = None
    mood: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PlayLogRecord":
        return cls(
            id=str(_pick(data, "id") or ""),
            date=parse_local_date(_pick(data, "date", "session_date")),
            hours=_coerce_float(_pick(data, "hours")),
            notes=_optional_text(_pick(data, "notes")),
            mood=_optional_text(_pick(data, "mood")),
        )


@dataclass(frozen=True)
class GameRecord:
    """Immutable snapshot of one tracked game used by every analytics pass."""

    id: str
    name: str
    status: str
    price: float = 0.0
    hours: float = 0.0
    rating: float = 0.0
    user_id: str | None = None
    platform: str | None = None
    genre: str | None = None
    franchise: str | None = None
    thumbnail: str | None = None
    original_price: float | None = None
    acquired_free: bool = False
    purchase_source: str | None = None
    subscription_source: str | None = None
    date_purchased: date | None = None
    start_date: date | None = None
    end_date: date | None = None
    created_at: date | None = None
    updated_at: date | None = None
    review: str | None = None
    notes: str | None = None
    play_logs: tuple[PlayLogRecord, ...] = field(default_factory=tuple)

    @property
    def is_wishlist(self) -> bool:
        return self.status == WISHLIST

    @property
    def is_owned(self) -> bool:
        return is_owned(self.status)

    @property
    def logged_hours(self) -> float:
        return sum(log.hours for log in self.play_logs)

    def last_played(self) -> date | None:
        dated = [log.date for log in self.play_logs if log.date is not None]
        return max(dated) if dated else None

    def first_played(self) -> date | None:
        dated = [log.date for log in self.play_logs if log.date is not None]
        return min(dated) if dated else None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GameRecord":
        """Build a record from a plain mapping.

        Both the camelCase keys of the JSON export (``datePurchased``,
        ``playLogs``) and snake_case keys are accepted.
        """

        logs_raw: Iterable[Mapping[str, Any]] = (
            _pick(data, "play_logs", "playLogs") or ()
        )
        return cls(
            id=str(_pick(data, "id") or ""),
            name=str(_pick(data, "name", "title") or "").strip(),
            status=normalize_status_value(_pick(data, "status")),
            price=_coerce_float(_pick(data, "price")),
            hours=_coerce_float(_pick(data, "hours")),
            rating=_coerce_float(_pick(data, "rating")),
            user_id=_optional_text(_pick(data, "user_id", "userId")),
            platform=_optional_text(_pick(data, "platform")),
            genre=_optional_text(_pick(data, "genre")),
            franchise=_optional_text(_pick(data, "franchise")),
            thumbnail=_optional_text(_pick(data, "thumbnail")),
            original_price=_optional_float(
                _pick(data, "original_price", "originalPrice")
            ),
            acquired_free=bool(_pick(data, "acquired_free", "acquiredFree")),
            purchase_source=_optional_text(
                _pick(data, "purchase_source", "purchaseSource")
            ),
            subscription_source=_optional_text(
                _pick(data, "subscription_source", "subscriptionSource")
            ),
            date_purchased=parse_local_date(
                _pick(data, "date_purchased", "datePurchased")
            ),
            start_date=parse_local_date(_pick(data, "start_date", "startDate")),
            end_date=parse_local_date(_pick(data, "end_date", "endDate")),
            created_at=parse_local_date(_pick(data, "created_at", "createdAt")),
            updated_at=parse_local_date(_pick(data, "updated_at", "updatedAt")),
            review=_optional_text(_pick(data, "review")),
            notes=_optional_text(_pick(data, "notes")),
            play_logs=tuple(PlayLogRecord.from_mapping(log) for log in logs_raw),
        )


def game_reference(game: GameRecord) -> dict[str, Any]:
    """Compact identity payload used when a result points at a game."""

    return {
        "id": game.id,
        "name": game.name,
        "thumbnail": game.thumbnail,
        "genre": game.genre,
        "platform": game.platform,
        "status": game.status,
    }


def ensure_collection(games: Iterable[GameRecord]) -> tuple[GameRecord, ...]:
    """Materialize the collection, rejecting inputs that are not collections."""

    if games is None or isinstance(games, (str, bytes, Mapping, GameRecord)):
        raise ValueError("Expected an iterable of GameRecord values")
    return tuple(games)
