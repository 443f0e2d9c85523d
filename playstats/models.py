from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import validates

from . import db
from .records import GameRecord, PlayLogRecord
from .statuses import DEFAULT_STATUS, validate_status


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_STATUS)
    platform = db.Column(db.String(64), nullable=True)
    genre = db.Column(db.String(64), nullable=True)
    franchise = db.Column(db.String(128), nullable=True)
    thumbnail = db.Column(db.String(512), nullable=True)
    price = db.Column(db.Float, nullable=False, default=0.0)
    original_price = db.Column(db.Float, nullable=True)
    acquired_free = db.Column(db.Boolean, nullable=False, default=False)
    purchase_source = db.Column(db.String(64), nullable=True)
    subscription_source = db.Column(db.String(64), nullable=True)
    date_purchased = db.Column(db.Date, nullable=True)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    hours = db.Column(db.Float, nullable=False, default=0.0)
    rating = db.Column(db.Float, nullable=False, default=0.0)
    review = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    play_logs = db.relationship(
        "PlayLog",
        backref="game",
        order_by="PlayLog.date",
        cascade="all, delete-orphan",
    )

    @validates("status")
    def _validate_status(self, key, value):
        return validate_status(value)

    def to_record(self) -> GameRecord:
        return GameRecord(
            id=str(self.id),
            name=self.name,
            status=self.status or DEFAULT_STATUS,
            price=float(self.price or 0.0),
            hours=float(self.hours or 0.0),
            rating=float(self.rating or 0.0),
            user_id=self.user_id,
            platform=self.platform,
            genre=self.genre,
            franchise=self.franchise,
            thumbnail=self.thumbnail,
            original_price=self.original_price,
            acquired_free=bool(self.acquired_free),
            purchase_source=self.purchase_source,
            subscription_source=self.subscription_source,
            date_purchased=self.date_purchased,
            start_date=self.start_date,
            end_date=self.end_date,
            created_at=self.created_at.date() if self.created_at else None,
            updated_at=self.updated_at.date() if self.updated_at else None,
            review=self.review,
            notes=self.notes,
            play_logs=tuple(log.to_record() for log in self.play_logs),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "platform": self.platform,
            "genre": self.genre,
            "franchise": self.franchise,
            "thumbnail": self.thumbnail,
            "price": self.price,
            "original_price": self.original_price,
            "acquired_free": bool(self.acquired_free),
            "purchase_source": self.purchase_source,
            "subscription_source": self.subscription_source,
            "date_purchased": self.date_purchased.isoformat() if self.date_purchased else None,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "hours": self.hours,
            "rating": self.rating,
            "review": self.review,
            "play_logs": [log.to_dict() for log in self.play_logs],
        }


class PlayLog(db.Model):
    __tablename__ = "play_logs"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    hours = db.Column(db.Float, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    mood = db.Column(db.String(32), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_record(self) -> PlayLogRecord:
        return PlayLogRecord(
            id=str(self.id),
            date=self.date,
            hours=float(self.hours or 0.0),
            notes=self.notes,
            mood=self.mood,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "game_id": self.game_id,
            "date": self.date.isoformat(),
            "hours": self.hours,
            "notes": self.notes,
            "mood": self.mood,
        }
