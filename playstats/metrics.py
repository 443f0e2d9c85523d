from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from .dates import days_between, week_start
from .records import GameRecord, PlayLogRecord


BASELINE_COST = 3.5
ROI_CALIBRATION = 4.67
MOOD_TREND_POINTS = 10.0

# Convex weight per whole rating point; a 10 counts double a 9, a 9 counts
# one and a half times an 8.
ROI_RATING_WEIGHTS: Mapping[int, float] = {
    0: 0.0,
    1: 0.1,
    2: 0.2,
    3: 0.3,
    4: 0.5,
    5: 0.75,
    6: 1.0,
    7: 1.5,
    8: 2.5,
    9: 3.75,
    10: 7.5,
}

DEFAULT_MOOD_WEIGHTS: Mapping[str, float] = {
    "loved": 100.0,
    "great": 100.0,
    "good": 75.0,
    "okay": 50.0,
    "neutral": 50.0,
    "meh": 25.0,
    "bored": 25.0,
    "frustrated": 0.0,
    "bad": 0.0,
}


@dataclass(frozen=True)
class GameMetrics:
    """Derived per-game value metrics."""

    cost_per_hour: float
    blend_score: float
    normalized_cost: float
    value_rating: str
    roi: float
    days_to_complete: int | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MoodSummary:
    """How a set of play sessions felt, overall and week by week."""

    score: float | None
    total_hours: float
    rated_hours: float
    dominant_mood: str | None
    weekly_arc: tuple[tuple[date, float], ...] = ()

    @property
    def coverage(self) -> float:
        """Share of played hours that carry a mood."""

        return round(self.rated_hours / self.total_hours * 100, 2) if self.total_hours else 0.0

    @property
    def trend(self) -> str:
        if len(self.weekly_arc) < 2:
            return "steady"
        change = self.weekly_arc[-1][1] - self.weekly_arc[0][1]
        if change >= MOOD_TREND_POINTS:
            return "brightening"
        if change <= -MOOD_TREND_POINTS:
            return "souring"
        return "steady"

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": round(self.score, 2) if self.score is not None else None,
            "dominant_mood": self.dominant_mood,
            "coverage": self.coverage,
            "trend": self.trend,
            "weekly_arc": [
                {"week_start": monday.isoformat(), "score": round(score, 2)}
                for monday, score in self.weekly_arc
            ],
        }


def get_total_hours(game: GameRecord) -> float:
    """Baseline hours plus every logged session; the two are additive."""

    return float(game.hours or 0.0) + game.logged_hours


def calculate_cost_per_hour(price: float, hours: float) -> float:
    return price / hours if hours > 0 else 0.0


def calculate_blend_score(rating: float, cost_per_hour: float) -> float:
    normalized_cost = min(cost_per_hour / BASELINE_COST, 1.0)
    return (rating * 10) + (10 - normalized_cost * 10)


def get_value_rating(cost_per_hour: float) -> str:
    if cost_per_hour == 0:
        return "Excellent"
    if cost_per_hour <= 1:
        return "Excellent"
    if cost_per_hour <= 3:
        return "Good"
    if cost_per_hour <= 5:
        return "Fair"
    return "Poor"


def rating_weight(rating: float) -> float:
    """Look up the ROI weight for a rating, clamping out-of-table values."""

    try:
        rounded = int(round(float(rating)))
    except (TypeError, ValueError):
        return ROI_RATING_WEIGHTS[0]
    rounded = max(min(rounded, 10), 0)
    return ROI_RATING_WEIGHTS[rounded]


def calculate_roi(rating: float, hours: float, price: float) -> float:
    weight = rating_weight(rating)
    if price <= 0:
        return round(weight * hours, 1)
    return round((weight * hours * ROI_CALIBRATION) / price, 1)


def get_roi_rating(roi: float) -> str:
    if roi >= 5:
        return "Excellent"
    if roi >= 1.5:
        return "Good"
    if roi >= 0.5:
        return "Fair"
    return "Poor"


def calculate_days_to_complete(
    start_date: date | None, end_date: date | None
) -> int | None:
    return days_between(start_date, end_date)


def calculate_metrics(game: GameRecord) -> GameMetrics:
    total_hours = get_total_hours(game)
    price = float(game.price or 0.0)
    cost_per_hour = calculate_cost_per_hour(price, total_hours)
    return GameMetrics(
        cost_per_hour=round(cost_per_hour, 2),
        blend_score=round(calculate_blend_score(game.rating, cost_per_hour), 2),
        normalized_cost=round(cost_per_hour / BASELINE_COST, 4),
        value_rating=get_value_rating(cost_per_hour),
        roi=calculate_roi(game.rating, total_hours, price),
        days_to_complete=calculate_days_to_complete(game.start_date, game.end_date),
    )


def summarize_session_moods(
    play_logs: Iterable[PlayLogRecord],
    *,
    mood_weights: Mapping[str, float] | None = None,
) -> MoodSummary:
    """Hours-weighted mood over ``play_logs`` plus a Monday-start weekly arc.

    Sessions without a recognised mood still count towards ``total_hours``.
    Undated sessions feed the overall score but not the arc.
    """

    weights = dict(DEFAULT_MOOD_WEIGHTS)
    if mood_weights:
        weights.update({k.lower(): float(v) for k, v in mood_weights.items()})

    total_hours = 0.0
    hours_by_mood: dict[str, float] = defaultdict(float)
    weeks: dict[date, list[float]] = defaultdict(lambda: [0.0, 0.0])

    for log in play_logs:
        if log.hours <= 0:
            continue
        total_hours += log.hours
        mood = (log.mood or "").strip().lower()
        if mood not in weights:
            continue
        hours_by_mood[mood] += log.hours
        if log.date is not None:
            bucket = weeks[week_start(log.date)]
            bucket[0] += weights[mood] * log.hours
            bucket[1] += log.hours

    rated_hours = sum(hours_by_mood.values())
    score = None
    if rated_hours:
        score = sum(weights[mood] * hours for mood, hours in hours_by_mood.items()) / rated_hours

    return MoodSummary(
        score=score,
        total_hours=total_hours,
        rated_hours=rated_hours,
        dominant_mood=max(hours_by_mood, key=hours_by_mood.get) if hours_by_mood else None,
        weekly_arc=tuple(
            (monday, weighted / hours) for monday, (weighted, hours) in sorted(weeks.items())
        ),
    )
