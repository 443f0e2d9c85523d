from __future__ import annotations

import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from .dates import days_ago, month_key, resolve_today, shift_months
from .records import GameRecord, PlayLogRecord, ensure_collection, game_reference
from .statuses import WISHLIST


MOMENTUM_WINDOWS = 6
MOMENTUM_THRESHOLD = 0.2


def iter_play_logs(
    games: Iterable[GameRecord],
) -> Iterator[Tuple[GameRecord, PlayLogRecord]]:
    """Yield every dated session as ``(game, log)``; undated sessions are skipped."""

    for game in games:
        for log in game.play_logs:
            if log.date is not None:
                yield game, log


def iter_logs_in_range(
    games: Iterable[GameRecord], start: date, end: date
) -> Iterator[Tuple[GameRecord, PlayLogRecord]]:
    for game, log in iter_play_logs(games):
        if start <= log.date <= end:
            yield game, log


def get_all_play_logs(
    games: Iterable[GameRecord],
) -> List[Tuple[GameRecord, PlayLogRecord]]:
    """Every dated session across the library, newest first."""

    logs = list(iter_play_logs(ensure_collection(games)))
    logs.sort(key=lambda pair: pair[1].date, reverse=True)
    return logs


def get_hours_by_month(games: Iterable[GameRecord]) -> Dict[str, float]:
    hours: Dict[str, float] = defaultdict(float)
    for _, log in iter_play_logs(ensure_collection(games)):
        hours[month_key(log.date)] += log.hours
    return {key: round(hours[key], 2) for key in sorted(hours)}


def get_monthly_trends(
    games: Iterable[GameRecord],
    month_count: int = 12,
    *,
    today: date | None = None,
) -> List[Dict[str, Any]]:
    """Hours played, money spent and games bought for the trailing months."""

    if month_count <= 0:
        raise ValueError("month_count must be positive")
    collection = ensure_collection(games)
    today = resolve_today(today)
    anchor = today.replace(day=1)

    hours_by_month = get_hours_by_month(collection)
    spent: Dict[str, float] = defaultdict(float)
    bought: Dict[str, int] = defaultdict(int)
    for game in collection:
        if game.date_purchased and game.status != WISHLIST:
            key = month_key(game.date_purchased)
            spent[key] += game.price
            bought[key] += 1

    trends = []
    for offset in range(month_count - 1, -1, -1):
        key = month_key(shift_months(anchor, -offset))
        trends.append(
            {
                "month": key,
                "hours": hours_by_month.get(key, 0.0),
                "spent": round(spent.get(key, 0.0), 2),
                "games": bought.get(key, 0),
            }
        )
    return trends


def _aggregate_period(
    games: Iterable[GameRecord], start: date, end: date
) -> Dict[str, Any]:
    per_game: Dict[str, Dict[str, Any]] = {}
    total_hours = 0.0
    total_sessions = 0

    for game, log in iter_logs_in_range(games, start, end):
        entry = per_game.setdefault(game.id, {"game": game, "hours": 0.0, "sessions": 0})
        entry["hours"] += log.hours
        entry["sessions"] += 1
        total_hours += log.hours
        total_sessions += 1

    most_played = None
    if per_game:
        top = max(per_game.values(), key=lambda entry: entry["hours"])
        most_played = {
            "id": top["game"].id,
            "name": top["game"].name,
            "hours": round(top["hours"], 2),
            "thumbnail": top["game"].thumbnail,
        }

    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "games_played": [game_reference(entry["game"]) for entry in per_game.values()],
        "total_hours": round(total_hours, 2),
        "total_sessions": total_sessions,
        "most_played_game": most_played,
        "average_session_length": (
            round(total_hours / total_sessions, 2) if total_sessions else 0.0
        ),
        "unique_games": len(per_game),
    }


def get_period_stats(
    games: Iterable[GameRecord], days: int, *, today: date | None = None
) -> Dict[str, Any]:
    """Stats for the trailing ``days`` days, ending with ``today``."""

    if days <= 0:
        raise ValueError("days must be a positive number")
    today = resolve_today(today)
    return _aggregate_period(ensure_collection(games), days_ago(today, days - 1), today)


def get_period_stats_for_range(
    games: Iterable[GameRecord], start: date, end: date
) -> Dict[str, Any]:
    """Stats for the inclusive calendar range ``start``..``end``."""

    if start > end:
        raise ValueError("start must not be after end")
    return _aggregate_period(ensure_collection(games), start, end)


def get_last_week_stats(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """The seven days that precede the trailing week."""

    end = days_ago(resolve_today(today), 7)
    return get_period_stats_for_range(games, end - timedelta(days=6), end)


def get_last_month_stats(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """The thirty days that precede the trailing thirty days."""

    end = days_ago(resolve_today(today), 30)
    return get_period_stats_for_range(games, end - timedelta(days=29), end)


def get_gaming_velocity(
    games: Iterable[GameRecord], days: int, *, today: date | None = None
) -> float:
    """Average hours per day over the trailing window."""

    stats = get_period_stats(games, days, today=today)
    return round(stats["total_hours"] / days, 2)


def get_best_gaming_month(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    hours_by_month = get_hours_by_month(games)
    if not hours_by_month:
        return None
    month, hours = max(hours_by_month.items(), key=lambda item: item[1])
    return {"month": month, "hours": hours}


def get_longest_session(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    """The single longest dated session; the earliest-listed wins ties."""

    longest = None
    for game, log in iter_play_logs(ensure_collection(games)):
        if longest is None or log.hours > longest[1].hours:
            longest = (game, log)
    if longest is None:
        return None
    game, log = longest
    return {"game": game_reference(game), "hours": log.hours, "date": log.date.isoformat()}


def _unique_play_dates(games: Iterable[GameRecord]) -> List[date]:
    return sorted({log.date for _, log in iter_play_logs(games) if log.hours > 0})


def get_current_gaming_streak(
    games: Iterable[GameRecord],
    *,
    today: date | None = None,
    include_yesterday: bool = False,
) -> int:
    """Consecutive play days ending today.

    With ``include_yesterday`` a run that ended yesterday still counts, so a
    streak is not reported as broken before today's session is logged.
    """

    today = resolve_today(today)
    played = set(_unique_play_dates(ensure_collection(games)))
    anchor = today
    if anchor not in played and include_yesterday:
        anchor = today - timedelta(days=1)

    streak = 0
    while anchor - timedelta(days=streak) in played:
        streak += 1
    return streak


def get_longest_gaming_streak(games: Iterable[GameRecord]) -> int:
    dates = _unique_play_dates(ensure_collection(games))
    if not dates:
        return 0

    longest = current = 1
    for previous, current_date in zip(dates, dates[1:]):
        if (current_date - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def get_available_weeks_count(
    games: Iterable[GameRecord], *, today: date | None = None
) -> int:
    """Weeks between the oldest logged session and today, rounded up."""

    dates = _unique_play_dates(ensure_collection(games))
    if not dates:
        return 0
    elapsed = (resolve_today(today) - dates[0]).days
    return max(0, math.ceil(elapsed / 7))


def get_games_played_in_time_range(
    games: Iterable[GameRecord], start: date, end: date
) -> List[GameRecord]:
    return [
        game
        for game in ensure_collection(games)
        if any(log.date is not None and start <= log.date <= end for log in game.play_logs)
    ]


def _classify_change(current: float, previous: float) -> str:
    if previous <= 0:
        return "accelerating" if current > 0 else "steady"
    change = (current - previous) / previous
    if change > MOMENTUM_THRESHOLD:
        return "accelerating"
    if change < -MOMENTUM_THRESHOLD:
        return "decelerating"
    return "steady"


_TREND_DESCRIPTIONS = {
    "accelerating": "Your gaming is picking up speed compared to earlier weeks.",
    "decelerating": "You've been playing less than you were a few weeks ago.",
    "steady": "Your gaming pace is holding steady.",
}


def _game_momentum_description(trend: str, current: float, previous: float) -> str:
    if trend == "new":
        return f"Picked up this week with {current:.1f}h"
    if previous > 0 and current == 0:
        return "Not touched this week"
    if trend == "steady":
        return f"Steady at {current:.1f}h this week"
    change = round(abs(current - previous) / previous * 100)
    direction = "Up" if trend == "accelerating" else "Down"
    return f"{direction} {change}% from last week"


def get_momentum_data(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """Compare the last three of six rolling weeks against the three before.

    Each week is a seven-day window ending on ``today`` or on the day before
    the next window. Per-game momentum compares the latest window with the one
    before it.
    """

    collection = ensure_collection(games)
    today = resolve_today(today)

    windows = []
    for index in range(MOMENTUM_WINDOWS - 1, -1, -1):
        end = today - timedelta(days=7 * index)
        windows.append((end - timedelta(days=6), end))

    weekly_hours = []
    for start, end in windows:
        hours = sum(log.hours for _, log in iter_logs_in_range(collection, start, end))
        weekly_hours.append(
            {
                "week_label": f"{start.strftime('%b')} {start.day}",
                "start": start.isoformat(),
                "end": end.isoformat(),
                "hours": round(hours, 2),
            }
        )

    half = MOMENTUM_WINDOWS // 2
    earlier = sum(week["hours"] for week in weekly_hours[:half])
    recent = sum(week["hours"] for week in weekly_hours[half:])
    trend = _classify_change(recent, earlier)

    current_start, current_end = windows[-1]
    previous_start, previous_end = windows[-2]
    game_momentum = []
    for game in collection:
        current = sum(
            log.hours
            for log in game.play_logs
            if log.date is not None and current_start <= log.date <= current_end
        )
        previous = sum(
            log.hours
            for log in game.play_logs
            if log.date is not None and previous_start <= log.date <= previous_end
        )
        if current <= 0 and previous <= 0:
            continue
        if previous <= 0:
            game_trend = "new"
        else:
            game_trend = _classify_change(current, previous)
        game_momentum.append(
            {
                "game": game_reference(game),
                "trend": game_trend,
                "current_hours": round(current, 2),
                "previous_hours": round(previous, 2),
                "description": _game_momentum_description(game_trend, current, previous),
            }
        )

    game_momentum.sort(key=lambda item: (-item["current_hours"], item["game"]["name"]))

    return {
        "weekly_hours": weekly_hours,
        "trend": trend,
        "trend_description": _TREND_DESCRIPTIONS[trend],
        "game_momentum": game_momentum,
    }
