from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List

from .classifiers import get_gaming_personality
from .dates import (
    WEEKDAY_SHORT_NAMES,
    days_ago,
    format_month_label,
    format_week_label,
    is_weekend,
    iter_days,
    month_bounds,
    resolve_today,
    shift_months,
    week_bounds,
    week_start,
    weeks_ago,
)
from .metrics import (
    calculate_cost_per_hour,
    calculate_days_to_complete,
    get_total_hours,
    summarize_session_moods,
)
from .periods import get_period_stats_for_range, iter_logs_in_range, iter_play_logs
from .records import GameRecord, ensure_collection, game_reference
from .statuses import COMPLETED, IN_PROGRESS, WISHLIST


logger = logging.getLogger(__name__)

MARATHON_SESSION_HOURS = 3.0
POWER_SESSION_HOURS = 1.0
TREND_TOLERANCE = 0.5
MILESTONES = ((100, "Century Club (100h)"), (50, "Half Century (50h)"))


def _trend(diff: float) -> str:
    if abs(diff) < TREND_TOLERANCE:
        return "same"
    return "up" if diff > 0 else "down"


def _share(part: float, total: float) -> float:
    return round(part / total * 100, 2) if total > 0 else 0.0


def _longest_run(flags: Iterable[bool]) -> int:
    longest = current = 0
    for flag in flags:
        current = current + 1 if flag else 0
        longest = max(longest, current)
    return longest


def _hours_through(game: GameRecord, end: date) -> float:
    return float(game.hours or 0.0) + sum(
        log.hours for log in game.play_logs if log.date is not None and log.date <= end
    )


def _gaming_style(unique_games: int) -> str:
    if unique_games == 1:
        return "Monogamous"
    if unique_games <= 3:
        return "Dabbler"
    if unique_games <= 5:
        return "Variety Seeker"
    return "Juggler"


def _week_vibe(
    total_hours: float,
    unique_games: int,
    weekend_percentage: float,
    weekday_percentage: float,
) -> str:
    if total_hours >= 25:
        vibe = "POWER GAMER MODE"
    elif total_hours >= 15:
        vibe = "Solid Gaming Week"
    elif total_hours >= 5:
        vibe = "Quality Gaming"
    elif total_hours > 0:
        vibe = "Light Week"
    else:
        vibe = "Rest Week"

    # Most specific pattern wins over the hours-based vibe.
    if unique_games == 1 and total_hours > 10:
        return "Laser Focused"
    if unique_games >= 6:
        return "Gaming Buffet"
    if weekend_percentage >= 70:
        return "Weekend Legend"
    if weekday_percentage >= 70:
        return "Weekday Warrior"
    return vibe


def get_week_stats_for_offset(
    games: Iterable[GameRecord],
    week_offset: int = 0,
    *,
    today: date | None = None,
) -> Dict[str, Any]:
    """Build the week-in-review for a Monday to Sunday week.

    ``week_offset`` -1 is the current week, 0 the last completed week and
    every further step goes one week back.
    """

    if week_offset < -1:
        raise ValueError("week_offset must be -1 or greater")

    collection = ensure_collection(games)
    today = resolve_today(today)
    monday, sunday = week_bounds(today, week_offset)

    daily: Dict[date, Dict[str, Any]] = {
        day: {"hours": 0.0, "sessions": 0, "games": set(), "game_names": []}
        for day in iter_days(monday, sunday)
    }
    per_game: Dict[str, Dict[str, Any]] = {}
    hours_by_genre: Dict[str, float] = defaultdict(float)
    session_hours: List[float] = []
    longest_session = None
    weekday_hours = weekend_hours = 0.0

    for game, log in iter_logs_in_range(collection, monday, sunday):
        entry = per_game.setdefault(
            game.id, {"game": game, "hours": 0.0, "sessions": 0, "days": set()}
        )
        entry["hours"] += log.hours
        entry["sessions"] += 1
        entry["days"].add(log.date)

        day_entry = daily[log.date]
        day_entry["hours"] += log.hours
        day_entry["sessions"] += 1
        if game.id not in day_entry["games"]:
            day_entry["games"].add(game.id)
            day_entry["game_names"].append(game.name)

        session_hours.append(log.hours)
        if is_weekend(log.date):
            weekend_hours += log.hours
        else:
            weekday_hours += log.hours

        if longest_session is None or log.hours > longest_session["hours"]:
            longest_session = {
                "game": game_reference(game),
                "hours": log.hours,
                "date": log.date.isoformat(),
                "day": log.date.strftime("%A"),
            }

        if game.genre:
            hours_by_genre[game.genre] += log.hours

    total_hours = sum(session_hours)
    total_sessions = len(session_hours)

    daily_hours = []
    rest_days = []
    for index, (day, entry) in enumerate(daily.items()):
        daily_hours.append(
            {
                "day": WEEKDAY_SHORT_NAMES[index],
                "date": day.isoformat(),
                "hours": round(entry["hours"], 2),
                "sessions": entry["sessions"],
                "games": len(entry["games"]),
                "game_names": list(entry["game_names"]),
            }
        )
        if entry["hours"] == 0:
            rest_days.append(WEEKDAY_SHORT_NAMES[index])

    busiest = max(daily_hours, key=lambda entry: entry["hours"])
    busiest_day = (
        {key: busiest[key] for key in ("day", "date", "hours", "sessions")}
        if busiest["hours"] > 0
        else None
    )

    games_played = sorted(
        (
            {
                "game": game_reference(entry["game"]),
                "hours": round(entry["hours"], 2),
                "sessions": entry["sessions"],
                "percentage": _share(entry["hours"], total_hours),
                "days_played": len(entry["days"]),
            }
            for entry in per_game.values()
        ),
        key=lambda item: item["hours"],
        reverse=True,
    )
    unique_games = len(games_played)
    top_game = (
        {key: games_played[0][key] for key in ("game", "hours", "sessions", "percentage")}
        if games_played
        else None
    )

    most_consistent = None
    if games_played:
        candidate = max(games_played, key=lambda item: item["days_played"])
        if candidate["days_played"] > 1:
            most_consistent = {
                "game": candidate["game"],
                "days_played": candidate["days_played"],
            }

    weekday_percentage = _share(weekday_hours, total_hours)
    weekend_percentage = _share(weekend_hours, total_hours)

    genre_entries = sorted(hours_by_genre.items(), key=lambda item: item[1], reverse=True)
    favorite_genre = (
        {
            "genre": genre_entries[0][0],
            "hours": round(genre_entries[0][1], 2),
            "percentage": _share(genre_entries[0][1], total_hours),
        }
        if genre_entries
        else None
    )

    completed_games = []
    new_games_started = []
    milestones = []
    for game in collection:
        if (
            game.status == COMPLETED
            and game.end_date is not None
            and monday <= game.end_date <= sunday
        ):
            completed_games.append(game_reference(game))

        started_now = game.start_date is not None and monday <= game.start_date <= sunday
        first_played = game.first_played()
        if not started_now and game.id in per_game:
            started_now = first_played is not None and first_played >= monday
        if started_now:
            new_games_started.append(game_reference(game))

        if game.id in per_game:
            through_week = _hours_through(game, sunday)
            before_week = through_week - per_game[game.id]["hours"]
            for threshold, label in MILESTONES:
                if through_week >= threshold > before_week:
                    milestones.append({"game": game_reference(game), "milestone": label})
                    break

    previous = get_period_stats_for_range(
        collection, days_ago(monday, 7), days_ago(monday, 1)
    )
    hours_diff = total_hours - previous["total_hours"]

    rolling_hours = []
    for weeks_back in range(1, 5):
        start = weeks_ago(monday, weeks_back)
        stats = get_period_stats_for_range(collection, start, start + timedelta(days=6))
        rolling_hours.append(stats["total_hours"])
    average_weekly_hours = sum(rolling_hours) / len(rolling_hours)

    paid_played = [
        entry
        for entry in per_game.values()
        if not entry["game"].acquired_free and entry["game"].price > 0
    ]
    spent_on_played = sum(entry["game"].price for entry in paid_played)
    best_value_game = None
    if paid_played:
        best = min(paid_played, key=lambda entry: entry["game"].price / entry["hours"])
        best_value_game = {
            "game": game_reference(best["game"]),
            "cost_per_hour": round(best["game"].price / best["hours"], 2),
        }

    days_active = sum(1 for entry in daily_hours if entry["hours"] > 0)
    active_flags = [entry["hours"] > 0 for entry in daily_hours]
    current_streak = 0
    for flag in reversed(active_flags):
        if not flag:
            break
        current_streak += 1

    owned_count = sum(1 for game in collection if game.status != WISHLIST)
    average_rating = (
        sum(entry["game"].rating for entry in per_game.values()) / unique_games
        if unique_games
        else 0.0
    )
    active_days = [entry["day"] for entry in daily_hours if entry["hours"] > 0]

    return {
        "week_start": monday.isoformat(),
        "week_end": sunday.isoformat(),
        "week_label": format_week_label(monday, sunday),
        "total_hours": round(total_hours, 2),
        "total_sessions": total_sessions,
        "unique_games": unique_games,
        "current_streak": current_streak,
        "daily_hours": daily_hours,
        "busiest_day": busiest_day,
        "rest_days": rest_days,
        "games_played": games_played,
        "top_game": top_game,
        "average_session_length": round(total_hours / total_sessions, 2) if total_sessions else 0.0,
        "longest_session": longest_session,
        "marathon_sessions": sum(1 for hours in session_hours if hours >= MARATHON_SESSION_HOURS),
        "power_sessions": sum(
            1 for hours in session_hours if POWER_SESSION_HOURS <= hours < MARATHON_SESSION_HOURS
        ),
        "quick_sessions": sum(1 for hours in session_hours if hours < POWER_SESSION_HOURS),
        "most_consistent_game": most_consistent,
        "weekday_hours": round(weekday_hours, 2),
        "weekend_hours": round(weekend_hours, 2),
        "weekday_percentage": weekday_percentage,
        "weekend_percentage": weekend_percentage,
        "favorite_genre": favorite_genre,
        "genres_played": [genre for genre, _ in genre_entries],
        "genre_diversity_score": len(genre_entries),
        "completed_games": completed_games,
        "new_games_started": new_games_started,
        "milestones_reached": milestones,
        "vs_last_week": {
            "hours_diff": round(hours_diff, 2),
            "games_diff": unique_games - previous["unique_games"],
            "sessions_diff": total_sessions - previous["total_sessions"],
            "trend": _trend(hours_diff),
        },
        "vs_average": {
            "percentage": _share(total_hours, average_weekly_hours),
            "hours_diff": round(total_hours - average_weekly_hours, 2),
        },
        "total_cost_per_hour": (
            round(spent_on_played / total_hours, 2)
            if total_hours > 0 and spent_on_played > 0
            else 0.0
        ),
        "best_value_game": best_value_game,
        "gaming_style": _gaming_style(unique_games),
        "week_vibe": _week_vibe(total_hours, unique_games, weekend_percentage, weekday_percentage),
        "focus_score": round(top_game["percentage"]) if top_game else 0,
        "movie_equivalent": int(total_hours // 2),
        "book_equivalent": int(total_hours // 8),
        "average_enjoyment_rating": round(average_rating, 2),
        "library_percentage_played": _share(unique_games, owned_count),
        "perfect_week": all(active_flags),
        "weekend_warrior": weekend_percentage >= 70,
        "weekday_grind": weekday_percentage >= 70,
        "days_active": days_active,
        "average_hours_per_day": round(total_hours / days_active, 2) if days_active else 0.0,
        "longest_streak": _longest_run(active_flags),
        "earliest_session": active_days[0] if active_days else None,
        "latest_session": active_days[-1] if active_days else None,
    }


def get_last_completed_week_stats(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    return get_week_stats_for_offset(games, 0, today=today)


def _month_personality(
    total_hours: float, unique_games: int, days_active: int, top_share: float
) -> Dict[str, str]:
    if total_hours <= 0:
        return {"label": "Taking a Break", "description": "No sessions logged this month."}
    if top_share >= 70:
        return {
            "label": "One-Game Wonder",
            "description": "One game owned most of your month.",
        }
    if unique_games >= 8:
        return {"label": "Explorer", "description": "You spread your time across a big lineup."}
    if days_active >= 20:
        return {"label": "Daily Devotee", "description": "Gaming was part of almost every day."}
    if total_hours >= 60:
        return {"label": "Power Player", "description": "A heavy month of play."}
    return {"label": "Casual Cruiser", "description": "A relaxed month at your own pace."}


def _month_totals(collection: tuple[GameRecord, ...], start: date, end: date) -> Dict[str, Any]:
    stats = get_period_stats_for_range(collection, start, end)
    spent = sum(
        game.price
        for game in collection
        if game.status != WISHLIST
        and game.date_purchased is not None
        and start <= game.date_purchased <= end
    )
    return {
        "hours": stats["total_hours"],
        "sessions": stats["total_sessions"],
        "games": stats["unique_games"],
        "spent": spent,
    }


def get_month_in_review(
    games: Iterable[GameRecord],
    year: int,
    month: int,
    *,
    today: date | None = None,
) -> Dict[str, Any]:
    """Summarize one calendar month of play, spending and progress."""

    collection = ensure_collection(games)
    start, end = month_bounds(year, month)
    today = resolve_today(today)
    if end > today >= start:
        logger.debug("Month %s-%02d is still in progress", year, month)

    per_game: Dict[str, Dict[str, Any]] = {}
    daily: Dict[date, Dict[str, Any]] = {}
    hours_by_genre: Dict[str, float] = defaultdict(float)
    month_logs = []

    for game, log in iter_logs_in_range(collection, start, end):
        month_logs.append(log)
        entry = per_game.setdefault(game.id, {"game": game, "hours": 0.0, "sessions": 0})
        entry["hours"] += log.hours
        entry["sessions"] += 1
        day_entry = daily.setdefault(log.date, {"hours": 0.0, "games": []})
        day_entry["hours"] += log.hours
        if game.name not in day_entry["games"]:
            day_entry["games"].append(game.name)
        if game.genre:
            hours_by_genre[game.genre] += log.hours

    total_hours = sum(log.hours for log in month_logs)
    total_sessions = len(month_logs)
    days_active = len(daily)

    daily_hours = [
        {"date": day.isoformat(), "hours": round(daily[day]["hours"], 2) if day in daily else 0.0}
        for day in iter_days(start, end)
    ]
    biggest_day = None
    if daily:
        day, entry = max(sorted(daily.items()), key=lambda item: item[1]["hours"])
        biggest_day = {
            "date": day.isoformat(),
            "hours": round(entry["hours"], 2),
            "games": list(entry["games"]),
        }

    games_played = sorted(
        (
            {
                "game": game_reference(entry["game"]),
                "hours": round(entry["hours"], 2),
                "percentage": _share(entry["hours"], total_hours),
                "sessions": entry["sessions"],
            }
            for entry in per_game.values()
        ),
        key=lambda item: item["hours"],
        reverse=True,
    )
    top_game = games_played[0] if games_played else None

    completed_games = [
        game_reference(game)
        for game in collection
        if game.status == COMPLETED and game.end_date is not None and start <= game.end_date <= end
    ]
    new_games_started = [
        game_reference(game)
        for game in collection
        if game.start_date is not None and start <= game.start_date <= end
    ]
    purchased = [
        game
        for game in collection
        if game.status != WISHLIST
        and game.date_purchased is not None
        and start <= game.date_purchased <= end
    ]
    total_spent = sum(game.price for game in purchased)

    best_deal = None
    deal_candidates = [
        (game, get_total_hours(game))
        for game in purchased
        if game.price > 0 and not game.acquired_free
    ]
    deal_candidates = [(game, hours) for game, hours in deal_candidates if hours > 0]
    if deal_candidates:
        game, hours = min(
            deal_candidates, key=lambda pair: calculate_cost_per_hour(pair[0].price, pair[1])
        )
        best_deal = {
            "game": game_reference(game),
            "cost_per_hour": round(calculate_cost_per_hour(game.price, hours), 2),
        }

    best_value_game = None
    value_candidates = [
        entry for entry in per_game.values()
        if entry["game"].price > 0 and not entry["game"].acquired_free
    ]
    if value_candidates:
        best = min(
            value_candidates,
            key=lambda entry: calculate_cost_per_hour(
                entry["game"].price, get_total_hours(entry["game"])
            ),
        )
        best_value_game = {
            "game": game_reference(best["game"]),
            "cost_per_hour": round(
                calculate_cost_per_hour(best["game"].price, get_total_hours(best["game"])), 2
            ),
        }

    discovery_game = None
    discoveries = [
        entry
        for entry in per_game.values()
        if entry["game"].first_played() is not None and entry["game"].first_played() >= start
    ]
    if discoveries:
        found = max(discoveries, key=lambda entry: entry["hours"])
        discovery_game = {
            "game": game_reference(found["game"]),
            "hours": round(found["hours"], 2),
            "sessions": found["sessions"],
        }

    unfinished_games = [
        game_reference(entry["game"])
        for entry in per_game.values()
        if entry["game"].status == IN_PROGRESS
    ]

    genre_breakdown = [
        {"genre": genre, "hours": round(hours, 2), "percentage": _share(hours, total_hours)}
        for genre, hours in sorted(hours_by_genre.items(), key=lambda item: item[1], reverse=True)
    ]

    weekday_hours = sum(log.hours for log in month_logs if not is_weekend(log.date))
    weekend_hours = total_hours - weekday_hours

    weekly_hours = []
    monday = week_start(start)
    while monday <= end:
        sunday = monday + timedelta(days=6)
        hours = sum(log.hours for log in month_logs if monday <= log.date <= sunday)
        weekly_hours.append(
            {
                "week_start": monday.isoformat(),
                "week_label": format_week_label(monday, sunday),
                "hours": round(hours, 2),
            }
        )
        monday = sunday + timedelta(days=1)

    # Index 0 is the previous month; all four feed the rolling average.
    preceding = []
    for months_back in range(1, 5):
        window_start = shift_months(start, -months_back)
        _, window_end = month_bounds(window_start.year, window_start.month)
        preceding.append(_month_totals(collection, window_start, window_end))
    previous = preceding[0]
    hours_diff = total_hours - previous["hours"]
    average_monthly_hours = sum(entry["hours"] for entry in preceding) / len(preceding)

    mood = summarize_session_moods(month_logs)

    return {
        "year": year,
        "month": month,
        "month_label": format_month_label(year, month),
        "total_hours": round(total_hours, 2),
        "total_sessions": total_sessions,
        "unique_games": len(per_game),
        "days_active": days_active,
        "longest_streak": _longest_run(day in daily for day in iter_days(start, end)),
        "daily_hours": daily_hours,
        "weekly_hours": weekly_hours,
        "biggest_day": biggest_day,
        "weekday_hours": round(weekday_hours, 2),
        "weekend_hours": round(weekend_hours, 2),
        "weekday_percentage": _share(weekday_hours, total_hours),
        "weekend_percentage": _share(weekend_hours, total_hours),
        "games_played": games_played,
        "top_game": top_game,
        "completed_games": completed_games,
        "new_games_started": new_games_started,
        "games_purchased": len(purchased),
        "total_spent": round(total_spent, 2),
        "best_deal": best_deal,
        "best_value_game": best_value_game,
        "discovery_game": discovery_game,
        "unfinished_games": unfinished_games,
        "genre_breakdown": genre_breakdown,
        "mood_score": round(mood.score, 2) if mood.score is not None else None,
        "mood": mood.to_dict(),
        "vs_last_month": {
            "hours_diff": round(hours_diff, 2),
            "sessions_diff": total_sessions - previous["sessions"],
            "games_diff": len(per_game) - previous["games"],
            "spending_diff": round(total_spent - previous["spent"], 2),
            "trend": _trend(hours_diff),
        },
        "vs_average": {
            "percentage": _share(total_hours, average_monthly_hours),
            "hours_diff": round(total_hours - average_monthly_hours, 2),
        },
        "personality": _month_personality(
            total_hours,
            len(per_game),
            days_active,
            top_game["percentage"] if top_game else 0.0,
        ),
    }


def _year_totals(collection: tuple[GameRecord, ...], year: int) -> Dict[str, Any]:
    acquired = [
        game
        for game in collection
        if game.status != WISHLIST
        and game.date_purchased is not None
        and game.date_purchased.year == year
    ]
    completed = sum(
        1
        for game in acquired
        if game.status == COMPLETED and game.end_date is not None and game.end_date.year == year
    )
    year_logs = [log for _, log in iter_play_logs(collection) if log.date.year == year]
    return {
        "acquired": acquired,
        "completed": completed,
        "spent": sum(game.price for game in acquired),
        "hours": sum(log.hours for log in year_logs),
        "sessions": len(year_logs),
    }


def get_year_in_review(games: Iterable[GameRecord], year: int) -> Dict[str, Any]:
    """Acquisitions, play and spending for one calendar year.

    ``vs_last_year`` compares against the year before; ``vs_average`` against
    the mean of the four years before.
    """

    collection = ensure_collection(games)
    start, end = date(year, 1, 1), date(year, 12, 31)

    totals = _year_totals(collection, year)
    acquired = totals["acquired"]
    games_completed = totals["completed"]
    total_spent = totals["spent"]

    hours_by_game: Dict[str, float] = defaultdict(float)
    hours_by_genre: Dict[str, float] = defaultdict(float)
    hours_by_month: Dict[str, float] = defaultdict(float)
    total_hours = 0.0
    total_sessions = 0
    weekend_hours = 0.0
    longest_session = None
    for game, log in iter_logs_in_range(collection, start, end):
        total_hours += log.hours
        total_sessions += 1
        if is_weekend(log.date):
            weekend_hours += log.hours
        hours_by_game[game.name] += log.hours
        if game.genre:
            hours_by_genre[game.genre] += log.hours
        hours_by_month[f"{year:04d}-{log.date.month:02d}"] += log.hours
        if longest_session is None or log.hours > longest_session["hours"]:
            longest_session = {"game": game.name, "hours": log.hours}

    spending_by_month: Dict[str, float] = defaultdict(float)
    for game in acquired:
        spending_by_month[f"{year:04d}-{game.date_purchased.month:02d}"] += game.price

    def top_entry(values: Dict[str, float], label: str, amount: str):
        if not values:
            return None
        key, value = max(values.items(), key=lambda item: item[1])
        return {label: key, amount: round(value, 2)}

    previous_genres = {
        game.genre
        for game in collection
        if game.genre and game.date_purchased is not None and game.date_purchased.year < year
    }
    new_genres_tried = sum(
        1 for game in acquired if game.genre and game.genre not in previous_genres
    )

    savings = 0.0
    for game in acquired:
        if game.acquired_free:
            savings += game.original_price or 0.0
        elif game.original_price and game.original_price > game.price:
            savings += game.original_price - game.price

    preceding = [_year_totals(collection, year - years_back) for years_back in range(1, 5)]
    previous = preceding[0]
    hours_diff = total_hours - previous["hours"]
    average_yearly_hours = sum(entry["hours"] for entry in preceding) / len(preceding)
    weekday_hours = total_hours - weekend_hours

    return {
        "year": year,
        "games_acquired": len(acquired),
        "games_completed": games_completed,
        "total_spent": round(total_spent, 2),
        "total_hours": round(total_hours, 2),
        "average_cost_per_hour": round(total_spent / total_hours, 2) if total_hours > 0 else 0.0,
        "top_game": top_entry(hours_by_game, "name", "hours"),
        "top_genre": top_entry(hours_by_genre, "name", "hours"),
        "month_with_most_hours": top_entry(hours_by_month, "month", "hours"),
        "month_with_most_spending": top_entry(spending_by_month, "month", "amount"),
        "total_sessions": total_sessions,
        "new_genres_tried": new_genres_tried,
        "longest_session": longest_session,
        "savings": round(savings, 2),
        "weekday_hours": round(weekday_hours, 2),
        "weekend_hours": round(weekend_hours, 2),
        "weekday_percentage": _share(weekday_hours, total_hours),
        "weekend_percentage": _share(weekend_hours, total_hours),
        "vs_last_year": {
            "hours_diff": round(hours_diff, 2),
            "sessions_diff": total_sessions - previous["sessions"],
            "games_acquired_diff": len(acquired) - len(previous["acquired"]),
            "games_completed_diff": games_completed - previous["completed"],
            "spending_diff": round(total_spent - previous["spent"], 2),
            "trend": _trend(hours_diff),
        },
        "vs_average": {
            "percentage": _share(total_hours, average_yearly_hours),
            "hours_diff": round(total_hours - average_yearly_hours, 2),
        },
    }


def get_yearly_wrapped_data(
    games: Iterable[GameRecord], year: int, *, today: date | None = None
) -> Dict[str, Any]:
    """Story-style recap of one calendar year."""

    collection = ensure_collection(games)
    today = resolve_today(today)
    start, end = date(year, 1, 1), date(year, 12, 31)
    review = get_year_in_review(collection, year)

    per_game: Dict[str, Dict[str, Any]] = {}
    monthly = [0.0] * 12
    hours_by_genre: Dict[str, float] = defaultdict(float)
    longest_session = None
    for game, log in iter_logs_in_range(collection, start, end):
        entry = per_game.setdefault(game.id, {"game": game, "hours": 0.0, "sessions": 0})
        entry["hours"] += log.hours
        entry["sessions"] += 1
        monthly[log.date.month - 1] += log.hours
        if game.genre:
            hours_by_genre[game.genre] += log.hours
        if longest_session is None or log.hours > longest_session["hours"]:
            longest_session = {"name": game.name, "hours": log.hours, "date": log.date.isoformat()}

    total_hours = review["total_hours"]
    has_data = total_hours > 0 or review["games_acquired"] > 0

    ranked = sorted(per_game.values(), key=lambda entry: entry["hours"], reverse=True)
    top_games = [
        {
            "game": game_reference(entry["game"]),
            "hours": round(entry["hours"], 2),
            "sessions": entry["sessions"],
            "percentage": _share(entry["hours"], total_hours),
        }
        for entry in ranked[:10]
    ]

    game_of_the_year = None
    if ranked:
        winner = max(ranked, key=lambda entry: (entry["game"].rating, entry["hours"]))
        game_of_the_year = {
            "game": game_reference(winner["game"]),
            "rating": winner["game"].rating,
            "hours": round(winner["hours"], 2),
        }

    monthly_hours = [
        {"month": date(year, index + 1, 1).strftime("%b"), "hours": round(hours, 2)}
        for index, hours in enumerate(monthly)
    ]
    peak_month = None
    if any(monthly):
        peak_index = max(range(12), key=lambda index: monthly[index])
        peak_month = {
            "label": format_month_label(year, peak_index + 1),
            "hours": round(monthly[peak_index], 2),
        }

    fastest_completion = None
    finished = [
        (game, calculate_days_to_complete(game.start_date, game.end_date))
        for game in collection
        if game.status == COMPLETED and game.end_date is not None and game.end_date.year == year
    ]
    finished = [(game, days) for game, days in finished if days is not None]
    if finished:
        game, days = min(finished, key=lambda pair: pair[1])
        fastest_completion = {"name": game.name, "days": days}

    played_this_year = [entry["game"] for entry in ranked]

    def value_pick(minimum_hours: float, pick):
        pool = [
            (game, get_total_hours(game))
            for game in played_this_year
            if game.price > 0 and not game.acquired_free
        ]
        pool = [(game, hours) for game, hours in pool if hours >= minimum_hours]
        if not pool:
            return None
        game, hours = pick(pool, key=lambda pair: calculate_cost_per_hour(pair[0].price, pair[1]))
        return {"name": game.name, "cost_per_hour": round(calculate_cost_per_hour(game.price, hours), 2)}

    biggest_surprise = None
    surprises = [
        game
        for game in played_this_year
        if game.rating >= 8 and (game.acquired_free or game.price <= 20)
    ]
    if surprises:
        pick = max(surprises, key=lambda game: (game.rating, per_game[game.id]["hours"]))
        if pick.acquired_free or pick.price == 0:
            reason = f"Rated {pick.rating:g}/10 and didn't cost a thing"
        else:
            reason = f"Rated {pick.rating:g}/10 for only ${pick.price:.2f}"
        biggest_surprise = {"name": pick.name, "reason": reason}

    if year == today.year:
        weeks_elapsed = max(1.0, ((today - start).days + 1) / 7)
    else:
        weeks_elapsed = 52.0

    personality = get_gaming_personality(collection)

    return {
        "year": year,
        "has_data": has_data,
        "total_hours": total_hours,
        "total_sessions": review["total_sessions"],
        "total_spent": review["total_spent"],
        "games_acquired": review["games_acquired"],
        "games_completed": review["games_completed"],
        "completion_rate": _share(review["games_completed"], review["games_acquired"]),
        "average_cost_per_hour": review["average_cost_per_hour"],
        "hours_per_week": round(total_hours / weeks_elapsed, 2),
        "top_games": top_games,
        "game_of_the_year": game_of_the_year,
        "genre_breakdown": [
            {"genre": genre, "hours": round(hours, 2), "percentage": _share(hours, total_hours)}
            for genre, hours in sorted(hours_by_genre.items(), key=lambda item: item[1], reverse=True)
        ],
        "monthly_hours": monthly_hours,
        "peak_month": peak_month,
        "longest_session": longest_session,
        "fastest_completion": fastest_completion,
        "best_value": value_pick(5, min),
        "worst_value": value_pick(2, max),
        "biggest_surprise": biggest_surprise,
        "personality_type": personality["type"],
    }
