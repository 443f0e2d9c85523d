from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable

from .dates import resolve_today, shift_months
from .metrics import get_total_hours
from .records import GameRecord, ensure_collection
from .statuses import COMPLETED, IN_PROGRESS, NOT_STARTED, WISHLIST
from .summary import get_spending_by_month, get_spending_trend


TRAILING_MONTHS = 6
DAYS_PER_MONTH = 30
LOW_PROGRESS_HOURS = 5.0


def _recent_completions(games: Iterable[GameRecord], since: date, today: date) -> int:
    return sum(
        1
        for game in games
        if game.status == COMPLETED
        and game.end_date is not None
        and since <= game.end_date <= today
    )


def get_predicted_backlog_clearance(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """Project when the Not Started pile empties at the recent completion pace."""

    collection = ensure_collection(games)
    today = resolve_today(today)
    not_started = [game for game in collection if game.status == NOT_STARTED]
    if not not_started:
        return {"date": today.isoformat(), "days_remaining": 0, "never_at": None}

    completions = _recent_completions(collection, shift_months(today, -TRAILING_MONTHS), today)
    if completions == 0:
        return {
            "date": None,
            "days_remaining": math.inf,
            "never_at": f"current rate (0 completions in {TRAILING_MONTHS} months)",
        }

    per_month = completions / TRAILING_MONTHS
    days_remaining = math.ceil(len(not_started) / per_month * DAYS_PER_MONTH)
    return {
        "date": (today + timedelta(days=days_remaining)).isoformat(),
        "days_remaining": days_remaining,
        "never_at": None,
    }


def is_backlog_game(game: GameRecord) -> bool:
    """Not Started games plus In Progress games with little time in them."""

    if game.status == NOT_STARTED:
        return True
    return game.status == IN_PROGRESS and get_total_hours(game) < LOW_PROGRESS_HOURS


def get_backlog_doomsday_data(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """Linear projection of the backlog clearance date.

    The monthly pace is completions minus acquisitions over the trailing six
    months. When that net pace is not positive the gross completion pace is
    used instead. Without any completions the projection is unbounded and
    ``days_remaining`` is ``math.inf``.
    """

    collection = ensure_collection(games)
    today = resolve_today(today)
    since = shift_months(today, -TRAILING_MONTHS)

    backlog = [game for game in collection if is_backlog_game(game)]
    completions = _recent_completions(collection, since, today)
    acquisitions = sum(
        1
        for game in collection
        if game.status != WISHLIST
        and game.date_purchased is not None
        and since <= game.date_purchased <= today
    )
    completion_rate = completions / TRAILING_MONTHS
    acquisition_rate = acquisitions / TRAILING_MONTHS
    net_rate = completion_rate - acquisition_rate

    payload: Dict[str, Any] = {
        "backlog_size": len(backlog),
        "completions_per_month": round(completion_rate, 2),
        "acquisitions_per_month": round(acquisition_rate, 2),
        "net_rate": round(net_rate, 2),
        "using_gross_rate": False,
        "never_clears": False,
    }

    if not backlog:
        payload.update(
            {
                "days_remaining": 0,
                "clearance_date": today.isoformat(),
                "message": "Your backlog is clear. Time to go shopping?",
            }
        )
        return payload

    if completions == 0:
        payload.update(
            {
                "days_remaining": math.inf,
                "clearance_date": None,
                "never_clears": True,
                "message": (
                    f"No completions in the last {TRAILING_MONTHS} months. "
                    "At this rate your backlog will never clear."
                ),
            }
        )
        return payload

    rate = net_rate
    if rate <= 0:
        rate = completion_rate
        payload["using_gross_rate"] = True

    days_remaining = math.ceil(len(backlog) / rate * DAYS_PER_MONTH)
    clearance = today + timedelta(days=days_remaining)
    if payload["using_gross_rate"]:
        message = (
            "You're buying games as fast as you finish them. If you stopped buying "
            f"today, you'd clear the backlog by {clearance.strftime('%B %Y')}."
        )
    else:
        message = f"At your current pace you'll clear the backlog by {clearance.strftime('%B %Y')}."

    payload.update(
        {
            "days_remaining": days_remaining,
            "clearance_date": clearance.isoformat(),
            "message": message,
        }
    )
    return payload


def get_spending_forecast(
    games: Iterable[GameRecord],
    *,
    today: date | None = None,
    budget: float | None = None,
) -> Dict[str, Any]:
    """Project this year's spending from the year-to-date monthly average."""

    if budget is not None and budget < 0:
        raise ValueError("budget must not be negative")

    collection = ensure_collection(games)
    today = resolve_today(today)
    year_to_date = sum(
        game.price
        for game in collection
        if game.status != WISHLIST
        and game.date_purchased is not None
        and game.date_purchased.year == today.year
        and game.date_purchased <= today
    )
    months_elapsed = today.month
    monthly_average = year_to_date / months_elapsed
    projected = monthly_average * 12

    payload: Dict[str, Any] = {
        "year": today.year,
        "year_to_date": round(year_to_date, 2),
        "months_elapsed": months_elapsed,
        "monthly_average": round(monthly_average, 2),
        "projected_annual": round(projected, 2),
        "spending_trend": get_spending_trend(get_spending_by_month(collection)),
        "budget": None,
    }

    if budget is not None:
        remaining = budget - year_to_date
        payload["budget"] = {
            "amount": round(budget, 2),
            "remaining": round(remaining, 2),
            "projected_difference": round(budget - projected, 2),
            "on_track": projected <= budget,
            "percent_used": round(year_to_date / budget * 100, 2) if budget > 0 else None,
        }

    return payload
