from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List

from .dates import days_between, month_key, resolve_today
from .metrics import calculate_cost_per_hour, calculate_days_to_complete, calculate_roi, get_total_hours
from .records import GameRecord, ensure_collection, game_reference
from .statuses import ABANDONED, COMPLETED, IN_PROGRESS, NOT_STARTED, WISHLIST


UNKNOWN_LABEL = "Unknown"
FREE_SOURCE_FALLBACK = "Other"
TARGET_COST_PER_HOUR = 2.0
ESTIMATED_HOURS_PER_BACKLOG_GAME = 20


def _owned(games: Iterable[GameRecord]) -> list[GameRecord]:
    return [game for game in games if game.is_owned]


def _money(value: float) -> float:
    return round(value, 2)


def _rounded_mapping(values: Dict[str, float]) -> Dict[str, float]:
    return {key: _money(values[key]) for key in sorted(values)}


def _discount_percent(game: GameRecord) -> float:
    original = game.original_price or 0.0
    if original <= 0:
        return 0.0
    return (original - game.price) / original * 100


def _is_discounted(game: GameRecord) -> bool:
    return (
        not game.acquired_free
        and bool(game.original_price)
        and game.original_price > game.price
    )


def _highlight(game: GameRecord, key: str, value: float) -> Dict[str, Any]:
    return {"id": game.id, "name": game.name, key: value}


def calculate_summary(games: Iterable[GameRecord]) -> Dict[str, Any]:
    """Fold the whole collection into library-wide totals.

    Wishlist entries only contribute to ``wishlist_count`` and
    ``wishlist_value``. The result holds no timestamps so repeated calls on the
    same collection are identical.
    """

    collection = ensure_collection(games)
    owned = _owned(collection)
    wishlist = [game for game in collection if game.is_wishlist]
    completed = [game for game in owned if game.status == COMPLETED]
    in_progress = [game for game in owned if game.status == IN_PROGRESS]
    not_started = [game for game in owned if game.status == NOT_STARTED]
    abandoned = [game for game in owned if game.status == ABANDONED]
    hours_by_game = {id(game): get_total_hours(game) for game in collection}
    played = [game for game in owned if hours_by_game[id(game)] > 0]

    total_spent = sum(game.price for game in owned)
    wishlist_value = sum(game.price for game in wishlist)
    backlog_value = sum(game.price for game in not_started)
    average_price = total_spent / len(owned) if owned else 0.0

    discounted = [game for game in owned if _is_discounted(game)]
    total_discount_savings = sum(
        (game.original_price or 0.0) - game.price for game in discounted
    )
    average_discount = (
        sum(_discount_percent(game) for game in discounted) / len(discounted)
        if discounted
        else 0.0
    )

    total_hours = sum(hours_by_game[id(game)] for game in owned)
    average_hours_per_game = total_hours / len(played) if played else 0.0
    average_cost_per_hour = total_spent / total_hours if total_hours > 0 else 0.0
    average_rating = (
        sum(game.rating for game in played) / len(played) if played else 0.0
    )

    completion_times = [
        days
        for days in (
            calculate_days_to_complete(game.start_date, game.end_date)
            for game in completed
        )
        if days is not None
    ]
    average_days_to_complete = (
        round(sum(completion_times) / len(completion_times), 2)
        if completion_times
        else None
    )

    completion_rate = len(completed) / len(owned) * 100 if owned else 0.0

    def cost_per_hour(game: GameRecord) -> float:
        return calculate_cost_per_hour(game.price, hours_by_game[id(game)])

    best_value = worst_value = most_played = highest_rated = best_roi = None
    if played:
        value_pool = [
            game
            for game in played
            if hours_by_game[id(game)] >= 5 and not game.acquired_free
        ]
        if value_pool:
            best = min(value_pool, key=cost_per_hour)
            best_value = _highlight(best, "cost_per_hour", _money(cost_per_hour(best)))

        worst_pool = [
            game
            for game in played
            if game.price > 0
            and not game.acquired_free
            and hours_by_game[id(game)] >= 2
        ]
        if worst_pool:
            worst = max(worst_pool, key=cost_per_hour)
            worst_value = _highlight(worst, "cost_per_hour", _money(cost_per_hour(worst)))

        top = max(played, key=lambda game: hours_by_game[id(game)])
        most_played = _highlight(top, "hours", round(hours_by_game[id(top)], 2))

        favourite = max(played, key=lambda game: game.rating)
        highest_rated = _highlight(favourite, "rating", favourite.rating)

        roi_pool = [game for game in played if game.price > 0 and not game.acquired_free]
        if roi_pool:
            roi_values = {
                id(game): calculate_roi(game.rating, hours_by_game[id(game)], game.price)
                for game in roi_pool
            }
            winner = max(roi_pool, key=lambda game: roi_values[id(game)])
            best_roi = _highlight(winner, "roi", roi_values[id(winner)])

    spending_by_genre: Dict[str, float] = defaultdict(float)
    hours_by_genre: Dict[str, float] = defaultdict(float)
    spending_by_platform: Dict[str, float] = defaultdict(float)
    spending_by_source: Dict[str, float] = defaultdict(float)
    spending_by_year: Dict[str, float] = defaultdict(float)
    spending_by_franchise: Dict[str, float] = defaultdict(float)
    hours_by_franchise: Dict[str, float] = defaultdict(float)
    games_by_franchise: Dict[str, int] = defaultdict(int)

    for game in owned:
        hours = hours_by_game[id(game)]
        genre = game.genre or UNKNOWN_LABEL
        spending_by_genre[genre] += game.price
        hours_by_genre[genre] += hours
        spending_by_platform[game.platform or UNKNOWN_LABEL] += game.price
        spending_by_source[game.purchase_source or UNKNOWN_LABEL] += game.price
        if game.date_purchased:
            spending_by_year[str(game.date_purchased.year)] += game.price
        if game.franchise:
            spending_by_franchise[game.franchise] += game.price
            hours_by_franchise[game.franchise] += hours
            games_by_franchise[game.franchise] += 1

    free_games = [game for game in owned if game.acquired_free]
    hours_by_subscription: Dict[str, float] = defaultdict(float)
    saved_by_subscription: Dict[str, float] = defaultdict(float)
    games_by_subscription: Dict[str, int] = defaultdict(int)
    for game in free_games:
        source = game.subscription_source or FREE_SOURCE_FALLBACK
        hours_by_subscription[source] += hours_by_game[id(game)]
        saved_by_subscription[source] += game.original_price or 0.0
        games_by_subscription[source] += 1

    return {
        "total_games": len(collection),
        "owned_count": len(owned),
        "wishlist_count": len(wishlist),
        "completed_count": len(completed),
        "in_progress_count": len(in_progress),
        "not_started_count": len(not_started),
        "abandoned_count": len(abandoned),
        "total_spent": _money(total_spent),
        "wishlist_value": _money(wishlist_value),
        "backlog_value": _money(backlog_value),
        "average_price": _money(average_price),
        "average_cost_per_hour": _money(average_cost_per_hour),
        "total_discount_savings": _money(total_discount_savings),
        "average_discount": _money(average_discount),
        "total_hours": round(total_hours, 2),
        "average_hours_per_game": round(average_hours_per_game, 2),
        "average_rating": round(average_rating, 2),
        "average_days_to_complete": average_days_to_complete,
        "completion_rate": round(completion_rate, 2),
        "best_value": best_value,
        "worst_value": worst_value,
        "most_played": most_played,
        "highest_rated": highest_rated,
        "best_roi": best_roi,
        "spending_by_genre": _rounded_mapping(spending_by_genre),
        "spending_by_platform": _rounded_mapping(spending_by_platform),
        "spending_by_source": _rounded_mapping(spending_by_source),
        "spending_by_year": _rounded_mapping(spending_by_year),
        "hours_by_genre": _rounded_mapping(hours_by_genre),
        "spending_by_franchise": _rounded_mapping(spending_by_franchise),
        "hours_by_franchise": _rounded_mapping(hours_by_franchise),
        "games_by_franchise": dict(sorted(games_by_franchise.items())),
        "free_games_count": len(free_games),
        "total_saved": _money(sum(game.original_price or 0.0 for game in free_games)),
        "hours_by_subscription": _rounded_mapping(hours_by_subscription),
        "saved_by_subscription": _rounded_mapping(saved_by_subscription),
        "games_by_subscription": dict(sorted(games_by_subscription.items())),
    }


def get_spending_by_month(games: Iterable[GameRecord]) -> Dict[str, float]:
    spending: Dict[str, float] = defaultdict(float)
    for game in _owned(ensure_collection(games)):
        if game.date_purchased:
            spending[month_key(game.date_purchased)] += game.price
    return _rounded_mapping(spending)


def get_cumulative_spending(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    running = 0.0
    timeline = []
    for month, total in get_spending_by_month(games).items():
        running += total
        timeline.append({"month": month, "total": total, "cumulative": _money(running)})
    return timeline


def get_platform_preference(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    """Share of played hours per platform, largest first."""

    platform_hours: Dict[str, float] = defaultdict(float)
    for game in ensure_collection(games):
        hours = get_total_hours(game)
        if hours > 0:
            platform_hours[game.platform or UNKNOWN_LABEL] += hours

    total = sum(platform_hours.values())
    preferences = [
        {
            "platform": platform,
            "hours": round(hours, 2),
            "score": round(hours / total * 100, 2) if total else 0.0,
        }
        for platform, hours in platform_hours.items()
    ]
    preferences.sort(key=lambda item: (-item["hours"], item["platform"]))
    return preferences


def get_discount_effectiveness(games: Iterable[GameRecord]) -> Dict[str, Any]:
    discounted = [game for game in _owned(ensure_collection(games)) if _is_discounted(game)]
    if not discounted:
        return {"average_savings": 0.0, "best_deal": None}

    def savings(game: GameRecord) -> float:
        return (game.original_price or 0.0) - game.price

    best = max(discounted, key=savings)
    return {
        "average_savings": _money(sum(savings(game) for game in discounted) / len(discounted)),
        "best_deal": {**game_reference(best), "saved": _money(savings(best))},
    }


def get_patient_gamer_stats(games: Iterable[GameRecord]) -> Dict[str, Any]:
    """Purchases made at a discount of 30% or more."""

    patient = [
        game
        for game in _owned(ensure_collection(games))
        if _is_discounted(game) and _discount_percent(game) >= 30
    ]
    if not patient:
        return {"count": 0, "average_discount": 0.0, "total_saved": 0.0}

    return {
        "count": len(patient),
        "average_discount": _money(
            sum(_discount_percent(game) for game in patient) / len(patient)
        ),
        "total_saved": _money(
            sum((game.original_price or 0.0) - game.price for game in patient)
        ),
    }


def get_completionist_rate(games: Iterable[GameRecord]) -> Dict[str, Any]:
    collection = ensure_collection(games)
    completed_count = sum(1 for game in collection if game.status == COMPLETED)
    abandoned_count = sum(1 for game in collection if game.status == ABANDONED)
    finished = completed_count + abandoned_count
    if not finished:
        return {
            "completion_rate": 0.0,
            "abandon_rate": 0.0,
            "completed_count": 0,
            "abandoned_count": 0,
        }
    return {
        "completion_rate": round(completed_count / finished * 100, 2),
        "abandon_rate": round(abandoned_count / finished * 100, 2),
        "completed_count": completed_count,
        "abandoned_count": abandoned_count,
    }


def find_hidden_gems(games: Iterable[GameRecord], limit: int = 5) -> List[Dict[str, Any]]:
    """Cheap, well-rated games with at least ten hours played."""

    gems = []
    for game in ensure_collection(games):
        hours = get_total_hours(game)
        if hours < 10 or game.status == WISHLIST or game.acquired_free:
            continue
        if game.price > 20 or game.rating < 7:
            continue
        cost_per_hour = calculate_cost_per_hour(game.price, hours)
        score = (game.rating * 10) / (cost_per_hour + 0.1)
        gems.append({**game_reference(game), "score": round(score, 2)})

    gems.sort(key=lambda item: item["score"], reverse=True)
    return gems[:limit]


def find_regret_purchases(
    games: Iterable[GameRecord],
    *,
    today: date | None = None,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    """Expensive purchases that fell short of half an hour per owned day.

    The expectation is capped at fifty hours. Games without a purchase date
    are treated as owned for a year.
    """

    today = resolve_today(today)
    regrets = []
    for game in ensure_collection(games):
        if game.status == WISHLIST or game.acquired_free or game.price <= 20:
            continue
        owned_days = days_between(game.date_purchased, today)
        owned_days = max(1, owned_days) if owned_days is not None else 365
        expected_hours = min(owned_days * 0.5, 50)
        deficit = max(0.0, expected_hours - get_total_hours(game))
        score = (game.price / 10) * deficit
        if score > 5:
            regrets.append({**game_reference(game), "regret_score": round(score, 2)})

    regrets.sort(key=lambda item: item["regret_score"], reverse=True)
    return regrets[:limit]


def find_shelf_warmers(
    games: Iterable[GameRecord],
    *,
    today: date | None = None,
    limit: int = 5,
) -> List[Dict[str, Any]]:
    today = resolve_today(today)
    warmers = []
    for game in ensure_collection(games):
        if game.status != NOT_STARTED or not game.date_purchased or game.price <= 0:
            continue
        days_sitting = (today - game.date_purchased).days
        if days_sitting > 30:
            warmers.append({**game_reference(game), "days_sitting": days_sitting})

    warmers.sort(key=lambda item: item["days_sitting"], reverse=True)
    return warmers[:limit]


def get_century_club_games(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    club = [
        (game, get_total_hours(game))
        for game in _owned(ensure_collection(games))
    ]
    club = [(game, hours) for game, hours in club if hours >= 100]
    club.sort(key=lambda pair: pair[1], reverse=True)
    return [{**game_reference(game), "hours": round(hours, 2)} for game, hours in club]


def get_quick_fix_games(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    """Completed games finished in under ten hours, quickest first."""

    quick = [
        (game, get_total_hours(game))
        for game in ensure_collection(games)
        if game.status == COMPLETED
    ]
    quick = [(game, hours) for game, hours in quick if 0 < hours < 10]
    quick.sort(key=lambda pair: pair[1])
    return [{**game_reference(game), "hours": round(hours, 2)} for game, hours in quick]


def get_most_invested_franchise(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    stats: Dict[str, Dict[str, float]] = {}
    for game in _owned(ensure_collection(games)):
        if not game.franchise:
            continue
        entry = stats.setdefault(game.franchise, {"spent": 0.0, "hours": 0.0, "games": 0})
        entry["spent"] += game.price
        entry["hours"] += get_total_hours(game)
        entry["games"] += 1

    if not stats:
        return None

    franchise, entry = max(stats.items(), key=lambda item: item[1]["hours"])
    return {
        "franchise": franchise,
        "spent": _money(entry["spent"]),
        "hours": round(entry["hours"], 2),
        "games": int(entry["games"]),
    }


def get_value_champion(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    candidates = [
        (game, get_total_hours(game))
        for game in _owned(ensure_collection(games))
        if not game.acquired_free
    ]
    candidates = [(game, hours) for game, hours in candidates if hours >= 5]
    if not candidates:
        return None

    game, hours = min(
        candidates, key=lambda pair: calculate_cost_per_hour(pair[0].price, pair[1])
    )
    return {
        **game_reference(game),
        "cost_per_hour": _money(calculate_cost_per_hour(game.price, hours)),
    }


def _completion_times(games: Iterable[GameRecord]) -> List[tuple[GameRecord, int]]:
    timed = [
        (game, calculate_days_to_complete(game.start_date, game.end_date))
        for game in ensure_collection(games)
        if game.status == COMPLETED
    ]
    return [(game, days) for game, days in timed if days is not None]


def get_completion_velocity(games: Iterable[GameRecord]) -> float | None:
    """Average days from start to finish over completed games."""

    times = _completion_times(games)
    if not times:
        return None
    return round(sum(days for _, days in times) / len(times), 2)


def get_fastest_completion(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    times = _completion_times(games)
    if not times:
        return None
    game, days = min(times, key=lambda pair: pair[1])
    return {**game_reference(game), "days": days}


def get_slowest_completion(games: Iterable[GameRecord]) -> Dict[str, Any] | None:
    times = _completion_times(games)
    if not times:
        return None
    game, days = max(times, key=lambda pair: pair[1])
    return {**game_reference(game), "days": days}


def get_impulse_buyer_stat(games: Iterable[GameRecord]) -> float | None:
    """Average days between purchase and the first logged session.

    Sessions logged before the purchase date count as zero days.
    """

    delays = []
    for game in _owned(ensure_collection(games)):
        first_played = game.first_played()
        if game.date_purchased is None or first_played is None:
            continue
        delays.append(max(0, (first_played - game.date_purchased).days))
    if not delays:
        return None
    return round(sum(delays) / len(delays), 2)


def get_backlog_in_days(games: Iterable[GameRecord]) -> float:
    """Untouched Not Started games at a flat estimate, expressed in whole days of play."""

    untouched = sum(
        1
        for game in ensure_collection(games)
        if game.status == NOT_STARTED and get_total_hours(game) == 0
    )
    return round(untouched * ESTIMATED_HOURS_PER_BACKLOG_GAME / 24, 2)


def get_genre_diversity(games: Iterable[GameRecord]) -> Dict[str, Any]:
    collection = ensure_collection(games)
    all_genres = {game.genre for game in collection if game.genre}
    played_genres = {
        game.genre for game in collection if game.genre and get_total_hours(game) > 0
    }
    return {
        "unique_genres": len(played_genres),
        "percentage": round(len(played_genres) / len(all_genres) * 100, 2) if all_genres else 0.0,
    }


def get_commitment_score(games: Iterable[GameRecord]) -> float:
    """Percentage of owned games with at least ten hours played."""

    owned = _owned(ensure_collection(games))
    if not owned:
        return 0.0
    committed = sum(1 for game in owned if get_total_hours(game) >= 10)
    return round(committed / len(owned) * 100, 2)


def get_average_discount(games: Iterable[GameRecord]) -> float:
    discounted = [game for game in _owned(ensure_collection(games)) if _is_discounted(game)]
    if not discounted:
        return 0.0
    return round(sum(_discount_percent(game) for game in discounted) / len(discounted), 2)


def get_lifetime_stats(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    today = resolve_today(today)
    owned = _owned(ensure_collection(games))
    total_hours = sum(get_total_hours(game) for game in owned)
    total_spent = sum(game.price for game in owned)

    purchase_dates = sorted(game.date_purchased for game in owned if game.date_purchased)
    first_game_date = purchase_dates[0] if purchase_dates else None
    days_since_first = max(0, (today - first_game_date).days) if first_game_date else 0
    months_since_first = days_since_first / 30
    weeks_since_first = days_since_first / 7

    return {
        "total_hours": round(total_hours, 2),
        "equivalent_days": round(total_hours / 24, 2),
        "equivalent_weeks": round(total_hours / (24 * 7), 2),
        "movies_equivalent": int(total_hours // 2),
        "books_equivalent": int(total_hours // 8),
        "total_games": len(owned),
        "total_spent": _money(total_spent),
        "average_cost_per_hour": _money(total_spent / total_hours) if total_hours > 0 else 0.0,
        "first_game_date": first_game_date.isoformat() if first_game_date else None,
        "days_since_first_game": days_since_first,
        "games_per_month": round(
            len(owned) / months_since_first if months_since_first > 0 else len(owned), 2
        ),
        "hours_per_week": round(
            total_hours / weeks_since_first if weeks_since_first > 0 else total_hours, 2
        ),
    }


def get_spending_trend(spending_by_month: Dict[str, float]) -> str:
    """Compare the latest six spending months with the six before them."""

    months = sorted(spending_by_month)
    if len(months) < 6:
        return "stable"
    recent = sum(spending_by_month[month] for month in months[-6:])
    older = sum(spending_by_month[month] for month in months[-12:-6])
    if recent > older * 1.2:
        return "increasing"
    if recent < older * 0.8:
        return "decreasing"
    return "stable"


def get_money_stats(games: Iterable[GameRecord]) -> Dict[str, Any]:
    collection = ensure_collection(games)
    owned = _owned(collection)
    completed = [game for game in owned if game.status == COMPLETED]

    total_spent = sum(game.price for game in owned)
    total_hours = sum(get_total_hours(game) for game in owned)
    current_cost_per_hour = total_spent / total_hours if total_hours > 0 else 0.0
    break_even_hours = (
        total_spent / TARGET_COST_PER_HOUR - total_hours
        if current_cost_per_hour > TARGET_COST_PER_HOUR
        else 0.0
    )

    impulse: list[dict[str, Any]] = []
    planned: list[dict[str, Any]] = []
    for game in owned:
        first_played = game.first_played()
        if not game.date_purchased or first_played is None:
            continue
        waited = (first_played - game.date_purchased).days
        if waited <= 7:
            impulse.append(game_reference(game))
        elif waited > 30:
            planned.append(game_reference(game))

    spending_by_month = get_spending_by_month(collection)

    regrets = [
        game
        for game in owned
        if game.price > 20 and get_total_hours(game) < 3 and not game.acquired_free
    ]
    biggest_regret = None
    if regrets:
        worst = max(regrets, key=lambda game: game.price)
        biggest_regret = {**game_reference(worst), "wasted": _money(worst.price)}

    bargains = [
        game
        for game in owned
        if game.price > 0 and get_total_hours(game) >= 10 and game.rating >= 7
    ]
    best_bargain = None
    if bargains:
        def bargain_score(game: GameRecord) -> float:
            return game.rating * get_total_hours(game) / game.price

        best = max(bargains, key=bargain_score)
        best_bargain = {**game_reference(best), "value_score": round(bargain_score(best), 2)}

    return {
        "cost_of_backlog": _money(
            sum(game.price for game in owned if game.status == NOT_STARTED)
        ),
        "break_even_hours_needed": round(break_even_hours, 2),
        "average_cost_per_completion": _money(
            sum(game.price for game in completed) / len(completed) if completed else 0.0
        ),
        "impulse_purchases": impulse,
        "planned_purchases": planned,
        "spending_trend": get_spending_trend(spending_by_month),
        "monthly_average": _money(total_spent / (len(spending_by_month) or 1)),
        "biggest_regret": biggest_regret,
        "best_bargain": best_bargain,
    }
