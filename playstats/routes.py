from __future__ import annotations

import logging
import math
from datetime import date

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from .classifiers import (
    get_card_rarity,
    get_collection_trophies,
    get_completion_probability,
    get_gaming_achievements,
    get_gaming_personality,
    get_genre_rut_analysis,
    get_relationship_status,
    get_rotation_stats,
    get_session_analysis,
)
from .dates import resolve_today
from .deals import DealsClient, DealsLookupError, RateLimiter, match_wishlist_deals
from .forecasting import (
    get_backlog_doomsday_data,
    get_predicted_backlog_clearance,
    get_spending_forecast,
)
from .metrics import calculate_metrics, get_roi_rating, get_total_hours
from .periods import (
    get_best_gaming_month,
    get_current_gaming_streak,
    get_longest_gaming_streak,
    get_longest_session,
    get_momentum_data,
    get_period_stats,
    get_period_stats_for_range,
)
from .repository import SQLAlchemyGameRepository
from .reviews import (
    get_month_in_review,
    get_week_stats_for_offset,
    get_year_in_review,
    get_yearly_wrapped_data,
)
from .summary import (
    calculate_summary,
    get_average_discount,
    get_backlog_in_days,
    get_commitment_score,
    get_completion_velocity,
    get_fastest_completion,
    get_genre_diversity,
    get_impulse_buyer_stat,
    get_lifetime_stats,
    get_money_stats,
    get_slowest_completion,
)

bp = Blueprint("insights", __name__)

logger = logging.getLogger(__name__)

_deals_client: DealsClient | None = None


def _repository():
    return current_app.config.get("PLAYSTATS_REPOSITORY") or SQLAlchemyGameRepository()


def _load_games():
    return _repository().get_all()


def _parse_date(value: str | None, label: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"{label} must be a valid YYYY-MM-DD date") from exc


def _parse_int(value: str | None, label: str, default: int | None = None) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{label} must be a whole number") from exc


def _today() -> date:
    return resolve_today(_parse_date(request.args.get("today"), "today"))


def _finite(payload: dict) -> dict:
    """Replace unbounded projections with ``None`` so the payload stays valid JSON."""

    cleaned = dict(payload)
    for key, value in payload.items():
        if isinstance(value, float) and math.isinf(value):
            cleaned[key] = None
            cleaned["never_clears"] = True
    return cleaned


def _get_deals_client() -> DealsClient:
    global _deals_client
    config = current_app.config
    if _deals_client is None or _deals_client.base_url != config["DEALS_API_URL"].rstrip("/"):
        _deals_client = DealsClient(
            config["DEALS_API_URL"],
            timeout=config["DEALS_TIMEOUT"],
            rate_limiter=RateLimiter(config["DEALS_MIN_INTERVAL"]),
        )
    return _deals_client


@bp.errorhandler(ValueError)
def handle_value_error(error: ValueError):
    return jsonify({"error": str(error)}), 400


@bp.errorhandler(OverflowError)
def handle_overflow_error(error: OverflowError):
    return jsonify({"error": "Requested dates fall outside the supported calendar."}), 400


@bp.errorhandler(DealsLookupError)
def handle_deals_error(error: DealsLookupError):
    return jsonify({"error": str(error)}), error.status_code


@bp.errorhandler(SQLAlchemyError)
def handle_database_error(error: SQLAlchemyError):
    logger.exception("Failed to load games for analytics")
    return jsonify({"error": "Could not load the game library."}), 500


@bp.route("/api/games")
def games_collection():
    games = _load_games()
    payload = []
    for game in games:
        metrics = calculate_metrics(game)
        payload.append(
            {
                "id": game.id,
                "name": game.name,
                "status": game.status,
                "platform": game.platform,
                "genre": game.genre,
                "price": game.price,
                "rating": game.rating,
                "total_hours": round(get_total_hours(game), 2),
                "metrics": metrics.to_dict(),
                "roi_rating": get_roi_rating(metrics.roi),
            }
        )
    return jsonify(payload)


@bp.route("/api/games/<game_id>/insights")
def game_insights(game_id: str):
    today = _today()
    repository = _repository()
    game = repository.get(game_id)
    if game is None:
        return jsonify({"error": "Game not found."}), 404

    games = repository.get_all()
    return jsonify(
        {
            "id": game.id,
            "name": game.name,
            "metrics": calculate_metrics(game).to_dict(),
            "relationship": get_relationship_status(game, today=today),
            "rarity": get_card_rarity(game),
            "completion_probability": get_completion_probability(game, games, today=today),
        }
    )


@bp.route("/api/summary")
def library_summary():
    today = _today()
    games = _load_games()
    return jsonify(
        {
            "summary": calculate_summary(games),
            "lifetime": get_lifetime_stats(games, today=today),
            "money": get_money_stats(games),
            "habits": {
                "completion_velocity": get_completion_velocity(games),
                "fastest_completion": get_fastest_completion(games),
                "slowest_completion": get_slowest_completion(games),
                "impulse_buyer_days": get_impulse_buyer_stat(games),
                "backlog_in_days": get_backlog_in_days(games),
                "genre_diversity": get_genre_diversity(games),
                "commitment_score": get_commitment_score(games),
                "average_discount": get_average_discount(games),
                "longest_session": get_longest_session(games),
            },
        }
    )


@bp.route("/api/periods")
def period_stats():
    today = _today()
    start = _parse_date(request.args.get("start"), "start")
    end = _parse_date(request.args.get("end"), "end")
    games = _load_games()

    if start or end:
        if not (start and end):
            raise ValueError("start and end must be provided together")
        return jsonify(get_period_stats_for_range(games, start, end))

    days = _parse_int(request.args.get("days"), "days", 7)
    return jsonify(get_period_stats(games, days, today=today))


@bp.route("/api/streaks")
def streaks():
    today = _today()
    games = _load_games()
    return jsonify(
        {
            "current_streak": get_current_gaming_streak(games, today=today),
            "longest_streak": get_longest_gaming_streak(games),
            "best_month": get_best_gaming_month(games),
        }
    )


@bp.route("/api/momentum")
def momentum():
    return jsonify(get_momentum_data(_load_games(), today=_today()))


@bp.route("/api/reviews/week")
def week_review():
    offset = _parse_int(request.args.get("offset"), "offset", 0)
    return jsonify(get_week_stats_for_offset(_load_games(), offset, today=_today()))


@bp.route("/api/reviews/month")
def month_review():
    today = _today()
    year = _parse_int(request.args.get("year"), "year", today.year)
    month = _parse_int(request.args.get("month"), "month", today.month)
    return jsonify(get_month_in_review(_load_games(), year, month, today=today))


@bp.route("/api/reviews/year")
def year_review():
    year = _parse_int(request.args.get("year"), "year", _today().year)
    return jsonify(get_year_in_review(_load_games(), year))


@bp.route("/api/wrapped")
def yearly_wrapped():
    today = _today()
    year = _parse_int(request.args.get("year"), "year", today.year)
    return jsonify(get_yearly_wrapped_data(_load_games(), year, today=today))


@bp.route("/api/personality")
def personality():
    today = _today()
    games = _load_games()
    return jsonify(
        {
            "personality": get_gaming_personality(games),
            "sessions": get_session_analysis(games),
            "rotation": get_rotation_stats(games, today=today),
            "genre_rut": get_genre_rut_analysis(games, today=today),
        }
    )


@bp.route("/api/trophies")
def trophies():
    games = _load_games()
    return jsonify(
        {
            "trophies": get_collection_trophies(games),
            "achievements": get_gaming_achievements(games),
        }
    )


@bp.route("/api/forecast/backlog")
def backlog_forecast():
    today = _today()
    games = _load_games()
    return jsonify(
        {
            "doomsday": _finite(get_backlog_doomsday_data(games, today=today)),
            "clearance": _finite(get_predicted_backlog_clearance(games, today=today)),
        }
    )


@bp.route("/api/forecast/spending")
def spending_forecast():
    budget_param = request.args.get("budget")
    budget = None
    if budget_param:
        try:
            budget = float(budget_param)
        except ValueError as exc:
            raise ValueError("budget must be a number") from exc
    return jsonify(get_spending_forecast(_load_games(), today=_today(), budget=budget))


@bp.route("/api/deals/wishlist")
def wishlist_deals():
    games = _load_games()
    deals = _get_deals_client().deals_for_wishlist(games)
    return jsonify(match_wishlist_deals(games, deals))
