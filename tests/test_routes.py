from datetime import date

import pytest
import requests
from sqlalchemy.exc import SQLAlchemyError

from playstats import db
from playstats import routes as routes_module
from playstats.models import Game, PlayLog
from playstats.repository import InMemoryGameRepository


def _seed_library():
    star_forge = Game(
        name="Star Forge",
        status="Completed",
        price=60,
        hours=30,
        rating=8,
        genre="RPG",
        platform="PC",
        date_purchased=date(2023, 5, 1),
        start_date=date(2023, 5, 2),
        end_date=date(2023, 6, 1),
    )
    star_forge.play_logs.append(PlayLog(date=date(2024, 3, 10), hours=2, mood="good"))
    void_pass = Game(
        name="Void Pass",
        status="Not Started",
        price=40,
        genre="RPG",
        date_purchased=date(2024, 1, 20),
    )
    dream = Game(name="Dream List", status="Wishlist", price=30)
    db.session.add_all([star_forge, void_pass, dream])
    db.session.commit()
    return star_forge.id


def test_games_collection_includes_metrics(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    response = client.get("/api/games")

    assert response.status_code == 200
    payload = response.get_json()
    assert [game["name"] for game in payload] == ["Star Forge", "Void Pass", "Dream List"]
    star_forge = payload[0]
    assert star_forge["total_hours"] == 32
    assert star_forge["metrics"]["value_rating"] == "Good"
    assert "roi_rating" in star_forge


def test_game_insights_combines_classifiers(app_instance, client):
    with app_instance.app_context():
        game_id = _seed_library()

    response = client.get(f"/api/games/{game_id}/insights?today=2024-06-01")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["name"] == "Star Forge"
    assert payload["relationship"]["label"] == "Happily Ever After"
    assert payload["completion_probability"]["probability"] == 100
    assert payload["rarity"]["tier"] in {"legendary", "epic", "rare", "uncommon", "common"}


def test_game_insights_unknown_game_returns_404(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    assert client.get("/api/games/999/insights").status_code == 404
    assert client.get("/api/games/not-a-number/insights").status_code == 404


def test_invalid_query_parameters_return_400(app_instance, client):
    bad_date = client.get("/api/summary?today=2024-13-45")
    half_range = client.get("/api/periods?start=2024-03-01")
    future_week = client.get("/api/reviews/week?offset=-2")
    bad_budget = client.get("/api/forecast/spending?budget=lots")

    for response in (bad_date, half_range, future_week, bad_budget):
        assert response.status_code == 400
        assert "error" in response.get_json()


def test_out_of_range_dates_return_400(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    distant_week = client.get("/api/reviews/week?offset=1000000&today=2024-01-10")
    huge_window = client.get("/api/periods?days=10000000000&today=2024-01-10")
    calendar_start = client.get("/api/personality?today=0001-01-02")

    for response in (distant_week, huge_window, calendar_start):
        assert response.status_code == 400
        assert "error" in response.get_json()


def test_summary_endpoint(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    response = client.get("/api/summary?today=2024-06-01")

    payload = response.get_json()
    assert payload["summary"]["owned_count"] == 2
    assert payload["summary"]["wishlist_value"] == 30
    assert payload["money"]["cost_of_backlog"] == 40
    assert payload["lifetime"]["first_game_date"] == "2023-05-01"
    assert payload["habits"]["completion_velocity"] == 30
    assert payload["habits"]["backlog_in_days"] == 0.83
    assert payload["habits"]["longest_session"]["hours"] == 2


def test_backlog_forecast_reports_never_clearing_backlog_as_null(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    response = client.get("/api/forecast/backlog?today=2024-06-01")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["doomsday"]["days_remaining"] is None
    assert payload["doomsday"]["never_clears"] is True
    assert payload["clearance"]["days_remaining"] is None
    assert payload["clearance"]["never_clears"] is True


def test_streak_period_and_review_endpoints(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    streaks = client.get("/api/streaks?today=2024-03-10").get_json()
    period = client.get("/api/periods?days=7&today=2024-03-12").get_json()
    month = client.get("/api/reviews/month?year=2024&month=3&today=2024-04-01").get_json()
    week = client.get("/api/reviews/week?offset=0&today=2024-03-13").get_json()

    assert streaks["current_streak"] == 1
    assert streaks["longest_streak"] == 1
    assert streaks["best_month"] == {"month": "2024-03", "hours": 2.0}
    assert period["total_hours"] == 2
    assert month["total_hours"] == 2
    assert month["mood_score"] == 75
    assert week["week_start"] == "2024-03-04"
    assert week["top_game"]["game"]["name"] == "Star Forge"


def test_personality_trophies_and_spending_endpoints(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    personality = client.get("/api/personality?today=2024-03-12").get_json()
    trophies = client.get("/api/trophies").get_json()
    spending = client.get("/api/forecast/spending?today=2024-02-15&budget=100").get_json()

    assert personality["personality"]["type"]
    assert personality["rotation"]["games_in_rotation"] == 1
    assert len(trophies["achievements"]) == 10
    assert spending["year_to_date"] == 40
    assert spending["budget"]["remaining"] == 60


def test_wrapped_endpoint_defaults_to_current_year(app_instance, client):
    with app_instance.app_context():
        _seed_library()

    payload = client.get("/api/wrapped?today=2024-12-31").get_json()

    assert payload["year"] == 2024
    assert payload["has_data"] is True


def test_configured_repository_replaces_database(app_instance, client):
    app_instance.config["PLAYSTATS_REPOSITORY"] = InMemoryGameRepository.from_mappings(
        [
            {
                "id": "abc",
                "name": "Memory Game",
                "status": "In Progress",
                "price": 10,
                "hours": 5,
                "playLogs": [{"id": "1", "date": "2024-02-01", "hours": 1}],
            }
        ]
    )

    games = client.get("/api/games").get_json()
    insights = client.get("/api/games/abc/insights?today=2024-02-02")

    assert [game["name"] for game in games] == ["Memory Game"]
    assert insights.status_code == 200


def test_database_errors_return_500(app_instance, client, monkeypatch):
    def broken_get_all(self):
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(routes_module.SQLAlchemyGameRepository, "get_all", broken_get_all)

    response = client.get("/api/summary")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Could not load the game library."}


class DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")
        return None

    def json(self):
        return self._payload


def test_wishlist_deals_endpoint(app_instance, client, monkeypatch):
    with app_instance.app_context():
        _seed_library()

    def fake_get(url, params=None, timeout=None):
        if url.endswith("/stores"):
            return DummyResponse([{"storeID": "1", "storeName": "Steam"}])
        return DummyResponse(
            [{"title": "Dream List", "salePrice": "12.50", "normalPrice": "30", "storeID": "1"}]
        )

    monkeypatch.setattr(routes_module, "_deals_client", None)
    monkeypatch.setattr("playstats.deals.requests.get", fake_get)

    response = client.get("/api/deals/wishlist")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload[0]["game"]["name"] == "Dream List"
    assert payload[0]["deal"]["store_name"] == "Steam"
    assert payload[0]["savings"] == 17.5


def test_wishlist_deals_endpoint_surfaces_provider_errors(app_instance, client, monkeypatch):
    with app_instance.app_context():
        _seed_library()

    monkeypatch.setattr(routes_module, "_deals_client", None)
    monkeypatch.setattr(
        "playstats.deals.requests.get",
        lambda url, params=None, timeout=None: DummyResponse([], status_code=500),
    )

    response = client.get("/api/deals/wishlist")

    assert response.status_code == 502
    assert "error" in response.get_json()


def test_game_model_normalizes_status_aliases(app_instance):
    with app_instance.app_context():
        game = Game(name="Alias", status="backlog")

        assert game.status == "Not Started"
        with pytest.raises(ValueError):
            Game(name="Broken", status="on fire")
