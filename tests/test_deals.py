from datetime import date

import pytest
import requests

from playstats.deals import (
    DealRecord,
    DealsClient,
    DealsLookupError,
    GameMetadataRecord,
    RateLimiter,
    match_wishlist_deals,
    normalize_title,
)
from playstats.records import GameRecord


STORES = [
    {"storeID": "1", "storeName": "Steam"},
    {"storeID": "7", "storeName": "GOG"},
]


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


def _client():
    return DealsClient("https://deals.example/api", rate_limiter=RateLimiter(0))


def test_search_deals_resolves_store_names(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params))
        if url.endswith("/stores"):
            return DummyResponse(STORES)
        return DummyResponse(
            [
                {
                    "title": "Hollow Star",
                    "salePrice": "9.99",
                    "normalPrice": "19.99",
                    "savings": "50.0",
                    "storeID": "7",
                    "dealID": "abc",
                }
            ]
        )

    monkeypatch.setattr("playstats.deals.requests.get", fake_get)

    deals = _client().search_deals("Hollow Star", limit=3)

    assert calls[0] == (
        "https://deals.example/api/deals",
        {"title": "Hollow Star", "pageSize": 3},
    )
    assert deals == [
        DealRecord(
            title="Hollow Star",
            sale_price=9.99,
            normal_price=19.99,
            store_name="GOG",
            discount_percent=50.0,
            deal_id="abc",
        )
    ]


def test_store_names_are_cached(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append(url)
        return DummyResponse(STORES)

    monkeypatch.setattr("playstats.deals.requests.get", fake_get)

    client = _client()
    client.store_names()
    client.store_names()

    assert calls == ["https://deals.example/api/stores"]


def test_blank_title_skips_the_network(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        raise AssertionError("no request expected")

    monkeypatch.setattr("playstats.deals.requests.get", fake_get)

    assert _client().search_deals("   ") == []
    assert _client().fetch_metadata("") is None


def test_request_failures_raise_lookup_error(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        return DummyResponse({}, status_code=503)

    monkeypatch.setattr("playstats.deals.requests.get", fake_get)

    with pytest.raises(DealsLookupError) as excinfo:
        _client().search_deals("Anything")

    assert excinfo.value.status_code == 502


def test_unexpected_payload_raises_lookup_error(monkeypatch):
    monkeypatch.setattr(
        "playstats.deals.requests.get",
        lambda url, params=None, timeout=None: DummyResponse({"error": "nope"}),
    )

    with pytest.raises(DealsLookupError):
        _client().search_deals("Anything")


def test_fetch_metadata_prefers_exact_title(monkeypatch):
    payload = [
        {"title": "Hollow Star: Deluxe", "thumb": "deluxe.jpg"},
        {
            "title": "HOLLOW STAR",
            "thumb": "base.jpg",
            "releaseDate": 1700000000,
            "metacriticScore": "88",
            "steamRatingPercent": "0",
        },
    ]
    monkeypatch.setattr(
        "playstats.deals.requests.get",
        lambda url, params=None, timeout=None: DummyResponse(payload),
    )

    metadata = _client().fetch_metadata("Hollow Star")

    assert metadata == GameMetadataRecord(
        name="HOLLOW STAR",
        thumbnail="base.jpg",
        release_date=date(2023, 11, 14),
        critic_score=88,
        community_rating=None,
    )


def test_deals_for_wishlist_only_queries_wishlist_games(monkeypatch):
    queried = []

    def fake_get(url, params=None, timeout=None):
        if url.endswith("/stores"):
            return DummyResponse(STORES)
        queried.append(params["title"])
        return DummyResponse([{"title": params["title"], "salePrice": "5", "storeID": "1"}])

    monkeypatch.setattr("playstats.deals.requests.get", fake_get)
    games = [
        GameRecord(id="1", name="Wanted", status="Wishlist", price=20),
        GameRecord(id="2", name="Owned", status="Completed", price=20),
    ]

    deals = _client().deals_for_wishlist(games)

    assert queried == ["Wanted"]
    assert deals[0].store_name == "Steam"


def test_normalize_title_ignores_case_and_punctuation():
    assert normalize_title("Hollow Star: Deluxe!") == "hollow star deluxe"
    assert normalize_title(None) == ""


def test_match_wishlist_deals_picks_cheapest_and_sorts_by_savings():
    games = [
        GameRecord(id="1", name="Hollow Star", status="Wishlist", price=30),
        GameRecord(id="2", name="Night Drive", status="Wishlist", price=15),
        GameRecord(id="3", name="No Price", status="Wishlist"),
        GameRecord(id="4", name="Owned Already", status="Completed", price=10),
    ]
    deals = [
        DealRecord("Hollow Star", 12.0, 30.0, "Steam", 60.0),
        DealRecord("hollow star", 9.0, 30.0, "GOG", 70.0),
        DealRecord("Night Drive", 14.0, 15.0, "Steam", 6.67),
        DealRecord("No Price", 4.0, 8.0, "Steam", 50.0),
        DealRecord("Owned Already", 1.0, 10.0, "Steam", 90.0),
    ]

    matches = match_wishlist_deals(games, deals)

    assert [match["game"]["name"] for match in matches] == ["Hollow Star", "Night Drive", "No Price"]
    assert matches[0]["deal"]["store_name"] == "GOG"
    assert matches[0]["savings"] == pytest.approx(21.0)
    assert matches[0]["below_wishlist_price"] is True
    assert matches[2]["savings"] is None
    assert matches[2]["below_wishlist_price"] is False
