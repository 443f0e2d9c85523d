from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

import requests

from .records import GameRecord, ensure_collection, game_reference


logger = logging.getLogger(__name__)

DEFAULT_DEALS_API_URL = "https://www.cheapshark.com/api/1.0"

_TITLE_NOISE = re.compile(r"[^a-z0-9]+")


class DealsLookupError(Exception):
    """Raised when the deals provider could not be queried."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimiter:
    """Simple time-based rate limiter for external API calls."""

    def __init__(self, min_interval: float) -> None:
        self.min_interval = max(0.0, float(min_interval))
        self._lock = threading.Lock()
        self._last_call = 0.0

    def wait(self) -> None:
        if self.min_interval <= 0:
            return
        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_call
            if elapsed < self.min_interval:
                time.sleep(self.min_interval - elapsed)
                now = time.monotonic()
            self._last_call = now


def normalize_title(title: str | None) -> str:
    return _TITLE_NOISE.sub(" ", (title or "").lower()).strip()


def _float_or_none(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class DealRecord:
    title: str
    sale_price: float
    normal_price: float
    store_name: str
    discount_percent: float
    deal_id: str | None = None

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], store_names: Mapping[str, str] | None = None
    ) -> "DealRecord":
        sale_price = _float_or_none(payload.get("salePrice")) or 0.0
        normal_price = _float_or_none(payload.get("normalPrice")) or sale_price
        discount = _float_or_none(payload.get("savings"))
        if discount is None:
            discount = (
                (normal_price - sale_price) / normal_price * 100 if normal_price > 0 else 0.0
            )
        store_id = str(payload.get("storeID") or "")
        store_name = (store_names or {}).get(store_id) or payload.get("storeName") or "Unknown"
        return cls(
            title=str(payload.get("title") or "").strip(),
            sale_price=round(sale_price, 2),
            normal_price=round(normal_price, 2),
            store_name=str(store_name),
            discount_percent=round(discount, 2),
            deal_id=payload.get("dealID"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "sale_price": self.sale_price,
            "normal_price": self.normal_price,
            "store_name": self.store_name,
            "discount_percent": self.discount_percent,
            "deal_id": self.deal_id,
        }


@dataclass(frozen=True)
class GameMetadataRecord:
    name: str
    thumbnail: str | None
    release_date: date | None
    critic_score: int | None
    community_rating: int | None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GameMetadataRecord":
        release_date = None
        timestamp = _float_or_none(payload.get("releaseDate"))
        if timestamp:
            release_date = datetime.fromtimestamp(timestamp, tz=timezone.utc).date()

        def score(key: str) -> int | None:
            value = _float_or_none(payload.get(key))
            return int(value) if value else None

        return cls(
            name=str(payload.get("title") or "").strip(),
            thumbnail=payload.get("thumb") or None,
            release_date=release_date,
            critic_score=score("metacriticScore"),
            community_rating=score("steamRatingPercent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "thumbnail": self.thumbnail,
            "release_date": self.release_date.isoformat() if self.release_date else None,
            "critic_score": self.critic_score,
            "community_rating": self.community_rating,
        }


class DealsClient:
    """Thin client for a CheapShark-compatible deals API."""

    def __init__(
        self,
        base_url: str = DEFAULT_DEALS_API_URL,
        *,
        timeout: float = 10,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter(0.35)
        self._store_names: Dict[str, str] | None = None

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            self.rate_limiter.wait()
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Deals request to %s failed: %s", url, exc)
            raise DealsLookupError(f"Deals request failed: {exc}", 502) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Deals provider returned invalid JSON for %s", url)
            raise DealsLookupError("Invalid response from deals provider.", 502) from exc

    def store_names(self) -> Dict[str, str]:
        if self._store_names is None:
            payload = self._get("stores")
            names: Dict[str, str] = {}
            if isinstance(payload, list):
                for store in payload:
                    if not isinstance(store, dict):
                        continue
                    store_id = str(store.get("storeID") or "")
                    if store_id:
                        names[store_id] = str(store.get("storeName") or store_id)
            self._store_names = names
        return self._store_names

    def _deal_payloads(self, title: str, limit: int) -> List[Mapping[str, Any]]:
        query = (title or "").strip()
        if not query:
            return []
        payload = self._get("deals", {"title": query, "pageSize": limit})
        if not isinstance(payload, list):
            raise DealsLookupError("Unexpected deals payload.", 502)
        return [item for item in payload if isinstance(item, dict)]

    def search_deals(self, title: str, limit: int = 10) -> List[DealRecord]:
        items = self._deal_payloads(title, limit)
        if not items:
            return []
        stores = self.store_names()
        return [DealRecord.from_payload(item, stores) for item in items]

    def fetch_metadata(self, title: str) -> GameMetadataRecord | None:
        """Metadata from the closest-named deal, exact title matches first."""

        items = self._deal_payloads(title, 10)
        if not items:
            return None
        wanted = normalize_title(title)
        for item in items:
            if normalize_title(item.get("title")) == wanted:
                return GameMetadataRecord.from_payload(item)
        return GameMetadataRecord.from_payload(items[0])

    def deals_for_wishlist(
        self, games: Iterable[GameRecord], limit_per_game: int = 5
    ) -> List[DealRecord]:
        deals: List[DealRecord] = []
        for game in ensure_collection(games):
            if game.is_wishlist:
                deals.extend(self.search_deals(game.name, limit_per_game))
        logger.info("Fetched %d deals for wishlist games", len(deals))
        return deals


def match_wishlist_deals(
    games: Iterable[GameRecord], deals: Iterable[DealRecord]
) -> List[Dict[str, Any]]:
    """Pair each wishlist game with its cheapest deal by normalized title.

    ``savings`` compares the deal with the price stored on the wishlist entry
    and is ``None`` when no price was recorded.
    """

    best_by_title: Dict[str, DealRecord] = {}
    for deal in deals:
        key = normalize_title(deal.title)
        if not key:
            continue
        current = best_by_title.get(key)
        if current is None or deal.sale_price < current.sale_price:
            best_by_title[key] = deal

    matches = []
    for game in ensure_collection(games):
        if not game.is_wishlist:
            continue
        deal = best_by_title.get(normalize_title(game.name))
        if deal is None:
            continue
        savings = round(game.price - deal.sale_price, 2) if game.price > 0 else None
        matches.append(
            {
                "game": game_reference(game),
                "deal": deal.to_dict(),
                "wishlist_price": game.price,
                "savings": savings,
                "below_wishlist_price": savings is not None and savings > 0,
            }
        )

    matches.sort(key=lambda item: (item["savings"] is None, -(item["savings"] or 0)))
    return matches
