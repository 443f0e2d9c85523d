from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping

from .dates import resolve_today, shift_months
from .metrics import calculate_cost_per_hour, get_total_hours, get_value_rating
from .periods import get_all_play_logs, get_longest_gaming_streak
from .records import GameRecord, ensure_collection, game_reference
from .statuses import ABANDONED, COMPLETED, NOT_STARTED, WISHLIST
from .summary import get_patient_gamer_stats


@dataclass(frozen=True)
class PersonalityDefinition:
    type: str
    description: str
    traits: tuple[str, ...]


@dataclass(frozen=True)
class LibraryProfile:
    owned_count: int
    played_count: int
    completed_count: int
    average_hours: float
    completion_rate: float
    play_rate: float
    genre_count: int


# Table order breaks score ties.
PERSONALITY_DEFINITIONS: tuple[PersonalityDefinition, ...] = (
    PersonalityDefinition(
        "Completionist",
        "You see games through to the end. No game left behind!",
        ("Persistent", "Thorough", "Achievement Hunter"),
    ),
    PersonalityDefinition(
        "Deep Diver",
        "You get deeply invested in the games you love.",
        ("Immersive", "Committed", "Invested"),
    ),
    PersonalityDefinition(
        "Sampler",
        "You love variety and trying new experiences.",
        ("Curious", "Adventurous", "Open-minded"),
    ),
    PersonalityDefinition(
        "Backlog Hoarder",
        "Your library is... ambitious. We believe in you!",
        ("Deal Hunter", "Optimistic", "Future-focused"),
    ),
    PersonalityDefinition(
        "Balanced Gamer",
        "A healthy mix of playing and completing.",
        ("Disciplined", "Selective", "Mindful"),
    ),
    PersonalityDefinition(
        "Speedrunner",
        "You blaze through games with impressive efficiency.",
        ("Efficient", "Focused", "Goal-oriented"),
    ),
    PersonalityDefinition(
        "Explorer",
        "Genre boundaries cannot contain you.",
        ("Versatile", "Eclectic", "Genre-fluid"),
    ),
)

_PERSONALITY_SCORERS: Mapping[str, Callable[[LibraryProfile], float]] = {
    "Completionist": lambda p: p.completion_rate * 1.5 + (20 if p.average_hours > 20 else 0),
    "Deep Diver": lambda p: (
        80 + min(p.average_hours - 30, 20) if p.average_hours > 30 else p.average_hours * 2
    ),
    "Sampler": lambda p: (
        70 + (p.played_count - 20) if p.played_count > 20 and p.average_hours < 15 else 0
    ),
    "Backlog Hoarder": lambda p: (
        (100 - p.play_rate) * 0.8 + (20 if p.owned_count > 50 else p.owned_count * 0.4)
    ),
    "Balanced Gamer": lambda p: (
        60 if p.play_rate > 50 and 20 < p.completion_rate < 60 else 30
    ),
    "Speedrunner": lambda p: (
        70 + p.completed_count if p.completed_count > 5 and p.average_hours < 12 else 0
    ),
    "Explorer": lambda p: p.genre_count * 5 + 50 if p.genre_count >= 5 else p.genre_count * 10,
}


def build_library_profile(games: Iterable[GameRecord]) -> LibraryProfile:
    owned = [game for game in games if game.status != WISHLIST]
    hours = {id(game): get_total_hours(game) for game in owned}
    played = [game for game in owned if hours[id(game)] > 0]
    completed = [game for game in owned if game.status == COMPLETED]
    total_hours = sum(hours.values())
    return LibraryProfile(
        owned_count=len(owned),
        played_count=len(played),
        completed_count=len(completed),
        average_hours=total_hours / len(played) if played else 0.0,
        completion_rate=len(completed) / len(owned) * 100 if owned else 0.0,
        play_rate=len(played) / len(owned) * 100 if owned else 0.0,
        genre_count=len({game.genre for game in played if game.genre}),
    )


def get_gaming_personality(games: Iterable[GameRecord]) -> Dict[str, Any]:
    """Pick the archetype with the highest score; earlier archetypes win ties."""

    profile = build_library_profile(ensure_collection(games))
    if profile.owned_count == 0:
        return {
            "type": "Balanced Gamer",
            "description": "Just getting started!",
            "traits": [],
            "score": 0,
        }

    best_definition = PERSONALITY_DEFINITIONS[0]
    best_score = float("-inf")
    scores = {}
    for definition in PERSONALITY_DEFINITIONS:
        score = _PERSONALITY_SCORERS[definition.type](profile)
        scores[definition.type] = round(score, 2)
        if score > best_score:
            best_definition, best_score = definition, score

    return {
        "type": best_definition.type,
        "description": best_definition.description,
        "traits": list(best_definition.traits),
        "score": round(min(100.0, best_score), 2),
        "scores": scores,
    }


def get_session_analysis(games: Iterable[GameRecord]) -> Dict[str, Any]:
    logs = get_all_play_logs(games)
    if not logs:
        return {
            "style": "Consistent Player",
            "average_session_length": 0.0,
            "total_sessions": 0,
            "longest_session": 0.0,
            "sessions_per_week": 0.0,
            "description": "Start logging sessions to see your style!",
        }

    hours = [log.hours for _, log in logs]
    average = sum(hours) / len(hours)
    newest, oldest = logs[0][1].date, logs[-1][1].date
    week_span = max(1.0, (newest - oldest).days / 7)
    per_week = len(logs) / week_span

    if average >= 3:
        style, description = "Marathon Runner", "You love long, immersive gaming sessions."
    elif average <= 1:
        style, description = "Snack Gamer", "Quick sessions fit perfectly into your busy life."
    elif per_week >= 5:
        style, description = "Consistent Player", "Gaming is a regular part of your routine."
    elif per_week <= 2 and average > 2:
        style, description = "Weekend Warrior", "You save up your gaming for dedicated sessions."
    else:
        style, description = "Binge & Rest", "Intense bursts followed by breaks. Balance!"

    return {
        "style": style,
        "average_session_length": round(average, 2),
        "total_sessions": len(logs),
        "longest_session": max(hours),
        "sessions_per_week": round(per_week, 2),
        "description": description,
    }


def get_rotation_stats(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    """Games played in the last two weeks and games cooling off for a month or two."""

    today = resolve_today(today)
    two_weeks_ago = today - timedelta(days=14)
    month_ago = today - timedelta(days=30)
    two_months_ago = today - timedelta(days=60)

    active = []
    cooling_off = []
    for game in ensure_collection(games):
        if game.status == WISHLIST:
            continue
        last_played = game.last_played()
        if last_played is None:
            continue
        if last_played >= two_weeks_ago:
            active.append(game)
        elif two_months_ago <= last_played < month_ago and get_total_hours(game) >= 5:
            cooling_off.append(game)

    in_rotation = len(active)
    if in_rotation == 0:
        health, description = "Focused", "No recent sessions logged. Time to play!"
    elif in_rotation == 1:
        health, description = "Obsessed", f"All-in on {active[0].name}. Full immersion!"
    elif in_rotation <= 3:
        health, description = "Healthy", "A nice, manageable rotation of games."
    elif in_rotation <= 5:
        health, description = "Juggling", "Quite a few games in the mix!"
    else:
        health, description = "Overwhelmed", "So many games, so little time!"

    return {
        "active_games": [game_reference(game) for game in active],
        "cooling_off": [game_reference(game) for game in cooling_off],
        "rotation_health": health,
        "games_in_rotation": in_rotation,
        "description": description,
    }


def get_genre_rut_analysis(
    games: Iterable[GameRecord], *, today: date | None = None
) -> Dict[str, Any]:
    collection = ensure_collection(games)
    cutoff = shift_months(resolve_today(today), -3)
    recent = [
        game
        for game in collection
        if any(log.date is not None and log.date >= cutoff for log in game.play_logs)
    ]
    if len(recent) < 3:
        return {
            "is_in_rut": False,
            "dominant_genre": None,
            "dominant_percentage": 0.0,
            "suggestion": "Play more games to see genre patterns!",
            "underexplored_genres": [],
        }

    counts: Dict[str, int] = {}
    for game in recent:
        if game.genre:
            counts[game.genre] = counts.get(game.genre, 0) + 1

    with_genre = sum(counts.values())
    dominant_genre = max(counts, key=counts.get) if counts else None
    dominant_percentage = counts[dominant_genre] / with_genre * 100 if dominant_genre else 0.0
    in_rut = dominant_percentage >= 60

    library_genres = []
    for game in collection:
        if game.genre and game.genre not in library_genres:
            library_genres.append(game.genre)
    underexplored = [genre for genre in library_genres if genre not in counts]

    if in_rut:
        suggestion = (
            f"You've been playing a lot of {dominant_genre}. Maybe try something different?"
        )
    elif underexplored:
        suggestion = (
            f"You have {len(underexplored)} genre(s) in your library you haven't touched recently!"
        )
    else:
        suggestion = "Nice variety in your recent gaming!"

    return {
        "is_in_rut": in_rut,
        "dominant_genre": dominant_genre,
        "dominant_percentage": round(dominant_percentage, 2),
        "suggestion": suggestion,
        "underexplored_genres": underexplored,
    }


@dataclass(frozen=True)
class RelationshipContext:
    status: str
    hours: float
    rating: float
    price: float
    acquired_free: bool
    days_since_last_session: int | None
    days_since_purchase: int | None
    recent_hours: float
    has_sessions: bool


@dataclass(frozen=True)
class RelationshipRule:
    label: str
    description: str
    color: str
    bg_color: str
    applies: Callable[[RelationshipContext], bool]


def _idle_at_least(ctx: RelationshipContext, days: int) -> bool:
    return ctx.days_since_last_session is not None and ctx.days_since_last_session >= days


def _active_within(ctx: RelationshipContext, days: int) -> bool:
    return ctx.days_since_last_session is not None and ctx.days_since_last_session <= days


# Evaluated top to bottom; the first matching rule names the relationship.
RELATIONSHIP_RULES: tuple[RelationshipRule, ...] = (
    RelationshipRule(
        "Crush", "Admiring from afar on the wishlist.", "text-pink-300", "bg-pink-500/10",
        lambda c: c.status == WISHLIST,
    ),
    RelationshipRule(
        "Soulmate", "Finished, adored and deeply invested.", "text-rose-400", "bg-rose-500/10",
        lambda c: c.status == COMPLETED and c.rating >= 9 and c.hours >= 40,
    ),
    RelationshipRule(
        "True Love", "A finished game you truly loved.", "text-red-400", "bg-red-500/10",
        lambda c: c.status == COMPLETED and c.rating >= 9,
    ),
    RelationshipRule(
        "Glad It's Over", "You saw it through, but it wasn't great.", "text-stone-400", "bg-stone-500/10",
        lambda c: c.status == COMPLETED and 0 < c.rating <= 5,
    ),
    RelationshipRule(
        "Still Together", "Finished and still coming back for more.", "text-emerald-400", "bg-emerald-500/10",
        lambda c: c.status == COMPLETED and _active_within(c, 14),
    ),
    RelationshipRule(
        "Happily Ever After", "A story that reached its ending.", "text-green-400", "bg-green-500/10",
        lambda c: c.status == COMPLETED,
    ),
    RelationshipRule(
        "Swiped Left", "Dropped before it got going.", "text-gray-400", "bg-gray-500/10",
        lambda c: c.status == ABANDONED and c.hours < 2,
    ),
    RelationshipRule(
        "The One That Got Away", "A great game you never finished.", "text-indigo-300", "bg-indigo-500/10",
        lambda c: c.status == ABANDONED and c.rating >= 7,
    ),
    RelationshipRule(
        "Broken Up", "It just didn't work out.", "text-slate-400", "bg-slate-500/10",
        lambda c: c.status == ABANDONED,
    ),
    RelationshipRule(
        "Buyer's Remorse", "Paid a premium and never pressed start.", "text-orange-400", "bg-orange-500/10",
        lambda c: (
            c.status == NOT_STARTED
            and not c.acquired_free
            and c.price >= 30
            and c.days_since_purchase is not None
            and c.days_since_purchase >= 180
        ),
    ),
    RelationshipRule(
        "Forgotten", "Sitting untouched for over a year.", "text-zinc-500", "bg-zinc-500/10",
        lambda c: (
            c.status == NOT_STARTED
            and c.days_since_purchase is not None
            and c.days_since_purchase >= 365
        ),
    ),
    RelationshipRule(
        "Just Met", "A fresh arrival in your library.", "text-sky-300", "bg-sky-500/10",
        lambda c: (
            c.status == NOT_STARTED
            and c.days_since_purchase is not None
            and c.days_since_purchase <= 30
        ),
    ),
    RelationshipRule(
        "Waiting in the Wings", "Patiently waiting for its turn.", "text-blue-300", "bg-blue-500/10",
        lambda c: c.status == NOT_STARTED,
    ),
    RelationshipRule(
        "Married", "A long-term commitment you still love.", "text-yellow-300", "bg-yellow-500/10",
        lambda c: c.hours >= 100 and c.rating >= 8,
    ),
    RelationshipRule(
        "Honeymoon Phase", "Can't put it down lately.", "text-fuchsia-400", "bg-fuchsia-500/10",
        lambda c: _active_within(c, 3) and c.recent_hours >= 10,
    ),
    RelationshipRule(
        "Going Steady", "A regular part of your week.", "text-teal-400", "bg-teal-500/10",
        lambda c: _active_within(c, 7),
    ),
    RelationshipRule(
        "Ghosted", "No word in months.", "text-neutral-500", "bg-neutral-500/10",
        lambda c: _idle_at_least(c, 90) or (c.hours > 0 and not c.has_sessions),
    ),
    RelationshipRule(
        "It's Complicated", "On and off for a while now.", "text-amber-400", "bg-amber-500/10",
        lambda c: _idle_at_least(c, 30),
    ),
    RelationshipRule(
        "Toxic Relationship", "Lots of hours, not much joy.", "text-red-600", "bg-red-700/10",
        lambda c: 0 < c.rating <= 4 and c.hours >= 10,
    ),
    RelationshipRule(
        "Casual Fling", "Light, low-commitment fun.", "text-purple-300", "bg-purple-500/10",
        lambda c: c.hours < 5,
    ),
    RelationshipRule(
        "On a Break", "Taking a little time apart.", "text-cyan-300", "bg-cyan-500/10",
        lambda c: True,
    ),
)


def build_relationship_context(game: GameRecord, today: date) -> RelationshipContext:
    last_played = game.last_played()
    recent_cutoff = today - timedelta(days=14)
    return RelationshipContext(
        status=game.status,
        hours=get_total_hours(game),
        rating=game.rating,
        price=game.price,
        acquired_free=game.acquired_free,
        days_since_last_session=(today - last_played).days if last_played else None,
        days_since_purchase=(
            (today - game.date_purchased).days if game.date_purchased else None
        ),
        recent_hours=sum(
            log.hours
            for log in game.play_logs
            if log.date is not None and recent_cutoff <= log.date <= today
        ),
        has_sessions=bool(game.play_logs),
    )


def get_relationship_status(game: GameRecord, *, today: date | None = None) -> Dict[str, str]:
    context = build_relationship_context(game, resolve_today(today))
    rule = next(rule for rule in RELATIONSHIP_RULES if rule.applies(context))
    return {
        "label": rule.label,
        "description": rule.description,
        "color": rule.color,
        "bg_color": rule.bg_color,
    }


VALUE_TIER_WEIGHTS: Mapping[str, float] = {
    "Excellent": 1.0,
    "Good": 0.7,
    "Fair": 0.4,
    "Poor": 0.1,
}

RARITY_TIERS: tuple[tuple[float, str, str], ...] = (
    (85, "legendary", "Legendary"),
    (70, "epic", "Epic"),
    (50, "rare", "Rare"),
    (30, "uncommon", "Uncommon"),
    (0, "common", "Common"),
)


def get_card_rarity(game: GameRecord) -> Dict[str, Any]:
    """Weighted composite of rating, value tier, hours and completion."""

    hours = get_total_hours(game)
    if hours > 0:
        value_rating = get_value_rating(calculate_cost_per_hour(game.price, hours))
        value_weight = VALUE_TIER_WEIGHTS.get(value_rating, 0.0)
    else:
        value_weight = 0.0

    rating_part = max(0.0, min(game.rating, 10.0)) / 10 * 40
    hours_part = min(hours, 100.0) / 100 * 20
    completion_part = 10.0 if game.status == COMPLETED else 0.0
    score = round(rating_part + value_weight * 30 + hours_part + completion_part, 2)

    for cutoff, tier, label in RARITY_TIERS:
        if score >= cutoff:
            return {"tier": tier, "label": label, "score": score}
    return {"tier": "common", "label": "Common", "score": score}


def _completion_verdict(probability: int) -> str:
    if probability >= 70:
        return "You'll very likely finish this one."
    if probability >= 40:
        return "Could go either way."
    return "Odds are slim. Maybe it's time to move on?"


def get_completion_probability(
    game: GameRecord,
    games: Iterable[GameRecord],
    *,
    today: date | None = None,
) -> Dict[str, Any]:
    """Explainable estimate that ``game`` gets finished.

    Starts at 50 and applies named adjustments. The result is clamped to
    5..95 and the adjustments are sorted by magnitude. A completed game skips
    the scoring and reports a flat 100.
    """

    collection = ensure_collection(games)
    today = resolve_today(today)

    if game.status == COMPLETED:
        return {
            "probability": 100,
            "factors": [{"label": "Already completed", "impact": 0}],
            "verdict": "Already in the books!",
        }

    factors: List[Dict[str, Any]] = []

    def adjust(label: str, impact: int) -> None:
        if impact:
            factors.append({"label": label, "impact": impact})

    if game.genre:
        finished = [
            other
            for other in collection
            if other.id != game.id
            and other.genre == game.genre
            and other.status in (COMPLETED, ABANDONED)
        ]
        if len(finished) >= 2:
            rate = sum(1 for other in finished if other.status == COMPLETED) / len(finished)
            adjust(f"{game.genre} completion history", round((rate - 0.5) * 40))

    last_played = game.last_played()
    if last_played is None:
        adjust("Never started", -10)
    else:
        idle_days = (today - last_played).days
        if idle_days <= 7:
            adjust("Played this week", 15)
        elif idle_days <= 30:
            adjust("Played this month", 5)
        elif idle_days >= 90:
            adjust("Untouched for 3+ months", -20)

    recent = sum(
        1
        for log in game.play_logs
        if log.date is not None and today - timedelta(days=30) < log.date <= today
    )
    earlier = sum(
        1
        for log in game.play_logs
        if log.date is not None
        and today - timedelta(days=60) < log.date <= today - timedelta(days=30)
    )
    if recent > earlier:
        adjust("Sessions picking up", 10)
    elif recent < earlier:
        adjust("Sessions slowing down", -10)

    hours = get_total_hours(game)
    if hours >= 20:
        adjust("Heavily invested", 10)
    elif hours >= 5:
        adjust("Some time invested", 5)

    if game.rating >= 8:
        adjust("Rated highly", 10)
    elif 0 < game.rating <= 4:
        adjust("Low rating", -15)

    if game.status == ABANDONED:
        adjust("Marked abandoned", -30)

    owned = [other for other in collection if other.status != WISHLIST]
    if owned:
        library_rate = sum(1 for other in owned if other.status == COMPLETED) / len(owned)
        if library_rate >= 0.5:
            adjust("You finish what you start", 10)
        elif library_rate < 0.2:
            adjust("Low overall completion rate", -10)

    probability = int(round(max(5, min(95, 50 + sum(f["impact"] for f in factors)))))
    factors.sort(key=lambda factor: abs(factor["impact"]), reverse=True)
    return {
        "probability": probability,
        "factors": factors,
        "verdict": _completion_verdict(probability),
    }


@dataclass(frozen=True)
class TrophyDefinition:
    id: str
    name: str
    description: str
    tier: str
    metric: str
    target: float


TROPHY_TIERS: tuple[str, ...] = ("bronze", "silver", "gold", "platinum")

TROPHY_DEFINITIONS: tuple[TrophyDefinition, ...] = (
    TrophyDefinition("finisher_bronze", "Finisher", "Complete 5 games", "bronze", "completed", 5),
    TrophyDefinition("finisher_silver", "Closer", "Complete 25 games", "silver", "completed", 25),
    TrophyDefinition("finisher_gold", "Credits Roller", "Complete 50 games", "gold", "completed", 50),
    TrophyDefinition("finisher_platinum", "Legend of Completion", "Complete 100 games", "platinum", "completed", 100),
    TrophyDefinition("hours_bronze", "Warming Up", "Log 100 total hours", "bronze", "hours", 100),
    TrophyDefinition("hours_silver", "Dedicated", "Log 500 total hours", "silver", "hours", 500),
    TrophyDefinition("hours_gold", "Lifer", "Log 1000 total hours", "gold", "hours", 1000),
    TrophyDefinition("hours_platinum", "No Life", "Log 5000 total hours", "platinum", "hours", 5000),
    TrophyDefinition("library_bronze", "Shelf Starter", "Own 25 games", "bronze", "owned", 25),
    TrophyDefinition("library_silver", "Collector", "Own 100 games", "silver", "owned", 100),
    TrophyDefinition("library_gold", "Curator", "Own 250 games", "gold", "owned", 250),
    TrophyDefinition("library_platinum", "Archivist", "Own 500 games", "platinum", "owned", 500),
    TrophyDefinition("genres_bronze", "Curious", "Play 3 genres", "bronze", "genres", 3),
    TrophyDefinition("genres_silver", "Well Rounded", "Play 5 genres", "silver", "genres", 5),
    TrophyDefinition("genres_gold", "Genre Hopper", "Play 8 genres", "gold", "genres", 8),
    TrophyDefinition("genres_platinum", "Omnivore", "Play 12 genres", "platinum", "genres", 12),
    TrophyDefinition("century_silver", "Century Club", "Put 100 hours into one game", "silver", "max_game_hours", 100),
    TrophyDefinition("century_platinum", "Thousand Hour Club", "Put 1000 hours into one game", "platinum", "max_game_hours", 1000),
    TrophyDefinition("franchise_gold", "Franchise Faithful", "Own 5 games from one franchise", "gold", "franchise_depth", 5),
)


def _trophy_metrics(games: Iterable[GameRecord]) -> Dict[str, float]:
    owned = [game for game in games if game.status != WISHLIST]
    hours = [get_total_hours(game) for game in owned]
    franchise_counts: Dict[str, int] = {}
    for game in owned:
        if game.franchise:
            franchise_counts[game.franchise] = franchise_counts.get(game.franchise, 0) + 1
    return {
        "completed": sum(1 for game in owned if game.status == COMPLETED),
        "hours": sum(hours),
        "owned": len(owned),
        "genres": len({game.genre for game, h in zip(owned, hours) if game.genre and h > 0}),
        "max_game_hours": max(hours, default=0.0),
        "franchise_depth": max(franchise_counts.values(), default=0),
    }


def get_collection_trophies(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    metrics = _trophy_metrics(ensure_collection(games))
    trophies = []
    for definition in TROPHY_DEFINITIONS:
        current = metrics[definition.metric]
        trophies.append(
            {
                "id": definition.id,
                "name": definition.name,
                "description": definition.description,
                "tier": definition.tier,
                "earned": current >= definition.target,
                "progress": round(min(100.0, current / definition.target * 100), 2),
                "current": round(current, 2),
                "target": definition.target,
            }
        )
    return trophies


def get_gaming_achievements(games: Iterable[GameRecord]) -> List[Dict[str, Any]]:
    """Progress toward fixed library achievements, unlocked ones first."""

    collection = ensure_collection(games)
    owned = [game for game in collection if game.status != WISHLIST]
    hours = {id(game): get_total_hours(game) for game in owned}
    played = [game for game in owned if hours[id(game)] > 0]
    completed = [game for game in owned if game.status == COMPLETED]
    total_hours = sum(hours.values())
    max_hours = max((hours[id(game)] for game in played), default=0.0)
    genres = len({game.genre for game in played if game.genre})
    free_games = [game for game in owned if game.acquired_free]
    discounted = [
        game
        for game in owned
        if game.original_price and game.original_price > game.price and not game.acquired_free
    ]
    high_rated = [game for game in played if game.rating >= 9]
    longest_streak = get_longest_gaming_streak(collection)
    total_saved = get_patient_gamer_stats(collection)["total_saved"]

    def counter(id_: str, name: str, description: str, current: float, target: float):
        return {
            "id": id_,
            "name": name,
            "description": description,
            "unlocked": current >= target,
            "progress": round(min(100.0, current / target * 100), 2),
            "target": target,
            "current": int(current),
        }

    achievements = [
        {
            "id": "century_club",
            "name": "Century Club",
            "description": "Have a game with 100+ hours",
            "unlocked": max_hours >= 100,
            "progress": 100.0 if max_hours >= 100 else round(min(99.0, max_hours), 2),
            "target": None,
            "current": None,
        },
        counter("thousand_hours", "Dedicated Gamer", "Log 1000 total hours", total_hours, 1000),
        counter("completionist", "Completionist", "Complete 10 games", len(completed), 10),
        counter("genre_explorer", "Genre Explorer", "Play games from 8 different genres", genres, 8),
        counter("free_rider", "Free Rider", "Claim 10 free games", len(free_games), 10),
        counter("bargain_hunter", "Bargain Hunter", "Buy 20 games on sale", len(discounted), 20),
        counter("critic", "Hard to Please", "Rate 5 games 9/10 or higher", len(high_rated), 5),
        counter("streak_master", "Streak Master", "Maintain a 7-day gaming streak", longest_streak, 7),
        counter("patient_gamer", "Patient Gamer", "Save $100 from discounts", total_saved, 100),
        counter("library_builder", "Library Builder", "Own 50 games", len(owned), 50),
    ]
    achievements.sort(key=lambda item: (not item["unlocked"], -item["progress"]))
    return achievements
