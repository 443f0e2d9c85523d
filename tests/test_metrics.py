from datetime import date

import pytest

from playstats.metrics import (
    calculate_blend_score,
    calculate_metrics,
    calculate_roi,
    get_roi_rating,
    get_total_hours,
    get_value_rating,
    rating_weight,
    summarize_session_moods,
)
from playstats.records import GameRecord, PlayLogRecord


def _game(**overrides):
    values = {"id": "1", "name": "Test Game", "status": "In Progress"}
    values.update(overrides)
    return GameRecord(**values)


def test_total_hours_adds_baseline_and_logged_sessions():
    game = _game(
        hours=10,
        play_logs=(
            PlayLogRecord("a", date(2024, 1, 1), 2.5),
            PlayLogRecord("b", date(2024, 1, 2), 1.5),
        ),
    )

    assert get_total_hours(game) == pytest.approx(14.0)


def test_calculate_metrics_matches_sixty_dollar_scenario():
    game = _game(
        price=60,
        hours=30,
        rating=8,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 21),
    )

    metrics = calculate_metrics(game)

    assert metrics.cost_per_hour == pytest.approx(2.0)
    assert metrics.value_rating == "Good"
    # 80 + (10 - (2 / 3.5) * 10)
    assert metrics.blend_score == pytest.approx(84.29)
    assert metrics.normalized_cost == pytest.approx(0.5714)
    assert metrics.days_to_complete == 20


def test_free_game_roi_is_uncapped_weight_times_hours():
    game = _game(price=0, acquired_free=True, hours=20, rating=9)

    metrics = calculate_metrics(game)

    assert metrics.cost_per_hour == 0
    assert metrics.value_rating == "Excellent"
    assert metrics.roi == pytest.approx(rating_weight(9) * 20)
    assert metrics.roi == pytest.approx(75.0)


def test_unplayed_game_has_zero_cost_per_hour_and_no_completion_time():
    metrics = calculate_metrics(_game(price=40, rating=0))

    assert metrics.cost_per_hour == 0
    assert metrics.value_rating == "Excellent"
    assert metrics.days_to_complete is None


@pytest.mark.parametrize(
    "cost_per_hour, expected",
    [(0, "Excellent"), (1, "Excellent"), (1.01, "Good"), (3, "Good"), (5, "Fair"), (5.01, "Poor")],
)
def test_value_rating_thresholds_are_inclusive(cost_per_hour, expected):
    assert get_value_rating(cost_per_hour) == expected


def test_blend_score_is_monotonic():
    assert calculate_blend_score(9, 2) > calculate_blend_score(8, 2)
    assert calculate_blend_score(8, 1) >= calculate_blend_score(8, 2)
    assert calculate_blend_score(8, 10) == calculate_blend_score(8, 50)


def test_roi_weights_grow_convexly_and_clamp_out_of_range_ratings():
    assert rating_weight(10) == pytest.approx(2 * rating_weight(9))
    assert rating_weight(9) == pytest.approx(1.5 * rating_weight(8))
    assert rating_weight(12) == rating_weight(10)
    assert rating_weight(-3) == rating_weight(0)
    assert calculate_roi(8, 30, 60) == pytest.approx(5.8)
    assert get_roi_rating(5.8) == "Excellent"
    assert get_roi_rating(0.2) == "Poor"


def test_session_moods_weight_by_hours_and_build_a_weekly_arc():
    sessions = [
        PlayLogRecord("1", date(2024, 3, 4), 3, mood="Loved"),
        PlayLogRecord("2", date(2024, 3, 6), 1, mood="meh"),
        PlayLogRecord("3", date(2024, 3, 7), 2),
        PlayLogRecord("4", date(2024, 3, 12), 2, mood="frustrated"),
        PlayLogRecord("5", date(2024, 3, 13), 0, mood="good"),
    ]

    summary = summarize_session_moods(sessions)

    assert summary.total_hours == pytest.approx(8.0)
    assert summary.rated_hours == pytest.approx(6.0)
    assert summary.score == pytest.approx((100 * 3 + 25 * 1 + 0 * 2) / 6)
    assert summary.dominant_mood == "loved"
    assert summary.weekly_arc == (
        (date(2024, 3, 4), 81.25),
        (date(2024, 3, 11), 0.0),
    )
    assert summary.trend == "souring"
    assert summary.to_dict()["coverage"] == 75.0


def test_session_moods_without_moods_have_no_score():
    summary = summarize_session_moods([PlayLogRecord("1", date(2024, 3, 4), 2)])

    assert summary.score is None
    assert summary.dominant_mood is None
    assert summary.trend == "steady"
    assert summary.to_dict() == {
        "score": None,
        "dominant_mood": None,
        "coverage": 0.0,
        "trend": "steady",
        "weekly_arc": [],
    }


def test_session_mood_weights_can_be_overridden():
    sessions = [PlayLogRecord("1", None, 2, mood="Hyped")]

    summary = summarize_session_moods(sessions, mood_weights={"HYPED": 90})

    assert summary.score == pytest.approx(90.0)
    assert summary.weekly_arc == ()
