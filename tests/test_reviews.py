from datetime import date

import pytest

from playstats.records import GameRecord, PlayLogRecord
from playstats.reviews import (
    get_last_completed_week_stats,
    get_month_in_review,
    get_week_stats_for_offset,
    get_year_in_review,
    get_yearly_wrapped_data,
)


def _library():
    deep_dive = GameRecord(
        id="a",
        name="Deep Dive",
        status="In Progress",
        price=30,
        hours=45,
        rating=8,
        genre="RPG",
        date_purchased=date(2024, 1, 5),
        play_logs=(
            PlayLogRecord("a1", date(2024, 1, 8), 3, mood="loved"),
            PlayLogRecord("a2", date(2024, 1, 9), 2, mood="meh"),
            PlayLogRecord("a3", date(2024, 1, 13), 4),
        ),
    )
    quick_bits = GameRecord(
        id="b",
        name="Quick Bits",
        status="In Progress",
        price=0,
        original_price=15,
        acquired_free=True,
        rating=8,
        genre="Puzzle",
        date_purchased=date(2023, 12, 20),
        play_logs=(
            PlayLogRecord("b1", date(2024, 1, 3), 2),
            PlayLogRecord("b2", date(2024, 1, 14), 0.5),
        ),
    )
    finish_line = GameRecord(
        id="c",
        name="Finish Line",
        status="Completed",
        price=20,
        hours=12,
        rating=9,
        genre="Action",
        date_purchased=date(2024, 2, 1),
        start_date=date(2024, 2, 1),
        end_date=date(2024, 2, 11),
    )
    return (deep_dive, quick_bits, finish_line)


def test_week_review_covers_last_completed_week():
    week = get_week_stats_for_offset(_library(), 0, today=date(2024, 1, 17))

    assert week["week_start"] == "2024-01-08"
    assert week["week_end"] == "2024-01-14"
    assert week["total_hours"] == pytest.approx(9.5)
    assert week["total_sessions"] == 4
    assert week["unique_games"] == 2
    assert week["gaming_style"] == "Dabbler"
    assert week["week_vibe"] == "Quality Gaming"
    assert week["rest_days"] == ["Wed", "Thu", "Fri"]
    assert week["busiest_day"]["day"] == "Sat"
    assert week["current_streak"] == 2
    assert week["longest_streak"] == 2
    assert (week["marathon_sessions"], week["power_sessions"], week["quick_sessions"]) == (2, 1, 1)
    assert week["top_game"]["game"]["name"] == "Deep Dive"
    assert week["top_game"]["percentage"] == pytest.approx(94.74)
    assert week["focus_score"] == 95
    assert week["most_consistent_game"]["days_played"] == 3


def test_week_review_compares_against_previous_weeks():
    week = get_week_stats_for_offset(_library(), 0, today=date(2024, 1, 17))

    assert week["vs_last_week"] == {
        "hours_diff": 7.5,
        "games_diff": 1,
        "sessions_diff": 3,
        "trend": "up",
    }
    assert week["vs_average"]["percentage"] == pytest.approx(1900.0)
    assert week["best_value_game"]["cost_per_hour"] == pytest.approx(3.33)
    assert week["total_cost_per_hour"] == pytest.approx(3.16)


def test_week_review_reports_milestones_and_new_games():
    week = get_last_completed_week_stats(_library(), today=date(2024, 1, 17))

    assert week["milestones_reached"] == [
        {
            "game": {
                "id": "a",
                "name": "Deep Dive",
                "thumbnail": None,
                "genre": "RPG",
                "platform": None,
                "status": "In Progress",
            },
            "milestone": "Half Century (50h)",
        }
    ]
    assert [game["name"] for game in week["new_games_started"]] == ["Deep Dive"]


def test_week_review_empty_week_is_a_rest_week():
    week = get_week_stats_for_offset(_library(), -1, today=date(2024, 6, 5))

    assert week["total_hours"] == 0
    assert week["week_vibe"] == "Rest Week"
    assert week["busiest_day"] is None
    assert week["top_game"] is None
    assert len(week["rest_days"]) == 7


def test_week_review_rejects_future_offsets():
    with pytest.raises(ValueError):
        get_week_stats_for_offset(_library(), -2, today=date(2024, 1, 17))


def test_month_review_summarizes_play_and_spending():
    month = get_month_in_review(_library(), 2024, 1, today=date(2024, 2, 5))

    assert month["month_label"] == "January 2024"
    assert month["total_hours"] == pytest.approx(11.5)
    assert month["total_sessions"] == 5
    assert month["days_active"] == 5
    assert month["longest_streak"] == 2
    assert month["biggest_day"]["date"] == "2024-01-13"
    assert month["games_purchased"] == 1
    assert month["total_spent"] == pytest.approx(30)
    assert month["best_deal"]["cost_per_hour"] == pytest.approx(0.56)
    assert month["discovery_game"]["game"]["name"] == "Deep Dive"
    assert month["mood_score"] == pytest.approx(70.0)
    assert month["personality"]["label"] == "One-Game Wonder"
    assert month["vs_last_month"]["trend"] == "up"
    assert month["vs_last_month"]["spending_diff"] == pytest.approx(30)
    assert len(month["daily_hours"]) == 31
    assert (month["weekday_hours"], month["weekend_hours"]) == (7.0, 4.5)
    assert month["weekend_percentage"] == pytest.approx(39.13)
    assert month["weekday_percentage"] == pytest.approx(60.87)
    assert [week["week_start"] for week in month["weekly_hours"]][:2] == ["2024-01-01", "2024-01-08"]
    assert [week["hours"] for week in month["weekly_hours"]] == [2.0, 9.5, 0.0, 0.0, 0.0]
    assert month["vs_average"] == {"percentage": 0.0, "hours_diff": 11.5}
    assert month["mood"] == {
        "score": 70.0,
        "dominant_mood": "loved",
        "coverage": 43.48,
        "trend": "steady",
        "weekly_arc": [{"week_start": "2024-01-08", "score": 70.0}],
    }


def _steady_player():
    return GameRecord(
        id="s",
        name="Steady Sim",
        status="In Progress",
        price=25,
        play_logs=(
            PlayLogRecord("s1", date(2023, 11, 10), 2),
            PlayLogRecord("s2", date(2023, 12, 10), 2),
            PlayLogRecord("s3", date(2024, 1, 10), 2),
            PlayLogRecord("s4", date(2024, 2, 10), 2),
            PlayLogRecord("s5", date(2024, 3, 5), 4),
        ),
    )


def test_month_review_compares_with_the_four_month_average():
    month = get_month_in_review([_steady_player()], 2024, 3, today=date(2024, 4, 1))

    assert month["vs_last_month"]["hours_diff"] == pytest.approx(2.0)
    assert month["vs_average"] == {"percentage": 200.0, "hours_diff": 2.0}
    assert month["weekday_percentage"] == 100.0
    assert month["weekend_percentage"] == 0.0
    assert [week["week_start"] for week in month["weekly_hours"]] == [
        "2024-02-26",
        "2024-03-04",
        "2024-03-11",
        "2024-03-18",
        "2024-03-25",
    ]
    assert [week["hours"] for week in month["weekly_hours"]] == [0.0, 4.0, 0.0, 0.0, 0.0]


def test_year_review_compares_with_previous_years():
    review = get_year_in_review([_steady_player()], 2024)

    assert review["vs_last_year"]["hours_diff"] == pytest.approx(4.0)
    assert review["vs_last_year"]["sessions_diff"] == 1
    assert review["vs_last_year"]["trend"] == "up"
    assert review["vs_average"] == {"percentage": 800.0, "hours_diff": 7.0}


def test_month_review_rejects_invalid_month():
    with pytest.raises(ValueError):
        get_month_in_review(_library(), 2024, 0, today=date(2024, 2, 5))


def test_year_review_counts_acquisitions_and_genres():
    review = get_year_in_review(_library(), 2024)

    assert review["games_acquired"] == 2
    assert review["games_completed"] == 1
    assert review["total_spent"] == pytest.approx(50)
    assert review["total_hours"] == pytest.approx(11.5)
    assert review["average_cost_per_hour"] == pytest.approx(4.35)
    assert review["top_game"] == {"name": "Deep Dive", "hours": 9}
    assert review["month_with_most_spending"] == {"month": "2024-01", "amount": 30}
    assert review["new_genres_tried"] == 2
    assert review["longest_session"] == {"game": "Deep Dive", "hours": 4}
    assert review["weekend_hours"] == pytest.approx(4.5)
    assert review["weekend_percentage"] == pytest.approx(39.13)
    assert review["vs_last_year"] == {
        "hours_diff": 11.5,
        "sessions_diff": 5,
        "games_acquired_diff": 1,
        "games_completed_diff": 1,
        "spending_diff": 50,
        "trend": "up",
    }
    assert review["vs_average"] == {"percentage": 0.0, "hours_diff": 11.5}


def test_wrapped_picks_highlights_for_the_year():
    wrapped = get_yearly_wrapped_data(_library(), 2024, today=date(2025, 3, 1))

    assert wrapped["has_data"] is True
    assert wrapped["completion_rate"] == pytest.approx(50.0)
    assert wrapped["hours_per_week"] == pytest.approx(0.22)
    assert wrapped["game_of_the_year"]["game"]["name"] == "Deep Dive"
    assert wrapped["peak_month"] == {"label": "January 2024", "hours": 11.5}
    assert wrapped["fastest_completion"] == {"name": "Finish Line", "days": 10}
    assert wrapped["best_value"] == {"name": "Deep Dive", "cost_per_hour": 0.56}
    assert wrapped["biggest_surprise"] == {
        "name": "Quick Bits",
        "reason": "Rated 8/10 and didn't cost a thing",
    }
    assert isinstance(wrapped["personality_type"], str)


def test_wrapped_for_an_empty_year_has_no_data():
    wrapped = get_yearly_wrapped_data(_library(), 2020, today=date(2025, 3, 1))

    assert wrapped["has_data"] is False
    assert wrapped["top_games"] == []
    assert wrapped["peak_month"] is None
