from datetime import date, datetime

import pytest

from playstats.dates import (
    days_ago,
    days_between,
    format_week_label,
    month_bounds,
    month_key,
    parse_local_date,
    shift_months,
    week_bounds,
    weeks_ago,
)


def test_parse_local_date_keeps_calendar_day():
    parsed = parse_local_date("2025-02-10")

    assert parsed == date(2025, 2, 10)
    assert month_key(parsed) == "2025-02"


def test_parse_local_date_ignores_time_and_offset_suffix():
    assert parse_local_date("2025-03-01T00:00:00-08:00") == date(2025, 3, 1)
    assert parse_local_date(datetime(2024, 12, 31, 23, 59)) == date(2024, 12, 31)


@pytest.mark.parametrize("value", [None, "", "not a date", "2024-13-01", "2024-02-30"])
def test_parse_local_date_treats_malformed_values_as_absent(value):
    assert parse_local_date(value) is None


def test_days_between_is_order_independent():
    assert days_between(date(2024, 1, 10), date(2024, 1, 1)) == 9
    assert days_between(date(2024, 1, 1), date(2024, 1, 10)) == 9
    assert days_between(None, date(2024, 1, 1)) is None


def test_week_bounds_offsets_from_current_week():
    wednesday = date(2024, 1, 17)

    assert week_bounds(wednesday, -1) == (date(2024, 1, 15), date(2024, 1, 21))
    assert week_bounds(wednesday, 0) == (date(2024, 1, 8), date(2024, 1, 14))
    assert week_bounds(wednesday, 2) == (date(2023, 12, 25), date(2023, 12, 31))


def test_month_bounds_and_shift_months_handle_short_months():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert shift_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert shift_months(date(2024, 1, 15), -6) == date(2023, 7, 15)

    with pytest.raises(ValueError):
        month_bounds(2024, 13)


def test_format_week_label_spans_months():
    assert format_week_label(date(2024, 1, 29), date(2024, 2, 4)) == "Jan 29 - Feb 4, 2024"


def test_weeks_ago_steps_whole_weeks():
    assert weeks_ago(date(2024, 1, 15), 2) == date(2024, 1, 1)


def test_date_shifts_past_the_calendar_raise_value_error():
    with pytest.raises(ValueError):
        week_bounds(date(2024, 1, 10), 1_000_000)
    with pytest.raises(ValueError):
        days_ago(date(2024, 1, 10), 10**10)
    with pytest.raises(ValueError):
        shift_months(date(1, 1, 15), -1)
    with pytest.raises(ValueError):
        shift_months(date(9999, 12, 1), 1)
