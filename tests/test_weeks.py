"""Tests for ISO week arithmetic."""
from datetime import date

import pytest

from services.weeks import (
    current_week_identifier,
    parse_iso_date,
    parse_week_identifier,
    week_dates,
    week_day_to_date,
    week_day_to_iso_date,
    week_one_monday,
    weeks_in_year,
)

from conftest import TODAY


def test_first_day_of_2024():
    assert week_day_to_iso_date('2024-W01', 0) == '2024-01-01'


def test_week_one_starting_in_previous_year():
    # Jan 4 2026 is a Sunday, so week 1 starts on Monday Dec 29 2025
    assert week_one_monday(2026) == date(2025, 12, 29)
    thursday = week_day_to_date('2026-W02', 3)
    assert thursday == date(2026, 1, 8)
    assert thursday.isocalendar()[:3] == (2026, 2, 4)


def test_week_53_runs_into_next_year():
    assert week_day_to_iso_date('2020-W53', 6) == '2021-01-03'


def test_matches_isocalendar_for_a_whole_year():
    day = date(2026, 1, 1)
    while day.year == 2026:
        year, week, weekday = day.isocalendar()[:3]
        assert week_day_to_date(f"{year}-W{week:02d}", weekday - 1) == day
        day = date.fromordinal(day.toordinal() + 1)


@pytest.mark.parametrize('week', ['', 'garbage', '2026-W2', '2026W02', '2026-W00', '2026-W54', '2025-W53', None, 202602])
def test_malformed_week_falls_back_to_today(week):
    assert week_day_to_date(week, 3, today=TODAY) == TODAY


def test_week_past_the_last_representable_date_falls_back_to_today():
    last_week = f"9999-W{weeks_in_year(9999):02d}"
    assert week_day_to_date(last_week, 6, today=TODAY) == TODAY
    assert week_day_to_date('9999-W53', 6, today=TODAY) == TODAY


def test_weeks_in_year():
    assert weeks_in_year(2020) == 53
    assert weeks_in_year(2025) == 52
    assert weeks_in_year(2026) == 53
    assert parse_week_identifier('2026-W53') == (2026, 53)
    assert parse_week_identifier('2025-W53') is None


@pytest.mark.parametrize('day_id', [-1, 7, 1.5, '2', None, True])
def test_bad_day_id_raises(day_id):
    with pytest.raises(ValueError):
        week_day_to_date('2026-W02', day_id)


def test_parse_week_identifier():
    assert parse_week_identifier('2026-W02') == (2026, 2)
    assert parse_week_identifier(' 2020-W53 ') == (2020, 53)
    assert parse_week_identifier('2026-W60') is None


def test_current_week_identifier():
    assert current_week_identifier(TODAY) == '2026-W43'
    assert current_week_identifier(date(2021, 1, 1)) == '2020-W53'
    assert current_week_identifier(date(2024, 12, 30)) == '2025-W01'


def test_week_dates_are_monday_to_sunday():
    dates = week_dates('2024-W01')
    assert dates[0] == date(2024, 1, 1)
    assert dates[-1] == date(2024, 1, 7)
    assert [d.weekday() for d in dates] == list(range(7))


def test_parse_iso_date():
    assert parse_iso_date('2026-01-05') == date(2026, 1, 5)
    assert parse_iso_date('2026-01-05T10:00:00') == date(2026, 1, 5)
    assert parse_iso_date(None) is None
    assert parse_iso_date('not a date') is None
