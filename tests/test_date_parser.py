"""Tests for date parsing and month arithmetic."""

from datetime import date, datetime

import pytest

from ledgerhealth.utils.date_parser import (
    days_in_month,
    get_period_window,
    month_bucket,
    month_label,
    next_month,
    parse_date,
    to_date,
)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_iso_timestamp():
    assert parse_date("2024-01-15T08:00:00Z") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


def test_parse_invalid():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_to_date():
    assert to_date(None) is None
    assert to_date("") is None
    assert to_date(datetime(2024, 3, 9, 12, 0)) == date(2024, 3, 9)
    assert to_date(date(2024, 3, 9)) == date(2024, 3, 9)
    with pytest.raises(ValueError):
        to_date(20240309)


def test_month_helpers():
    assert month_bucket(date(2024, 2, 29)) == date(2024, 2, 1)
    assert next_month(date(2024, 12, 15)) == date(2025, 1, 1)
    assert days_in_month(date(2024, 2, 1)) == 29
    assert month_label(date(2024, 2, 1)) == "2024-02"


@pytest.mark.parametrize(
    "period,expected",
    [
        ("3m", (date(2024, 2, 1), date(2024, 5, 1))),
        ("6m", (date(2023, 11, 1), date(2024, 5, 1))),
        ("12m", (date(2023, 5, 1), date(2024, 5, 1))),
        ("YTD", (date(2024, 1, 1), date(2024, 5, 1))),
    ],
)
def test_get_period_window(period, expected):
    """Windows end at the start of the current month."""
    assert get_period_window(period, today=date(2024, 5, 17)) == expected


def test_get_period_window_unknown():
    with pytest.raises(ValueError):
        get_period_window("forever")
