"""Tests for scope and window parsing."""

from datetime import date

import pytest

from ledgerhealth.domain import errors
from ledgerhealth.domain.entities import Scope, Window
from ledgerhealth.domain.errors import ValidationError
from ledgerhealth.domain.scope import is_uuid, parse_scope, parse_window, resolve_overview_window

UNIT_ID = "0b7e8f6c-8f55-4b61-9a77-2f1ab0c4d3e2"


def test_is_uuid():
    assert is_uuid(UNIT_ID)
    assert not is_uuid("0b7e8f6c")
    assert not is_uuid(None)


def test_parse_scope():
    assert parse_scope(None, f" {UNIT_ID} ") == Scope(unit_id=UNIT_ID)
    assert parse_scope("", "") == Scope()


def test_parse_scope_rejects_malformed_ids():
    with pytest.raises(ValidationError) as exc_info:
        parse_scope(unit_id="abc")
    assert exc_info.value.code == errors.INVALID_UNIT_ID

    with pytest.raises(ValidationError) as exc_info:
        parse_scope(program_id="abc")
    assert exc_info.value.code == errors.INVALID_PROGRAM_ID


def test_parse_window():
    assert parse_window("2024-01-01", None) == Window(start=date(2024, 1, 1))
    with pytest.raises(ValidationError) as exc_info:
        parse_window("yesterday-ish")
    assert exc_info.value.code == errors.INVALID_DATE


def test_parse_window_moves_start_to_month_start():
    window = parse_window("2024-01-15", "2024-02-15")
    assert window == Window(start=date(2024, 1, 1), end=date(2024, 2, 15))
    assert window.contains(date(2024, 1, 1))
    assert window.contains(date(2024, 2, 1))


def test_window_is_half_open():
    window = Window(start=date(2024, 1, 1), end=date(2024, 2, 1))
    assert window.contains(date(2024, 1, 1))
    assert not window.contains(date(2024, 2, 1))


class TestOverviewWindow:
    """Tests for the health overview window resolution."""

    def test_explicit_bounds_are_bucketed(self):
        window = resolve_overview_window("12m", "2024-01-15", "2024-03-10")
        assert window == Window(start=date(2024, 1, 1), end=date(2024, 3, 1))

    def test_defaults_to_last_three_full_months(self):
        window = resolve_overview_window(today=date(2024, 5, 17))
        assert window == Window(start=date(2024, 2, 1), end=date(2024, 5, 1))

    def test_one_bound_falls_back_to_preset(self):
        window = resolve_overview_window("6m", start="2020-01-01", today=date(2024, 5, 17))
        assert window == Window(start=date(2023, 11, 1), end=date(2024, 5, 1))

    def test_unknown_preset(self):
        with pytest.raises(ValidationError):
            resolve_overview_window("decade")
