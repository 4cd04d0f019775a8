"""Tests for domain entities."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerhealth.domain.entities import InventoryCount, Unit, Window


def _count(begin_unit_price=None, final_unit_price=None, begin_qty="10", final_qty="4"):
    return InventoryCount(
        id=1,
        unit_id="u",
        month=date(2024, 1, 1),
        item_id=1,
        item_name="Bread",
        item_price=Decimal("10"),
        begin_qty=Decimal(begin_qty),
        begin_unit_price=Decimal(begin_unit_price) if begin_unit_price else None,
        final_qty=Decimal(final_qty),
        final_unit_price=Decimal(final_unit_price) if final_unit_price else None,
    )


class TestInventoryCount:
    """Tests for InventoryCount valuation."""

    def test_prices_fall_back_to_item_price(self):
        count = _count()
        assert count.begin_value == Decimal("100")
        assert count.end_value == Decimal("40")

    def test_prices_fall_back_to_each_other(self):
        count = _count(final_unit_price="12")
        assert count.begin_price == Decimal("12")
        assert count.final_price == Decimal("12")

        count = _count(begin_unit_price="8")
        assert count.final_price == Decimal("8")

    def test_moved_qty_never_negative(self):
        assert _count().moved_qty == Decimal("6")
        assert _count(begin_qty="1", final_qty="5").moved_qty == Decimal("0")


def test_unit_is_frozen():
    unit = Unit(id="u", name="Bakery", abbr=None, program_id=None, is_active=True, created_at=datetime(2024, 1, 1))
    with pytest.raises(AttributeError):
        unit.name = "Other"


def test_open_window_contains_everything():
    assert Window().contains(date(1999, 1, 1))
