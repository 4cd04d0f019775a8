"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from ledgerhealth.database.models import (
    Category as ORMCategory,
    InventoryCount as ORMInventoryCount,
    Item as ORMItem,
    LedgerTransaction as ORMLedgerTransaction,
    PeriodGuard as ORMPeriodGuard,
    Unit as ORMUnit,
)
from ledgerhealth.database.mappers import (
    category_to_domain,
    inventory_count_to_domain,
    ledger_transaction_to_domain,
    period_guard_to_domain,
    unit_to_domain,
)
from ledgerhealth.domain.entities import CategoryKind, ReportKind, RowMode, Unit

UNIT_ID = "0b7e8f6c-8f55-4b61-9a77-2f1ab0c4d3e2"


class TestUnitMapper:
    """Tests for Unit mapper."""

    def test_unit_to_domain(self):
        """Test converting ORM Unit to domain Unit."""
        orm_unit = ORMUnit(
            id=UNIT_ID, name="Bakery", abbr="BK", program_id=None, is_active=True, created_at=datetime.now(UTC)
        )

        unit = unit_to_domain(orm_unit)

        assert isinstance(unit, Unit)
        assert unit.id == UNIT_ID
        assert unit.display_abbr == "BK"


class TestCategoryMapper:
    """Tests for Category mapper."""

    def test_category_to_domain(self):
        orm_category = ORMCategory(
            id=3, kind="expense", canonical_name="rent", total_amount=None, created_at=datetime.now(UTC)
        )

        category = category_to_domain(orm_category)

        assert category.kind is CategoryKind.EXPENSE
        assert category.total_amount == Decimal("0")


class TestLedgerTransactionMapper:
    """Tests for LedgerTransaction mapper."""

    def test_ledger_transaction_to_domain(self):
        """Null amounts map to zero and enums are restored."""
        orm_txn = ORMLedgerTransaction(
            id=1,
            unit_id=UNIT_ID,
            kind="cash_out",
            period_month=date(2024, 1, 1),
            transaction_date=date(2024, 1, 9),
            content_key="abc",
            parent_key=None,
            row_mode="expense_linked",
            category_id=3,
            cash_amount=Decimal("12.50"),
            note="rent",
            entered_by="clerk",
            imported_at=datetime.now(UTC),
        )

        txn = ledger_transaction_to_domain(orm_txn)

        assert txn.kind is ReportKind.CASH_OUT
        assert txn.row_mode is RowMode.EXPENSE_LINKED
        assert txn.cash_amount == Decimal("12.50")
        assert txn.sales_amount == Decimal("0")


class TestInventoryCountMapper:
    """Tests for InventoryCount mapper."""

    def test_inventory_count_carries_item(self):
        orm_count = ORMInventoryCount(
            id=1,
            unit_id=UNIT_ID,
            month=date(2024, 1, 1),
            item_id=7,
            begin_qty=Decimal("4"),
            begin_unit_price=None,
            final_qty=Decimal("1"),
            final_unit_price=Decimal("11.00"),
        )
        orm_count.item = ORMItem(id=7, name="Bread", name_key="bread", price=Decimal("10.00"))

        count = inventory_count_to_domain(orm_count)

        assert count.item_name == "Bread"
        assert count.item_price == Decimal("10.00")
        assert count.begin_unit_price is None
        assert count.final_unit_price == Decimal("11.00")


class TestPeriodGuardMapper:
    """Tests for PeriodGuard mapper."""

    def test_period_guard_to_domain(self):
        orm_guard = ORMPeriodGuard(
            id=1, unit_id=UNIT_ID, month=date(2024, 1, 1), report_kind="inventory", created_at=datetime.now(UTC)
        )
        assert period_guard_to_domain(orm_guard).report_kind is ReportKind.INVENTORY
