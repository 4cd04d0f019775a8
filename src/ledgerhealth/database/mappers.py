"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, so the ledger schema can change
without touching the metrics and scoring code.
"""

from decimal import Decimal
from typing import Optional

from ledgerhealth.domain import entities as domain
from ledgerhealth.database.models import (
    Program as ORMProgram,
    Unit as ORMUnit,
    Category as ORMCategory,
    LedgerTransaction as ORMLedgerTransaction,
    Item as ORMItem,
    InventoryCount as ORMInventoryCount,
    PeriodGuard as ORMPeriodGuard,
)

ZERO = Decimal("0")


def _amount(value) -> Decimal:
    return ZERO if value is None else Decimal(value)


def _optional_amount(value) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def program_to_domain(orm_program: ORMProgram) -> domain.Program:
    """Convert SQLAlchemy Program model to domain Program entity."""
    return domain.Program(id=orm_program.id, name=orm_program.name)


def unit_to_domain(orm_unit: ORMUnit) -> domain.Unit:
    """Convert SQLAlchemy Unit model to domain Unit entity."""
    return domain.Unit(
        id=orm_unit.id,
        name=orm_unit.name,
        abbr=orm_unit.abbr,
        program_id=orm_unit.program_id,
        is_active=orm_unit.is_active,
        created_at=orm_unit.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        kind=domain.CategoryKind(orm_category.kind),
        canonical_name=orm_category.canonical_name,
        total_amount=_amount(orm_category.total_amount),
        created_at=orm_category.created_at,
    )


def ledger_transaction_to_domain(orm_txn: ORMLedgerTransaction) -> domain.LedgerTransaction:
    """Convert SQLAlchemy LedgerTransaction model to domain entity."""
    return domain.LedgerTransaction(
        id=orm_txn.id,
        unit_id=orm_txn.unit_id,
        kind=domain.ReportKind(orm_txn.kind),
        period_month=orm_txn.period_month,
        transaction_date=orm_txn.transaction_date,
        content_key=orm_txn.content_key,
        parent_key=orm_txn.parent_key,
        row_mode=domain.RowMode(orm_txn.row_mode),
        category_id=orm_txn.category_id,
        cash_amount=_amount(orm_txn.cash_amount),
        sales_amount=_amount(orm_txn.sales_amount),
        other_revenue_amount=_amount(orm_txn.other_revenue_amount),
        liability_amount=_amount(orm_txn.liability_amount),
        owners_capital_amount=_amount(orm_txn.owners_capital_amount),
        inventory_amount=_amount(orm_txn.inventory_amount),
        owners_withdrawal_amount=_amount(orm_txn.owners_withdrawal_amount),
        note=orm_txn.note,
        entered_by=orm_txn.entered_by,
        imported_at=orm_txn.imported_at,
    )


def item_to_domain(orm_item: ORMItem) -> domain.Item:
    """Convert SQLAlchemy Item model to domain Item entity."""
    return domain.Item(
        id=orm_item.id,
        name=orm_item.name,
        price=_amount(orm_item.price),
        beginning_inventory=_amount(orm_item.beginning_inventory),
        less_count=_amount(orm_item.less_count),
        bom_id=orm_item.bom_id,
    )


def inventory_count_to_domain(orm_count: ORMInventoryCount) -> domain.InventoryCount:
    """Convert SQLAlchemy InventoryCount model (with its item) to domain entity."""
    return domain.InventoryCount(
        id=orm_count.id,
        unit_id=orm_count.unit_id,
        month=orm_count.month,
        item_id=orm_count.item_id,
        item_name=orm_count.item.name,
        item_price=_amount(orm_count.item.price),
        begin_qty=_amount(orm_count.begin_qty),
        begin_unit_price=_optional_amount(orm_count.begin_unit_price),
        final_qty=_amount(orm_count.final_qty),
        final_unit_price=_optional_amount(orm_count.final_unit_price),
    )


def period_guard_to_domain(orm_guard: ORMPeriodGuard) -> domain.PeriodGuard:
    """Convert SQLAlchemy PeriodGuard model to domain entity."""
    return domain.PeriodGuard(
        id=orm_guard.id,
        unit_id=orm_guard.unit_id,
        month=orm_guard.month,
        report_kind=domain.ReportKind(orm_guard.report_kind),
        created_at=orm_guard.created_at,
    )
