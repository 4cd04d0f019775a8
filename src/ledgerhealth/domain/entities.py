"""Domain model entities for ledgerhealth.

These are pure data classes representing business concepts, independent of
database schema. Derived values (monthly aggregates, health scores) are also
modelled here; they are never persisted and are recomputed on every query.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class ReportKind(str, Enum):
    """The three monthly report kinds a unit submits."""

    CASH_IN = "cash_in"
    CASH_OUT = "cash_out"
    INVENTORY = "inventory"


class CategoryKind(str, Enum):
    """Reference label families."""

    ASSET = "asset"
    EXPENSE = "expense"


class RowMode(str, Enum):
    """Closed set of categorizations for a ledger row."""

    ASSET_LINKED = "asset_linked"
    EXPENSE_LINKED = "expense_linked"
    UNCATEGORIZED = "uncategorized"


REPORT_KIND_COUNT = len(ReportKind)


@dataclass(frozen=True)
class Program:
    """Optional grouping of units."""

    id: str
    name: str


@dataclass(frozen=True)
class Unit:
    """Organizational unit (enterprise) being tracked."""

    id: str
    name: str
    abbr: Optional[str]
    program_id: Optional[str]
    is_active: bool
    created_at: datetime

    @property
    def display_abbr(self) -> str:
        return self.abbr or self.name


@dataclass(frozen=True)
class Category:
    """Canonical asset or expense label."""

    id: int
    kind: CategoryKind
    canonical_name: str
    total_amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class LedgerTransaction:
    """One stored cash-in or cash-out row."""

    id: int
    unit_id: str
    kind: ReportKind
    period_month: date
    transaction_date: date
    content_key: str
    parent_key: Optional[str]
    row_mode: RowMode
    category_id: Optional[int]
    cash_amount: Decimal
    sales_amount: Decimal
    other_revenue_amount: Decimal
    liability_amount: Decimal
    owners_capital_amount: Decimal
    inventory_amount: Decimal
    owners_withdrawal_amount: Decimal
    note: Optional[str]
    entered_by: Optional[str]
    imported_at: datetime


@dataclass(frozen=True)
class Item:
    """Inventory item reference data."""

    id: int
    name: str
    price: Decimal
    beginning_inventory: Decimal
    less_count: Decimal
    bom_id: Optional[int]


@dataclass(frozen=True)
class InventoryCount:
    """Begin/final count of one item for one unit and month."""

    id: int
    unit_id: str
    month: date
    item_id: int
    item_name: str
    item_price: Decimal
    begin_qty: Decimal
    begin_unit_price: Optional[Decimal]
    final_qty: Decimal
    final_unit_price: Optional[Decimal]

    @property
    def begin_price(self) -> Decimal:
        if self.begin_unit_price is not None:
            return self.begin_unit_price
        if self.final_unit_price is not None:
            return self.final_unit_price
        return self.item_price

    @property
    def final_price(self) -> Decimal:
        if self.final_unit_price is not None:
            return self.final_unit_price
        if self.begin_unit_price is not None:
            return self.begin_unit_price
        return self.item_price

    @property
    def begin_value(self) -> Decimal:
        return self.begin_qty * self.begin_price

    @property
    def end_value(self) -> Decimal:
        return self.final_qty * self.final_price

    @property
    def moved_qty(self) -> Decimal:
        return max(self.begin_qty - self.final_qty, Decimal("0"))


@dataclass(frozen=True)
class PeriodGuard:
    """Fencing record: unit already submitted this report kind for the month."""

    id: int
    unit_id: str
    month: date
    report_kind: ReportKind
    created_at: datetime


# Row amount shapes, resolved once at ingestion entry


@dataclass(frozen=True)
class Split:
    """One labelled sub-amount of a split row."""

    mode: RowMode
    label: str
    amount: Decimal


@dataclass(frozen=True)
class SingleAmount:
    """A row carrying its own amount buckets."""

    mode: RowMode
    label: Optional[str]


@dataclass(frozen=True)
class SplitAmounts:
    """A row whose cash amount is represented only by its splits."""

    splits: tuple[Split, ...]


AmountShape = Union[SingleAmount, SplitAmounts]


@dataclass(frozen=True)
class LedgerRow:
    """A parsed cash-in or cash-out input row, ready for reconciliation."""

    row_num: int
    transaction_date: date
    shape: AmountShape
    buckets: dict[str, Decimal]
    note: Optional[str]
    entered_by: Optional[str]
    source_key: Optional[str] = None


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one period import."""

    unit_id: str
    period_month: date
    kind: ReportKind
    accepted: int
    deleted: int = 0
    superseded: bool = False


@dataclass(frozen=True)
class InventoryImportResult:
    """Outcome of one inventory import."""

    unit_id: str
    period_month: date
    upserted_items: int
    inserted_bom_lines: int
    linked: int
    superseded: bool = False


# Derived, never persisted


@dataclass(frozen=True)
class MonthlyAggregate:
    """Per unit, per month view joining the three report kinds."""

    unit_id: str
    month: date
    inflow: Decimal
    outflow: Decimal
    purchases: Decimal
    financing_inflow: Decimal
    opex: Decimal
    debt_inflow: Decimal
    debt_outflow: Decimal
    owner_capital_inflow: Decimal
    owner_withdrawal: Decimal
    begin_inventory_value: Decimal
    end_inventory_value: Decimal
    cogs: Decimal
    average_inventory: Decimal
    turnover: Optional[Decimal]
    reports_submitted: int

    @property
    def completeness(self) -> Decimal:
        return Decimal(self.reports_submitted) / Decimal(REPORT_KIND_COUNT)

    @property
    def is_complete(self) -> bool:
        return self.reports_submitted >= REPORT_KIND_COUNT

    @property
    def net(self) -> Decimal:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class HealthScore:
    """Banded health indicators of one unit over one window."""

    unit_id: str
    name: str
    abbr: str
    inflow_total: Decimal
    outflow_total: Decimal
    avg_turnover: Optional[Decimal]
    reporting_rate: Optional[Decimal]
    cash_margin: int
    inout_ratio: int
    turnover: int
    reporting: Decimal
    months_any: int
    months_complete: int

    @property
    def bands(self) -> dict[str, Decimal]:
        return {
            "Cash Margin": Decimal(self.cash_margin),
            "In/Out Ratio": Decimal(self.inout_ratio),
            "Inventory Turnover": Decimal(self.turnover),
            "Reporting": self.reporting,
        }

    @property
    def composite(self) -> Decimal:
        return sum(self.bands.values(), Decimal("0"))

    @property
    def red_count(self) -> int:
        return sum(1 for band in self.bands.values() if band <= RED_THRESHOLD)

    @property
    def eligible(self) -> bool:
        return self.months_complete >= 1

    @property
    def flagged(self) -> bool:
        return self.eligible and self.red_count > 2

    @property
    def healthy(self) -> bool:
        return self.eligible and all(band > HEALTHY_THRESHOLD for band in self.bands.values())

    @property
    def moderate(self) -> bool:
        return self.eligible and not self.flagged and not self.healthy


RED_THRESHOLD = Decimal("1.5")
HEALTHY_THRESHOLD = Decimal("3")


@dataclass(frozen=True)
class Window:
    """Half-open date window; either bound may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value >= self.end:
            return False
        return True


@dataclass(frozen=True)
class Scope:
    """Organizational scope of a query. Both filters optional."""

    program_id: Optional[str] = None
    unit_id: Optional[str] = None
