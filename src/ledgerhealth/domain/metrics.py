"""Metrics Engine: monthly aggregates per unit over a window."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerhealth.database.base import Database
from ledgerhealth.domain.entities import (
    InventoryCount,
    LedgerTransaction,
    MonthlyAggregate,
    PeriodGuard,
    ReportKind,
    Scope,
    Unit,
    Window,
)
from ledgerhealth.domain.scope import parse_scope

ZERO = Decimal("0")
TWO = Decimal("2")


def _new_totals() -> dict[str, Decimal]:
    return defaultdict(lambda: ZERO)


def build_monthly(
    transactions: Iterable[LedgerTransaction],
    counts: Iterable[InventoryCount],
    guards: Iterable[PeriodGuard],
) -> list[MonthlyAggregate]:
    """Join the three report kinds on (unit, month).

    A unit-month appears in the output only when at least one cash-in row,
    cash-out row, inventory count or period guard exists for it.

    Returns:
        MonthlyAggregate list ordered by unit then month
    """
    totals: dict[tuple[str, date], dict[str, Decimal]] = defaultdict(_new_totals)
    reported: dict[tuple[str, date], set] = defaultdict(set)
    known: set[tuple[str, date]] = set()

    for t in transactions:
        known.add((t.unit_id, t.period_month))
        acc = totals[(t.unit_id, t.period_month)]
        if t.kind is ReportKind.CASH_IN:
            acc["inflow"] += t.sales_amount + t.other_revenue_amount
            acc["financing_inflow"] += t.cash_amount + t.liability_amount + t.owners_capital_amount
            acc["debt_inflow"] += t.liability_amount
            acc["owner_capital_inflow"] += t.owners_capital_amount
        elif t.kind is ReportKind.CASH_OUT:
            acc["outflow"] += (
                t.cash_amount + t.inventory_amount + t.liability_amount + t.owners_withdrawal_amount
            )
            acc["purchases"] += t.inventory_amount
            acc["opex"] += t.cash_amount
            acc["debt_outflow"] += t.liability_amount
            acc["owner_withdrawal"] += t.owners_withdrawal_amount

    for c in counts:
        known.add((c.unit_id, c.month))
        acc = totals[(c.unit_id, c.month)]
        acc["begin_inventory_value"] += c.begin_value
        acc["end_inventory_value"] += c.end_value

    for g in guards:
        known.add((g.unit_id, g.month))
        reported[(g.unit_id, g.month)].add(g.report_kind)

    aggregates = []
    for unit_id, month in sorted(known):
        acc = totals[(unit_id, month)]
        begin = acc["begin_inventory_value"]
        end = acc["end_inventory_value"]
        cogs = max(begin + acc["purchases"] - end, ZERO)
        average = (begin + end) / TWO
        aggregates.append(
            MonthlyAggregate(
                unit_id=unit_id,
                month=month,
                inflow=acc["inflow"],
                outflow=acc["outflow"],
                purchases=acc["purchases"],
                financing_inflow=acc["financing_inflow"],
                opex=acc["opex"],
                debt_inflow=acc["debt_inflow"],
                debt_outflow=acc["debt_outflow"],
                owner_capital_inflow=acc["owner_capital_inflow"],
                owner_withdrawal=acc["owner_withdrawal"],
                begin_inventory_value=begin,
                end_inventory_value=end,
                cogs=cogs,
                average_inventory=average,
                turnover=cogs / average if average != ZERO else None,
                reports_submitted=len(reported[(unit_id, month)]),
            )
        )
    return aggregates


class MetricsService:
    """Service computing monthly aggregates from committed ledger state."""

    def __init__(self, db: Database):
        """Initialize metrics service.

        Args:
            db: Database instance
        """
        self.db = db

    def units_in_scope(self, scope: Optional[Scope] = None) -> list[Unit]:
        """List active units inside a scope.

        Raises:
            ValidationError: If a scope identifier is malformed
        """
        scope = scope or Scope()
        return self.db.list_units(parse_scope(scope.program_id, scope.unit_id))

    def compute_monthly(
        self, scope: Optional[Scope] = None, window: Optional[Window] = None
    ) -> list[MonthlyAggregate]:
        """Compute monthly aggregates for every unit in scope.

        Args:
            scope: Optional program/unit filter
            window: Half-open [start, end) window on the report month

        Returns:
            MonthlyAggregate list ordered by unit then month

        Raises:
            ValidationError: If a scope identifier is malformed
        """
        unit_ids = [u.id for u in self.units_in_scope(scope)]
        return self.monthly_for_units(unit_ids, window)

    def monthly_for_units(self, unit_ids: list[str], window: Optional[Window] = None) -> list[MonthlyAggregate]:
        if not unit_ids:
            return []
        return build_monthly(
            self.db.list_ledger_transactions(unit_ids, window),
            self.db.list_inventory_counts(unit_ids, window),
            self.db.list_period_guards(unit_ids, window),
        )

    def inventory_counts(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> list[InventoryCount]:
        """List inventory counts of the units in scope."""
        unit_ids = [u.id for u in self.units_in_scope(scope)]
        if not unit_ids:
            return []
        return self.db.list_inventory_counts(unit_ids, window)
