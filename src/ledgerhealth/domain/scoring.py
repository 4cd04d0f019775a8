"""Scoring and banding of monthly aggregates into health scores."""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from ledgerhealth.database.base import Database
from ledgerhealth.domain.entities import HealthScore, MonthlyAggregate, Scope, Unit, Window
from ledgerhealth.domain.metrics import MetricsService

ZERO = Decimal("0")
ONE = Decimal("1")
FOUR = Decimal("4")
CENTS = Decimal("0.01")

CASH_MARGIN_BANDS = ((Decimal("0.15"), 5), (Decimal("0.05"), 4), (ZERO, 3), (Decimal("-0.10"), 2))
INOUT_RATIO_BANDS = ((Decimal("1.5"), 5), (Decimal("1.2"), 4), (Decimal("1.0"), 3), (Decimal("0.8"), 2))
TURNOVER_BANDS = ((Decimal("0.50"), 5), (Decimal("0.35"), 4), (Decimal("0.25"), 3), (Decimal("0.15"), 2))


def _band(value: Decimal, thresholds: Sequence[tuple[Decimal, int]]) -> int:
    for threshold, band in thresholds:
        if value >= threshold:
            return band
    return 1


def cash_margin_band(inflow: Decimal, outflow: Decimal) -> int:
    """Band the cash margin (in - out) / in. No inflow scores 1."""
    if inflow <= ZERO:
        return 1
    return _band((inflow - outflow) / inflow, CASH_MARGIN_BANDS)


def inout_ratio_band(inflow: Decimal, outflow: Decimal) -> int:
    """Band the inflow/outflow ratio."""
    if outflow <= ZERO:
        return 5 if inflow > ZERO else 1
    return _band(inflow / outflow, INOUT_RATIO_BANDS)


def turnover_band(turnover: Optional[Decimal]) -> int:
    """Band inventory turnover; undefined turnover scores 1."""
    if turnover is None:
        return 1
    return _band(turnover, TURNOVER_BANDS)


def reporting_band(rate: Optional[Decimal]) -> Decimal:
    """Continuous reporting score 1 + 4 * rate, rounded to two decimals."""
    if rate is None:
        return ONE
    clamped = min(max(rate, ZERO), ONE)
    return (ONE + FOUR * clamped).quantize(CENTS, rounding=ROUND_HALF_UP)


def _mean(values: list[Decimal]) -> Optional[Decimal]:
    if not values:
        return None
    return sum(values, ZERO) / Decimal(len(values))


def score_unit(unit: Unit, months: Sequence[MonthlyAggregate]) -> HealthScore:
    """Score one unit from its monthly series within a window."""
    inflow = sum((m.inflow for m in months), ZERO)
    outflow = sum((m.outflow for m in months), ZERO)
    avg_turnover = _mean([m.turnover for m in months if m.turnover is not None])
    reporting_rate = _mean([m.completeness for m in months])
    return HealthScore(
        unit_id=unit.id,
        name=unit.name,
        abbr=unit.display_abbr,
        inflow_total=inflow,
        outflow_total=outflow,
        avg_turnover=avg_turnover,
        reporting_rate=reporting_rate,
        cash_margin=cash_margin_band(inflow, outflow),
        inout_ratio=inout_ratio_band(inflow, outflow),
        turnover=turnover_band(avg_turnover),
        reporting=reporting_band(reporting_rate),
        months_any=len(months),
        months_complete=sum(1 for m in months if m.is_complete),
    )


def rank(scores: Iterable[HealthScore]) -> list[HealthScore]:
    """Order scores worst first: composite ascending, then display name."""
    return sorted(scores, key=lambda s: (s.composite, s.name.lower(), s.unit_id))


def score_units(units: Iterable[Unit], aggregates: Iterable[MonthlyAggregate]) -> list[HealthScore]:
    """Score every unit, including units without any data, ranked."""
    by_unit: dict[str, list[MonthlyAggregate]] = defaultdict(list)
    for aggregate in aggregates:
        by_unit[aggregate.unit_id].append(aggregate)
    return rank(score_unit(unit, by_unit.get(unit.id, [])) for unit in units)


class ScoringService:
    """Service producing banded health scores per unit."""

    def __init__(self, db: Database):
        """Initialize scoring service.

        Args:
            db: Database instance
        """
        self.db = db
        self.metrics = MetricsService(db)

    def score(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> list[HealthScore]:
        """Score every unit in scope over a window.

        Args:
            scope: Optional program/unit filter
            window: Half-open [start, end) window on the report month

        Returns:
            HealthScore list ranked by composite ascending, then name

        Raises:
            ValidationError: If a scope identifier is malformed
        """
        units = self.metrics.units_in_scope(scope)
        aggregates = self.metrics.monthly_for_units([u.id for u in units], window)
        return score_units(units, aggregates)
