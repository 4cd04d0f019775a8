"""Query views: dashboard shapes derived from scores and monthly aggregates.

Every builder here is a pure function of its inputs; ``ViewService`` only
loads the inputs for a scope and window and hands them over.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Sequence

from ledgerhealth.database.base import Database
from ledgerhealth.domain.entities import (
    HEALTHY_THRESHOLD,
    RED_THRESHOLD,
    REPORT_KIND_COUNT,
    HealthScore,
    InventoryCount,
    MonthlyAggregate,
    Scope,
    Unit,
    Window,
)
from ledgerhealth.domain.metrics import MetricsService
from ledgerhealth.domain.scoring import score_unit, score_units
from ledgerhealth.utils.date_parser import days_in_month, month_label

ZERO = Decimal("0")
HUNDRED = Decimal("100")

INDICATORS = ("Cash Margin", "In/Out Ratio", "Inventory Turnover", "Reporting")

# Composite runs from 4 (all bands 1) to 20 (all bands 5)
MIN_COMPOSITE = Decimal("4")
COMPOSITE_SPAN = Decimal("16")

TOP_ITEM_METRICS = ("qty", "value")


def _round(value: Optional[Decimal], places: str) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _percent(count: int, total: int) -> Decimal:
    if total == 0:
        return Decimal("0.0")
    return _round(Decimal(count) * HUNDRED / Decimal(total), "0.1")


def _by_month(aggregates: Iterable[MonthlyAggregate]) -> dict[date, list[MonthlyAggregate]]:
    months: dict[date, list[MonthlyAggregate]] = defaultdict(list)
    for aggregate in aggregates:
        months[aggregate.month].append(aggregate)
    return dict(sorted(months.items()))


def build_heatmap(scores: Sequence[HealthScore], aggregates: Iterable[MonthlyAggregate]) -> dict[str, Any]:
    """Ranked per-unit bands plus the known months of the window."""
    rows = [
        {
            "unit_id": s.unit_id,
            "name": s.name,
            "abbr": s.abbr,
            "cash_margin": s.cash_margin,
            "inout_ratio": s.inout_ratio,
            "inventory_turnover": s.turnover,
            "reporting": s.reporting,
            "composite": s.composite,
            "eligible": s.eligible,
            "flagged": s.flagged,
        }
        for s in scores
    ]
    months = sorted({month_label(a.month) for a in aggregates})
    return {"months": months, "rows": rows}


def build_category_overview(scores: Sequence[HealthScore]) -> dict[str, Any]:
    """Red/moderate/healthy counts per indicator over eligible units.

    Units without a single complete month are "no data": they count toward
    the unit total only.
    """
    eligible = [s for s in scores if s.eligible]
    indicators = []
    for name in INDICATORS:
        red = sum(1 for s in eligible if s.bands[name] <= RED_THRESHOLD)
        healthy = sum(1 for s in eligible if s.bands[name] > HEALTHY_THRESHOLD)
        moderate = len(eligible) - red - healthy
        indicators.append(
            {
                "indicator": name,
                "red": red,
                "moderate": moderate,
                "healthy": healthy,
                "red_pct": _percent(red, len(eligible)),
                "moderate_pct": _percent(moderate, len(eligible)),
                "healthy_pct": _percent(healthy, len(eligible)),
            }
        )

    flagged = sum(1 for s in eligible if s.flagged)
    healthy_units = sum(1 for s in eligible if s.healthy)
    return {
        "indicators": indicators,
        "unit_count": len(scores),
        "eligible": len(eligible),
        "no_data": len(scores) - len(eligible),
        "flagged": flagged,
        "healthy": healthy_units,
        "moderate": max(len(eligible) - flagged - healthy_units, 0),
    }


def build_cash_flow_waterfall(
    aggregates: Iterable[MonthlyAggregate],
    cash_months: Optional[set[date]] = None,
    opening_cash: Decimal = ZERO,
) -> list[dict[str, Any]]:
    """Portfolio month series with running cash and runway.

    Inflow includes financing (misc cash, loans, owner capital). Runway is
    cash on hand divided by the month's burn (instant) or by the trailing
    three-month average burn; it is undefined when there is no burn.
    """
    series = []
    cash = opening_cash
    burns: list[Decimal] = []
    for month, group in _by_month(aggregates).items():
        if cash_months is not None and month not in cash_months:
            continue
        inflow = sum((a.inflow + a.financing_inflow for a in group), ZERO)
        outflow = sum((a.outflow for a in group), ZERO)
        net = inflow - outflow
        cash += net
        burns.append(max(outflow - inflow, ZERO))
        trailing = burns[-3:]
        burn_ma3 = sum(trailing, ZERO) / Decimal(len(trailing))
        series.append(
            {
                "month": month,
                "inflow": inflow,
                "outflow": outflow,
                "net": net,
                "cash_on_hand": cash,
                "burn_ma3": burn_ma3,
                "runway_months_instant": cash / abs(net) if net < ZERO else None,
                "runway_months_ma3": cash / burn_ma3 if burn_ma3 > ZERO else None,
            }
        )
    return series


def build_top_items(
    counts: Iterable[InventoryCount], metric: str = "value", include_zeros: bool = False
) -> list[dict[str, Any]]:
    """Items ranked by stock movement (begin minus final count, never negative)."""
    metric = metric.lower() if metric and metric.lower() in TOP_ITEM_METRICS else "value"
    moved: dict[int, dict[str, Any]] = {}
    for count in counts:
        entry = moved.setdefault(
            count.item_id,
            {"item_id": count.item_id, "item_name": count.item_name, "unit_price": count.item_price, "moved_qty": ZERO},
        )
        entry["moved_qty"] += count.moved_qty

    rows = []
    for entry in moved.values():
        entry["moved_value"] = entry["moved_qty"] * entry["unit_price"]
        score = entry["moved_qty"] if metric == "qty" else entry["moved_value"]
        if score > ZERO or include_zeros:
            rows.append((score, entry))
    rows.sort(key=lambda pair: (-pair[0], pair[1]["item_name"]))
    return [entry for _, entry in rows]


def build_inventory_meta(counts: Iterable[InventoryCount]) -> dict[str, Any]:
    """Years and quarters that have inventory data."""
    quarters: dict[int, set[str]] = defaultdict(set)
    for count in counts:
        quarters[count.month.year].add(f"Q{(count.month.month - 1) // 3 + 1}")
    return {
        "years": sorted(quarters),
        "quarters_by_year": {year: sorted(qs) for year, qs in sorted(quarters.items())},
    }


def build_turnover_trend(
    aggregates: Iterable[MonthlyAggregate], inventory_months: Optional[set[date]] = None
) -> list[dict[str, Any]]:
    """Portfolio inventory turnover and days inventory outstanding per month."""
    trend = []
    for month, group in _by_month(aggregates).items():
        if inventory_months is not None and month not in inventory_months:
            continue
        cogs = sum((a.cogs for a in group), ZERO)
        begin = sum((a.begin_inventory_value for a in group), ZERO)
        end = sum((a.end_inventory_value for a in group), ZERO)
        average = (begin + end) / 2
        turnover = cogs / average if average > ZERO else None
        days = days_in_month(month)
        trend.append(
            {
                "month": month,
                "cogs": _round(cogs, "0.01"),
                "begin_value": _round(begin, "0.01"),
                "end_value": _round(end, "0.01"),
                "avg_inventory": _round(average, "0.01"),
                "turnover": _round(turnover, "0.0001"),
                "days_in_month": days,
                "dio_days": _round(Decimal(days) / turnover, "0.1") if turnover and turnover > ZERO else None,
            }
        )
    return trend


def monthly_star_score(unit: Unit, aggregate: MonthlyAggregate) -> Decimal:
    """Map one month's composite onto a 0-100 score."""
    composite = score_unit(unit, [aggregate]).composite
    return (composite - MIN_COMPOSITE) / COMPOSITE_SPAN * HUNDRED


def half_stars(score_0_100: Decimal) -> Decimal:
    """Round a 0-100 score to 0-5 stars in half-star steps."""
    return (score_0_100 / Decimal("20") * 2).quantize(Decimal("1"), rounding=ROUND_HALF_UP) / 2


def build_star_trend(units: Sequence[Unit], aggregates: Iterable[MonthlyAggregate]) -> dict[str, Any]:
    """Per unit per month star rating derived from the monthly composite."""
    by_id = {u.id: u for u in units}
    rows = []
    for aggregate in aggregates:
        unit = by_id.get(aggregate.unit_id)
        if unit is None:
            continue
        score = monthly_star_score(unit, aggregate)
        rows.append(
            {
                "unit_id": unit.id,
                "name": unit.name,
                "abbr": unit.display_abbr,
                "month": aggregate.month,
                "score_0_100": _round(score, "0.1"),
                "stars_half": half_stars(score),
            }
        )
    rows.sort(key=lambda r: (r["month"], r["unit_id"]))
    return {"months": sorted({month_label(r["month"]) for r in rows}), "rows": rows}


def build_finance_kpis(unit_count: int, aggregates: Sequence[MonthlyAggregate]) -> dict[str, Any]:
    """Portfolio totals, margins, day-weighted turnover and reporting rate."""
    revenue = sum((a.inflow for a in aggregates), ZERO)
    purchases = sum((a.purchases for a in aggregates), ZERO)
    opex = sum((a.opex for a in aggregates), ZERO)
    cogs = sum((a.cogs for a in aggregates), ZERO)
    gross_profit = revenue - cogs
    operating_profit = gross_profit - opex
    net_cash_flow = sum(
        (
            a.inflow + a.debt_inflow + a.owner_capital_inflow
            - (a.opex + a.purchases + a.debt_outflow + a.owner_withdrawal)
            for a in aggregates
        ),
        ZERO,
    )

    months = _by_month(aggregates)
    total_days = sum(days_in_month(m) for m in months)
    weighted_inventory = sum(
        (sum((a.average_inventory for a in group), ZERO) * days_in_month(m) for m, group in months.items()),
        ZERO,
    )
    overall_turnover = None
    overall_dio = None
    if weighted_inventory > ZERO:
        overall_turnover = cogs / (weighted_inventory / Decimal(total_days))
        if cogs > ZERO:
            overall_dio = Decimal(total_days) / overall_turnover

    expected = unit_count * len(months) * REPORT_KIND_COUNT
    submitted = sum(a.reports_submitted for a in aggregates)
    return {
        "total_revenue": _round(revenue, "0.01"),
        "total_purchases": _round(purchases, "0.01"),
        "total_opex": _round(opex, "0.01"),
        "total_cogs": _round(cogs, "0.01"),
        "total_gross_profit": _round(gross_profit, "0.01"),
        "gross_margin_pct": _round(gross_profit / revenue, "0.0001") if revenue > ZERO else None,
        "total_operating_profit": _round(operating_profit, "0.01"),
        "operating_margin_pct": _round(operating_profit / revenue, "0.0001") if revenue > ZERO else None,
        "overall_turnover": _round(overall_turnover, "0.0001"),
        "overall_dio_days": _round(overall_dio, "0.1"),
        "net_cash_flow": _round(net_cash_flow, "0.01"),
        "reporting_rate": _round(Decimal(submitted) / Decimal(expected), "0.0001") if expected else None,
    }


def build_capital_flows(
    aggregates: Iterable[MonthlyAggregate], cash_months: Optional[set[date]] = None
) -> list[dict[str, Any]]:
    """Monthly debt and owner capital movements."""
    flows = []
    for month, group in _by_month(aggregates).items():
        if cash_months is not None and month not in cash_months:
            continue
        flows.append(
            {
                "month": month,
                "debt_in": sum((a.debt_inflow for a in group), ZERO),
                "debt_out": sum((a.debt_outflow for a in group), ZERO),
                "owner_capital_in": sum((a.owner_capital_inflow for a in group), ZERO),
                "owner_withdrawal": sum((a.owner_withdrawal for a in group), ZERO),
            }
        )
    return flows


def build_revenue_seasonality(
    aggregates: Iterable[MonthlyAggregate], cash_months: Optional[set[date]] = None
) -> list[dict[str, Any]]:
    """Revenue per calendar month as (year, month, revenue) rows."""
    return [
        {"year": month.year, "month": month.month, "revenue": sum((a.inflow for a in group), ZERO)}
        for month, group in _by_month(aggregates).items()
        if cash_months is None or month in cash_months
    ]


class ViewService:
    """Service assembling dashboard views for a scope and window."""

    def __init__(self, db: Database):
        """Initialize view service.

        Args:
            db: Database instance
        """
        self.db = db
        self.metrics = MetricsService(db)

    def _load(self, scope: Optional[Scope], window: Optional[Window]) -> tuple[list[Unit], list[MonthlyAggregate]]:
        units = self.metrics.units_in_scope(scope)
        return units, self.metrics.monthly_for_units([u.id for u in units], window)

    def _cash_months(self, units: Sequence[Unit], window: Optional[Window]) -> set[date]:
        if not units:
            return set()
        return {t.period_month for t in self.db.list_ledger_transactions([u.id for u in units], window)}

    def heatmap(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> dict[str, Any]:
        """Risk heatmap: ranked unit bands and the months covered."""
        units, aggregates = self._load(scope, window)
        return build_heatmap(score_units(units, aggregates), aggregates)

    def category_health_overview(
        self, scope: Optional[Scope] = None, window: Optional[Window] = None
    ) -> dict[str, Any]:
        """Indicator health distribution over eligible units.

        Returns:
            Dict with per-indicator counts and percentages, unit counts and
            the window it was computed over
        """
        units, aggregates = self._load(scope, window)
        overview = build_category_overview(score_units(units, aggregates))
        window = window or Window()
        overview["window"] = {"start": window.start, "end": window.end}
        return overview

    def cash_flow_waterfall(
        self, scope: Optional[Scope] = None, window: Optional[Window] = None, opening_cash: Decimal = ZERO
    ) -> list[dict[str, Any]]:
        """Monthly inflow, outflow, running cash and runway."""
        units, aggregates = self._load(scope, window)
        return build_cash_flow_waterfall(aggregates, self._cash_months(units, window), opening_cash)

    def top_moving_items(
        self,
        scope: Optional[Scope] = None,
        window: Optional[Window] = None,
        metric: str = "value",
        include_zeros: bool = False,
    ) -> list[dict[str, Any]]:
        """Items with the most stock movement in the window."""
        return build_top_items(self.metrics.inventory_counts(scope, window), metric, include_zeros)

    def inventory_meta(self, scope: Optional[Scope] = None) -> dict[str, Any]:
        """Years and quarters with inventory data, regardless of window."""
        return build_inventory_meta(self.metrics.inventory_counts(scope))

    def turnover_trend(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> list[dict[str, Any]]:
        """Monthly portfolio inventory turnover."""
        units, aggregates = self._load(scope, window)
        counts = self.db.list_inventory_counts([u.id for u in units], window) if units else []
        return build_turnover_trend(aggregates, {c.month for c in counts})

    def star_trend(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> dict[str, Any]:
        """Monthly half-star ratings per unit."""
        units, aggregates = self._load(scope, window)
        return build_star_trend(units, aggregates)

    def finance_kpis(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> dict[str, Any]:
        """Portfolio finance KPI summary."""
        units, aggregates = self._load(scope, window)
        return build_finance_kpis(len(units), aggregates)

    def capital_flows(self, scope: Optional[Scope] = None, window: Optional[Window] = None) -> list[dict[str, Any]]:
        """Monthly debt and owner capital flows."""
        units, aggregates = self._load(scope, window)
        return build_capital_flows(aggregates, self._cash_months(units, window))

    def revenue_seasonality(
        self, scope: Optional[Scope] = None, window: Optional[Window] = None
    ) -> list[dict[str, Any]]:
        """Revenue by year and calendar month."""
        units, aggregates = self._load(scope, window)
        return build_revenue_seasonality(aggregates, self._cash_months(units, window))
