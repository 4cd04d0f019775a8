"""Tests for dashboard views."""

from datetime import date, datetime
from decimal import Decimal

from ledgerhealth.domain.entities import (
    InventoryCount,
    MonthlyAggregate,
    Scope,
    Unit,
    Window,
)
from ledgerhealth.domain.scoring import score_unit
from ledgerhealth.domain.views import (
    build_cash_flow_waterfall,
    build_category_overview,
    build_finance_kpis,
    build_inventory_meta,
    build_top_items,
    half_stars,
)

JAN = date(2024, 1, 1)
FEB = date(2024, 2, 1)
MAR = date(2024, 3, 1)
UNIT = "5a6b7c8d-9e0f-4a1b-8c2d-3e4f5a6b7c8d"

ZERO = Decimal("0")


def _aggregate(month, inflow="0", outflow="0", reports=3, unit_id=UNIT, **extra):
    values = dict(
        purchases=ZERO,
        financing_inflow=ZERO,
        opex=ZERO,
        debt_inflow=ZERO,
        debt_outflow=ZERO,
        owner_capital_inflow=ZERO,
        owner_withdrawal=ZERO,
        begin_inventory_value=ZERO,
        end_inventory_value=ZERO,
        cogs=ZERO,
        average_inventory=ZERO,
        turnover=None,
    )
    values.update({k: Decimal(str(v)) for k, v in extra.items()})
    return MonthlyAggregate(
        unit_id=unit_id,
        month=month,
        inflow=Decimal(inflow),
        outflow=Decimal(outflow),
        reports_submitted=reports,
        **values,
    )


def _count(item_id, name, price, begin_qty, final_qty, month=JAN):
    return InventoryCount(
        id=item_id,
        unit_id=UNIT,
        month=month,
        item_id=item_id,
        item_name=name,
        item_price=Decimal(price),
        begin_qty=Decimal(begin_qty),
        begin_unit_price=None,
        final_qty=Decimal(final_qty),
        final_unit_price=None,
    )


class TestCashFlowWaterfall:
    """Tests for the running cash series."""

    def test_running_cash_and_runway(self):
        series = build_cash_flow_waterfall(
            [_aggregate(JAN, "100", "50"), _aggregate(FEB, "100", "150"), _aggregate(MAR, "100", "50")],
            opening_cash=ZERO,
        )

        assert [row["cash_on_hand"] for row in series] == [Decimal("50"), Decimal("0"), Decimal("50")]
        assert [row["net"] for row in series] == [Decimal("50"), Decimal("-50"), Decimal("50")]
        assert series[2]["runway_months_instant"] is None
        assert series[0]["runway_months_instant"] is None
        assert series[0]["runway_months_ma3"] is None
        assert series[1]["runway_months_instant"] == ZERO
        assert series[1]["burn_ma3"] == Decimal("25")

    def test_opening_cash_and_months_without_cash_rows(self):
        series = build_cash_flow_waterfall(
            [_aggregate(JAN, "100", "50"), _aggregate(FEB), _aggregate(MAR, "0", "100")],
            cash_months={JAN, MAR},
            opening_cash=Decimal("1000"),
        )

        assert [row["month"] for row in series] == [JAN, MAR]
        assert series[-1]["cash_on_hand"] == Decimal("950")
        assert series[-1]["runway_months_instant"] == Decimal("9.5")

    def test_financing_counts_as_inflow(self):
        (row,) = build_cash_flow_waterfall([_aggregate(JAN, "100", "0", financing_inflow="25")])
        assert row["inflow"] == Decimal("125")


class TestCategoryOverview:
    """Tests for indicator distribution."""

    def _unit(self, unit_id, name):
        return Unit(id=unit_id, name=name, abbr=None, program_id=None, is_active=True, created_at=datetime(2024, 1, 1))

    def test_distribution(self):
        healthy_id = "11111111-1111-4111-8111-111111111111"
        flagged_id = "22222222-2222-4222-8222-222222222222"
        empty_id = "33333333-3333-4333-8333-333333333333"
        scores = [
            score_unit(self._unit(healthy_id, "Good"), [_aggregate(JAN, "1000", "600", unit_id=healthy_id, turnover="1")]),
            score_unit(self._unit(flagged_id, "Bad"), [_aggregate(JAN, "10", "100", unit_id=flagged_id)]),
            score_unit(self._unit(empty_id, "Empty"), []),
        ]

        overview = build_category_overview(scores)

        assert overview["unit_count"] == 3
        assert overview["eligible"] == 2
        assert overview["no_data"] == 1
        assert overview["flagged"] == 1
        assert overview["healthy"] == 1
        assert overview["moderate"] == 0
        margin = next(i for i in overview["indicators"] if i["indicator"] == "Cash Margin")
        assert (margin["red"], margin["moderate"], margin["healthy"]) == (1, 0, 1)
        assert margin["red_pct"] == Decimal("50.0")

    def test_empty(self):
        overview = build_category_overview([])
        assert overview["eligible"] == 0
        assert all(i["red_pct"] == Decimal("0.0") for i in overview["indicators"])


class TestInventoryViews:
    """Tests for item movement views."""

    def test_top_items_by_value(self):
        rows = build_top_items(
            [
                _count(1, "Bread", "10", "40", "30"),
                _count(2, "Cake", "50", "5", "3"),
                _count(3, "Jam", "5", "10", "12"),
            ]
        )
        assert [r["item_name"] for r in rows] == ["Bread", "Cake"]
        assert rows[0]["moved_value"] == Decimal("100")

    def test_top_items_by_qty_with_zeros(self):
        rows = build_top_items(
            [_count(1, "Bread", "10", "40", "30"), _count(3, "Jam", "5", "10", "12")],
            metric="qty",
            include_zeros=True,
        )
        assert [r["item_name"] for r in rows] == ["Bread", "Jam"]
        assert rows[1]["moved_qty"] == ZERO

    def test_inventory_meta(self):
        meta = build_inventory_meta(
            [_count(1, "Bread", "10", "1", "0", month=JAN), _count(1, "Bread", "10", "1", "0", month=date(2023, 11, 1))]
        )
        assert meta == {"years": [2023, 2024], "quarters_by_year": {2023: ["Q4"], 2024: ["Q1"]}}


def test_half_stars():
    assert half_stars(Decimal("100")) == Decimal("5")
    assert half_stars(Decimal("0")) == Decimal("0")
    assert half_stars(Decimal("75")) == Decimal("4")
    assert half_stars(Decimal("65")) == Decimal("3.5")


def test_finance_kpis_reporting_rate():
    kpis = build_finance_kpis(2, [_aggregate(JAN, "100", "0", reports=3)])
    assert kpis["reporting_rate"] == Decimal("0.5000")
    assert kpis["total_revenue"] == Decimal("100.00")
    assert kpis["gross_margin_pct"] == Decimal("1.0000")


class TestViewService:
    """Tests for views over stored reports."""

    def test_heatmap(self, view_service, complete_month, other_unit):
        heatmap = view_service.heatmap(window=Window(start=JAN, end=FEB))
        assert heatmap["months"] == ["2024-01"]
        assert [row["name"] for row in heatmap["rows"]] == ["Weavers Guild", "Bakery Co-op"]

    def test_overview_window(self, view_service, complete_month):
        overview = view_service.category_health_overview(window=Window(start=JAN, end=FEB))
        assert overview["healthy"] == 1
        assert overview["window"] == {"start": JAN, "end": FEB}

    def test_turnover_trend(self, view_service, complete_month):
        (row,) = view_service.turnover_trend()
        assert row["turnover"] == Decimal("1.0000")
        assert row["dio_days"] == Decimal("31.0")

    def test_star_trend(self, view_service, complete_month):
        trend = view_service.star_trend(Scope(unit_id=complete_month.id))
        (row,) = trend["rows"]
        assert row["stars_half"] == Decimal("5")
        assert row["score_0_100"] == Decimal("100.0")

    def test_top_items_and_meta(self, view_service, complete_month):
        (item,) = view_service.top_moving_items()
        assert item["moved_qty"] == Decimal("20")
        assert item["moved_value"] == Decimal("200")
        assert view_service.inventory_meta() == {"years": [2024], "quarters_by_year": {2024: ["Q1"]}}

    def test_capital_flows_and_seasonality(self, view_service, complete_month):
        (flow,) = view_service.capital_flows()
        assert flow["debt_in"] == ZERO
        assert view_service.revenue_seasonality() == [{"year": 2024, "month": 1, "revenue": Decimal("1000")}]
