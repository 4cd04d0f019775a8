"""Finance dashboard endpoints.

Malformed scope identifiers degrade to the empty result shape instead of
failing the whole dashboard; malformed dates are rejected.
"""

import logging
from decimal import Decimal
from typing import Any, Callable

from flask import Blueprint, jsonify, request

from ledgerhealth.api.app import get_db
from ledgerhealth.api.serializers import to_jsonable
from ledgerhealth.domain import errors
from ledgerhealth.domain.entities import Scope, Window
from ledgerhealth.domain.errors import ValidationError
from ledgerhealth.domain.scope import parse_scope, parse_window, resolve_overview_window
from ledgerhealth.domain.views import ViewService, build_category_overview, build_finance_kpis
from ledgerhealth.utils.amount_parser import to_amount

logger = logging.getLogger(__name__)

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/finance")

SCOPE_ERRORS = (errors.INVALID_UNIT_ID, errors.INVALID_PROGRAM_ID)


def _flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in ("1", "true", "yes")


def _window() -> Window:
    return parse_window(request.args.get("from"), request.args.get("to"))


def _respond(empty: Any, build: Callable[[ViewService, Scope], Any]):
    """Run a view for the requested scope, or return its empty shape."""
    try:
        scope = parse_scope(
            request.args.get("program_id"),
            request.args.get("unit_id") or request.args.get("se_id"),
        )
    except ValidationError as e:
        if e.code not in SCOPE_ERRORS:
            raise
        logger.warning("Degraded %s to empty result: %s", request.path, e)
        return jsonify(to_jsonable(empty))
    return jsonify(to_jsonable(build(ViewService(get_db()), scope)))


@analytics_bp.get("/cash-flow")
def cash_flow():
    window = _window()
    try:
        opening_cash = to_amount(request.args.get("opening_cash"))
    except ValueError as e:
        raise ValidationError(str(e), errors.INVALID_AMOUNT) from e
    return _respond(
        [],
        lambda views, scope: views.cash_flow_waterfall(scope, window, opening_cash or Decimal("0")),
    )


@analytics_bp.get("/inventory-turnover")
def inventory_turnover():
    window = _window()
    return _respond([], lambda views, scope: views.turnover_trend(scope, window))


@analytics_bp.get("/top-items")
def top_items():
    window = _window()
    metric = request.args.get("metric", "value")
    include_zeros = _flag("include_zeros")
    include_meta = _flag("include_meta")

    def build(views: ViewService, scope: Scope):
        rows = views.top_moving_items(scope, window, metric=metric, include_zeros=include_zeros)
        if not include_meta:
            return rows
        return {"rows": rows, "meta": views.inventory_meta(scope)}

    empty = {"rows": [], "meta": {"years": [], "quarters_by_year": {}}} if include_meta else []
    return _respond(empty, build)


@analytics_bp.get("/health-overview")
def health_overview():
    window = resolve_overview_window(
        request.args.get("period"), request.args.get("from"), request.args.get("to")
    )
    empty = build_category_overview([])
    empty["window"] = {"start": window.start, "end": window.end}
    return _respond(empty, lambda views, scope: views.category_health_overview(scope, window))


@analytics_bp.get("/risk-heatmap")
def risk_heatmap():
    window = _window()
    return _respond({"months": [], "rows": []}, lambda views, scope: views.heatmap(scope, window))


@analytics_bp.get("/star-trend")
def star_trend():
    window = _window()
    return _respond({"months": [], "rows": []}, lambda views, scope: views.star_trend(scope, window))


@analytics_bp.get("/kpis")
def kpis():
    window = _window()
    return _respond(build_finance_kpis(0, []), lambda views, scope: views.finance_kpis(scope, window))


@analytics_bp.get("/capital-flows")
def capital_flows():
    window = _window()
    return _respond([], lambda views, scope: views.capital_flows(scope, window))


@analytics_bp.get("/revenue-seasonality")
def revenue_seasonality():
    window = _window()
    return _respond([], lambda views, scope: views.revenue_seasonality(scope, window))
