"""Tests for JSON conversion of view results."""

from datetime import date
from decimal import Decimal

from ledgerhealth.api.serializers import error_body, to_jsonable
from ledgerhealth.domain.entities import ReportKind, Window


def test_to_jsonable():
    value = {
        "amount": Decimal("1.50"),
        "month": date(2024, 1, 1),
        "kind": ReportKind.CASH_IN,
        2024: [Decimal("1"), None],
        "window": Window(start=date(2024, 1, 1)),
    }
    assert to_jsonable(value) == {
        "amount": 1.5,
        "month": "2024-01-01",
        "kind": "cash_in",
        "2024": [1.0, None],
        "window": {"start": "2024-01-01", "end": None},
    }


def test_error_body():
    assert error_body("nope", "CONFLICT") == {"message": "nope", "code": "CONFLICT"}
