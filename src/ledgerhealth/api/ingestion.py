"""Import endpoints."""

import logging
from typing import Any

from flask import Blueprint, jsonify, request

from ledgerhealth.api.app import get_db
from ledgerhealth.domain import errors
from ledgerhealth.domain.errors import ValidationError
from ledgerhealth.domain.ingestion import IngestionService
from ledgerhealth.domain.registry import ReferenceRegistry

logger = logging.getLogger(__name__)

ingestion_bp = Blueprint("ingestion", __name__, url_prefix="/api/import")


def _payload() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _list(payload: dict[str, Any], name: str) -> list:
    value = payload.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"'{name}' must be a list")
    return value


def _unit_id(payload: dict[str, Any]) -> Any:
    return payload.get("unit_id") or payload.get("se_id")


def _flag(payload: dict[str, Any], name: str) -> bool:
    value = payload.get(name, False)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


@ingestion_bp.post("/ensure-refs")
def ensure_refs():
    payload = _payload()
    result = ReferenceRegistry(get_db()).ensure_refs(_list(payload, "assets"), _list(payload, "expenses"))
    return jsonify({"assetMap": result["asset_map"], "expenseMap": result["expense_map"]})


@ingestion_bp.post("/cash-in-structured")
def cash_in_structured():
    payload = _payload()
    result = IngestionService(get_db()).import_cash_in(
        _unit_id(payload),
        payload.get("report_month"),
        _list(payload, "transactions"),
        supersede=_flag(payload, "supersede"),
    )
    return jsonify({"upserted": result["upserted"]})


@ingestion_bp.post("/cash-out-structured")
def cash_out_structured():
    payload = _payload()
    result = IngestionService(get_db()).import_cash_out(
        _unit_id(payload),
        payload.get("report_month"),
        _list(payload, "transactions"),
        supersede=_flag(payload, "supersede"),
    )
    return jsonify({"upserted": result["upserted"]})


@ingestion_bp.post("/inventory-structured")
def inventory_structured():
    payload = _payload()
    if not _unit_id(payload):
        raise ValidationError(errors.missing_fields("se_id"), errors.MISSING_FIELDS)
    result = IngestionService(get_db()).import_inventory(
        _unit_id(payload),
        items=_list(payload, "items"),
        bom_lines=_list(payload, "bom_lines"),
        report_links=_list(payload, "report_links"),
        supersede=_flag(payload, "supersede"),
    )
    return jsonify(
        {
            "upsertedItems": result["upserted_items"],
            "insertedBomLines": result["inserted_bom_lines"],
            "linked": result["linked"],
        }
    )
