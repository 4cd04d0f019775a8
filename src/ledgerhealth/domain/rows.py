"""Parsing and classification of submitted cash-in and cash-out rows.

Every input row is resolved exactly once into a ``LedgerRow`` whose amount
shape is either ``SingleAmount`` (the row stores its own buckets) or
``SplitAmounts`` (the row's cash is carried only by per-label split rows).
"""

import hashlib
import json
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ledgerhealth.domain import errors
from ledgerhealth.domain.canonical_names import canonical_name, normalize_label
from ledgerhealth.domain.entities import (
    CategoryKind,
    LedgerRow,
    ReportKind,
    RowMode,
    SingleAmount,
    Split,
    SplitAmounts,
)
from ledgerhealth.domain.errors import ValidationError
from ledgerhealth.utils.amount_parser import to_money
from ledgerhealth.utils.date_parser import to_date

ZERO = Decimal("0")

CASH_IN_BUCKETS = (
    "cash_amount",
    "sales_amount",
    "other_revenue_amount",
    "liability_amount",
    "owners_capital_amount",
)

CASH_OUT_BUCKETS = (
    "cash_amount",
    "inventory_amount",
    "liability_amount",
    "owners_withdrawal_amount",
)

ALL_BUCKETS = (
    "cash_amount",
    "sales_amount",
    "other_revenue_amount",
    "liability_amount",
    "owners_capital_amount",
    "inventory_amount",
    "owners_withdrawal_amount",
)

BUCKETS = {ReportKind.CASH_IN: CASH_IN_BUCKETS, ReportKind.CASH_OUT: CASH_OUT_BUCKETS}

# Accepted spellings of the split maps
DYNAMIC_ASSET_KEYS = ("dynamic_assets", "__dynamicAssets")
DYNAMIC_EXPENSE_KEYS = ("dynamic_expenses", "__dynamicExpenses")

MODE_KIND = {RowMode.ASSET_LINKED: CategoryKind.ASSET, RowMode.EXPENSE_LINKED: CategoryKind.EXPENSE}


def classify_row(kind: ReportKind, asset_label: Optional[str], expense_label: Optional[str], row_num: int) -> RowMode:
    """Decide the single categorization of a row.

    Raises:
        ValidationError: AMBIGUOUS_CATEGORY if the row names both an asset
            and an expense, or a cash-in row names an expense
    """
    has_asset = bool(normalize_label(asset_label))
    has_expense = bool(normalize_label(expense_label))
    if has_asset and has_expense:
        raise ValidationError(errors.ambiguous_category(row_num), errors.AMBIGUOUS_CATEGORY)
    if has_expense and kind is ReportKind.CASH_IN:
        raise ValidationError(
            f"Row {row_num}: cash-in rows cannot be linked to an expense", errors.AMBIGUOUS_CATEGORY
        )
    if has_asset:
        return RowMode.ASSET_LINKED
    if has_expense:
        return RowMode.EXPENSE_LINKED
    return RowMode.UNCATEGORIZED


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _amount(value: Any, row_num: int, field_name: str) -> Optional[Decimal]:
    try:
        return to_money(value)
    except ValueError as e:
        raise ValidationError(f"Row {row_num}: invalid {field_name}: {e}", errors.INVALID_AMOUNT) from e


def _split_map(raw: Mapping[str, Any], keys: Sequence[str], row_num: int) -> dict:
    for key in keys:
        value = raw.get(key)
        if value:
            if not isinstance(value, Mapping):
                raise ValidationError(f"Row {row_num}: {key} must be an object of label to amount")
            return dict(value)
    return {}


def _parse_splits(
    raw: Mapping[str, Any], kind: ReportKind, row_num: int
) -> tuple[Split, ...]:
    dynamic_assets = _split_map(raw, DYNAMIC_ASSET_KEYS, row_num)
    dynamic_expenses = _split_map(raw, DYNAMIC_EXPENSE_KEYS, row_num)
    if dynamic_expenses and kind is ReportKind.CASH_IN:
        raise ValidationError(
            f"Row {row_num}: cash-in rows cannot be split across expenses", errors.AMBIGUOUS_CATEGORY
        )

    merged: dict[tuple[RowMode, str], Decimal] = {}
    for mode, mapping in (
        (RowMode.ASSET_LINKED, dynamic_assets),
        (RowMode.EXPENSE_LINKED, dynamic_expenses),
    ):
        for label, value in mapping.items():
            amount = _amount(value, row_num, f"split amount for '{label}'")
            if amount is None:
                continue
            # Synonyms of one category collapse into a single split
            key = (mode, canonical_name(label, MODE_KIND[mode]))
            merged[key] = merged.get(key, ZERO) + amount

    return tuple(Split(mode=mode, label=label, amount=amount) for (mode, label), amount in merged.items())


def parse_row(raw: Mapping[str, Any], kind: ReportKind, row_num: int, default_date: date) -> Optional[LedgerRow]:
    """Parse one submitted row.

    Args:
        raw: Row as submitted (JSON object)
        kind: Cash-in or cash-out
        row_num: 1-based position in the payload, used in error messages
        default_date: Effective date used when the row has none

    Returns:
        LedgerRow, or None when the row carries no amount at all

    Raises:
        ValidationError: If an amount or date cannot be parsed, or the row
            is ambiguous or mixes split and non-split amounts
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Row {row_num}: expected an object")

    try:
        transaction_date = to_date(raw.get("transaction_date")) or default_date
    except ValueError as e:
        raise ValidationError(f"Row {row_num}: {e}", errors.INVALID_DATE) from e

    buckets = {}
    for name in BUCKETS[kind]:
        amount = _amount(raw.get(name), row_num, name)
        if amount is not None:
            buckets[name] = amount

    splits = _parse_splits(raw, kind, row_num)
    if splits:
        others = [name for name, amount in buckets.items() if name != "cash_amount" and amount != ZERO]
        split_total = sum((s.amount for s in splits), ZERO)
        cash = buckets.get("cash_amount")
        if cash is not None and cash != ZERO and cash != split_total:
            others.insert(0, "cash_amount")
        if others:
            raise ValidationError(errors.mixed_split_row(row_num, others), errors.MIXED_SPLIT_ROW)
        shape = SplitAmounts(splits=splits)
        buckets = {}
    else:
        if not buckets:
            return None
        asset_label = _text(raw.get("asset_name"))
        expense_label = _text(raw.get("expense_name"))
        mode = classify_row(kind, asset_label, expense_label, row_num)
        label = {RowMode.ASSET_LINKED: asset_label, RowMode.EXPENSE_LINKED: expense_label}.get(mode)
        shape = SingleAmount(mode=mode, label=label)

    return LedgerRow(
        row_num=row_num,
        transaction_date=transaction_date,
        shape=shape,
        buckets=buckets,
        note=_text(raw.get("note")),
        entered_by=_text(raw.get("entered_by")),
        source_key=_text(raw.get("content_key")),
    )


def parse_rows(rows: Sequence[Any], kind: ReportKind, default_date: date) -> list[LedgerRow]:
    """Parse a payload. Rows without any amount are dropped."""
    parsed = []
    for index, raw in enumerate(rows or [], start=1):
        row = parse_row(raw, kind, index, default_date)
        if row is not None:
            parsed.append(row)
    return parsed


def _decimal_text(value: Decimal) -> str:
    return format(value.normalize(), "f") if value != ZERO else "0"


def _fingerprint(kind: ReportKind, unit_id: str, period_month: date, row: LedgerRow) -> str:
    if isinstance(row.shape, SplitAmounts):
        labels = None
        splits = sorted([s.mode.value, s.label, _decimal_text(s.amount)] for s in row.shape.splits)
    else:
        labels = [row.shape.mode.value, normalize_label(row.shape.label)]
        splits = []
    payload = {
        "kind": kind.value,
        "unit": unit_id,
        "period": period_month.isoformat(),
        "date": row.transaction_date.isoformat(),
        "buckets": {name: _decimal_text(amount) for name, amount in sorted(row.buckets.items()) if amount != ZERO},
        "labels": labels,
        "splits": splits,
        "note": row.note or "",
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def content_keys(kind: ReportKind, unit_id: str, period_month: date, rows: Sequence[LedgerRow]) -> list[str]:
    """Compute the idempotency key of every row.

    A source-supplied key wins (scoped to kind and period). Otherwise the key
    hashes the row content plus its occurrence index among identical rows,
    so genuinely repeated rows in one payload stay distinct while a
    re-submission of the same payload maps onto the same keys.

    Raises:
        ValidationError: DUPLICATE_CONTENT_KEY if two rows carry the same
            source key
    """
    seen: Counter = Counter()
    source_rows: dict[str, int] = {}
    keys = []
    for row in rows:
        if row.source_key:
            if row.source_key in source_rows:
                raise ValidationError(
                    errors.duplicate_content_key(row.row_num, source_rows[row.source_key], row.source_key),
                    errors.DUPLICATE_CONTENT_KEY,
                )
            source_rows[row.source_key] = row.row_num
            keys.append(f"src:{kind.value}:{period_month.isoformat()}:{row.source_key}")
            continue
        fingerprint = _fingerprint(kind, unit_id, period_month, row)
        occurrence = seen[fingerprint]
        seen[fingerprint] += 1
        digest = hashlib.sha256(f"{fingerprint}|{occurrence}".encode("utf-8")).hexdigest()
        keys.append(digest)
    return keys


def split_key(parent_key: str, split: Split) -> str:
    """Key of a split row derived from its source row."""
    return f"{parent_key}#{split.mode.value}:{split.label}"
