"""Ingestion and reconciliation of monthly report submissions."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ledgerhealth.database.base import Database
from ledgerhealth.domain import errors
from ledgerhealth.domain.entities import (
    ImportResult,
    InventoryImportResult,
    LedgerRow,
    ReportKind,
    RowMode,
    SplitAmounts,
)
from ledgerhealth.domain.errors import ConflictError, ValidationError
from ledgerhealth.domain.registry import ReferenceRegistry
from ledgerhealth.domain.rows import ALL_BUCKETS, MODE_KIND, content_keys, parse_rows, split_key
from ledgerhealth.utils.amount_parser import to_amount
from ledgerhealth.utils.date_parser import month_bucket, to_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEFAULT_BOM_NAME = "Default BOM"


def lock_key(unit_id: str, month: date, kind: ReportKind) -> str:
    """Serialization token for one unit, month and report kind."""
    return f"import:{kind.value}:{unit_id}:{month.isoformat()}"


class IngestionService:
    """Service for importing monthly cash-in, cash-out and inventory reports.

    Each import runs in a single transaction serialized on
    (unit, month, kind). A PeriodGuard row records that the period was
    imported; a second import of the same period is a conflict unless it is
    explicitly submitted as a superseding correction.
    """

    def __init__(self, db: Database):
        """Initialize ingestion service.

        Args:
            db: Database instance
        """
        self.db = db
        self.registry = ReferenceRegistry(db)

    def _require_unit(self, unit_id: Any) -> str:
        unit_id = str(unit_id).strip() if unit_id is not None else ""
        if not unit_id:
            raise ValidationError(errors.missing_fields("unit_id"), errors.MISSING_FIELDS)
        if self.db.get_unit(unit_id) is None:
            raise ValidationError(errors.unit_not_found(unit_id), errors.UNKNOWN_UNIT)
        return unit_id

    @staticmethod
    def _require_month(period_month: Any) -> date:
        try:
            month = to_date(period_month)
        except ValueError as e:
            raise ValidationError(str(e), errors.INVALID_DATE) from e
        if month is None:
            raise ValidationError(errors.missing_fields("report_month"), errors.MISSING_FIELDS)
        return month_bucket(month)

    def _check_guard(self, unit_id: str, month: date, kind: ReportKind, supersede: bool) -> bool:
        exists = self.db.period_guard_exists(unit_id, month, kind)
        if exists and not supersede:
            logger.warning("Rejected duplicate %s import for unit %s month %s", kind.value, unit_id, month)
            raise ConflictError(
                errors.duplicate_period(unit_id, month.isoformat(), kind.value), errors.DUPLICATE_PERIOD
            )
        return exists

    def import_period(
        self,
        unit_id: str,
        period_month: Any,
        kind: ReportKind,
        rows: Sequence[Mapping[str, Any]],
        *,
        supersede: bool = False,
    ) -> ImportResult:
        """Import one cash-in or cash-out report for a unit and month.

        Args:
            unit_id: Unit ID
            period_month: Any date inside the report month
            kind: ReportKind.CASH_IN or ReportKind.CASH_OUT
            rows: Submitted transaction rows
            supersede: Replace an earlier import of the same period instead
                of rejecting it

        Returns:
            ImportResult with the number of stored rows written

        Raises:
            ValidationError: If required fields are missing, the unit is
                unknown or a row is invalid
            ConflictError: If the period was already imported and supersede
                is not set
            StorageError: If the database is unavailable
        """
        if kind is ReportKind.INVENTORY:
            raise ValidationError("Inventory reports are imported with import_inventory")
        unit_id = self._require_unit(unit_id)
        month = self._require_month(period_month)
        parsed = parse_rows(rows, kind, default_date=month)
        keys = content_keys(kind, unit_id, month, parsed)

        with self.db.unit_of_work(lock_key=lock_key(unit_id, month, kind)):
            guard_exists = self._check_guard(unit_id, month, kind, supersede)

            existing = self.db.list_period_transactions(unit_id, kind, month)
            affected = {t.category_id for t in existing if t.category_id is not None}
            written: set[str] = set()
            deleted = 0

            for row, key in zip(parsed, keys):
                if isinstance(row.shape, SplitAmounts):
                    deleted += self.db.delete_ledger_transactions(unit_id, [key])
                    children = set()
                    for split in row.shape.splits:
                        category_id = self.registry.resolve(split.label, MODE_KIND[split.mode])
                        child_key = split_key(key, split)
                        fields = self._fields(kind, month, row, split.mode, category_id, parent_key=key)
                        fields["cash_amount"] = split.amount
                        self.db.upsert_ledger_transaction(unit_id, child_key, fields)
                        children.add(child_key)
                        affected.add(category_id)
                    stale = [c.content_key for c in self.db.list_split_children(unit_id, key)]
                    deleted += self.db.delete_ledger_transactions(
                        unit_id, [k for k in stale if k not in children]
                    )
                    written |= children
                else:
                    stale = [c.content_key for c in self.db.list_split_children(unit_id, key)]
                    deleted += self.db.delete_ledger_transactions(unit_id, stale)
                    mode = row.shape.mode
                    category_id = None
                    if mode is not RowMode.UNCATEGORIZED:
                        category_id = self.registry.resolve(row.shape.label, MODE_KIND[mode])
                        affected.add(category_id)
                    fields = self._fields(kind, month, row, mode, category_id, parent_key=None)
                    self.db.upsert_ledger_transaction(unit_id, key, fields)
                    written.add(key)

            if supersede:
                stale = [t.content_key for t in existing if t.content_key not in written]
                deleted += self.db.delete_ledger_transactions(unit_id, stale)

            self.db.recompute_category_totals(affected)
            if not guard_exists:
                self.db.insert_period_guard(unit_id, month, kind)

        logger.info(
            "Imported %d %s rows for unit %s month %s (deleted %d%s)",
            len(written),
            kind.value,
            unit_id,
            month,
            deleted,
            ", superseded" if guard_exists else "",
        )
        return ImportResult(
            unit_id=unit_id,
            period_month=month,
            kind=kind,
            accepted=len(written),
            deleted=deleted,
            superseded=guard_exists,
        )

    @staticmethod
    def _fields(
        kind: ReportKind,
        month: date,
        row: LedgerRow,
        mode: RowMode,
        category_id: Optional[int],
        parent_key: Optional[str],
    ) -> dict[str, Any]:
        fields = {name: row.buckets.get(name, ZERO) for name in ALL_BUCKETS}
        fields.update(
            kind=kind.value,
            period_month=month,
            transaction_date=row.transaction_date,
            parent_key=parent_key,
            row_mode=mode.value,
            category_id=category_id,
            note=row.note,
            entered_by=row.entered_by,
        )
        return fields

    def import_cash_in(
        self, unit_id: str, period_month: Any, transactions: Sequence[Mapping[str, Any]], supersede: bool = False
    ) -> dict[str, int]:
        """Import a cash-in report. Returns {"upserted": n}."""
        result = self.import_period(unit_id, period_month, ReportKind.CASH_IN, transactions, supersede=supersede)
        return {"upserted": result.accepted}

    def import_cash_out(
        self, unit_id: str, period_month: Any, transactions: Sequence[Mapping[str, Any]], supersede: bool = False
    ) -> dict[str, int]:
        """Import a cash-out report. Returns {"upserted": n}."""
        result = self.import_period(unit_id, period_month, ReportKind.CASH_OUT, transactions, supersede=supersede)
        return {"upserted": result.accepted}

    def import_inventory(
        self,
        unit_id: str,
        items: Optional[Sequence[Mapping[str, Any]]] = None,
        bom_lines: Optional[Sequence[Mapping[str, Any]]] = None,
        report_links: Optional[Sequence[Mapping[str, Any]]] = None,
        supersede: bool = False,
    ) -> dict[str, int]:
        """Import an inventory report. Returns upserted_items, inserted_bom_lines and linked."""
        result = self.import_inventory_period(unit_id, items, bom_lines, report_links, supersede=supersede)
        return {
            "upserted_items": result.upserted_items,
            "inserted_bom_lines": result.inserted_bom_lines,
            "linked": result.linked,
        }

    def import_inventory_period(
        self,
        unit_id: str,
        items: Optional[Sequence[Mapping[str, Any]]] = None,
        bom_lines: Optional[Sequence[Mapping[str, Any]]] = None,
        report_links: Optional[Sequence[Mapping[str, Any]]] = None,
        *,
        supersede: bool = False,
    ) -> InventoryImportResult:
        """Import one month of item reference data and inventory counts.

        The month is taken from the report links, which must all fall in the
        same calendar month. Items are matched case-insensitively by name and
        only non-null fields overwrite stored values. Links to unknown items
        are skipped.

        Args:
            unit_id: Unit ID
            items: Item rows (item_name, item_price, item_beginning_inventory,
                item_less_count, bom_name)
            bom_lines: BOM rows (bom_name, raw_material_name, raw_material_qty,
                raw_material_price)
            report_links: Count rows (item_name, month, begin_qty,
                begin_unit_price, final_qty, final_unit_price)
            supersede: Replace an earlier import of the same month

        Returns:
            InventoryImportResult

        Raises:
            ValidationError: MISSING_FIELDS when no link carries a month,
                MULTI_MONTH_PAYLOAD when links span several months
            ConflictError: If the month was already imported and supersede
                is not set
        """
        unit_id = self._require_unit(unit_id)
        month = self._link_month(report_links or [])
        item_rows = [self._parse_item(raw, n) for n, raw in enumerate(items or [], start=1)]
        line_rows = [self._parse_bom_line(raw, n) for n, raw in enumerate(bom_lines or [], start=1)]
        link_rows = [self._parse_link(raw, n) for n, raw in enumerate(report_links or [], start=1)]
        kind = ReportKind.INVENTORY

        with self.db.unit_of_work(lock_key=lock_key(unit_id, month, kind)):
            guard_exists = self._check_guard(unit_id, month, kind, supersede)
            bom_ids: dict[str, int] = {}

            def bom_id_for(name: str) -> int:
                key = name.strip().lower()
                if key not in bom_ids:
                    bom_ids[key] = self.db.get_or_create_bom(name.strip())
                return bom_ids[key]

            for row in item_rows:
                bom_id = bom_id_for(row["bom_name"]) if row["bom_name"] else None
                self.db.upsert_item(
                    row["item_name"],
                    price=row["item_price"],
                    beginning_inventory=row["item_beginning_inventory"],
                    less_count=row["item_less_count"],
                    bom_id=bom_id,
                )

            for row in line_rows:
                self.db.upsert_bom_line(
                    bom_id_for(row["bom_name"] or DEFAULT_BOM_NAME),
                    row["raw_material_name"],
                    row["raw_material_qty"],
                    row["raw_material_price"],
                )

            known = self.db.find_items_by_names(row["item_name"] for row in link_rows)
            linked_items = set()
            for row in link_rows:
                item = known.get(" ".join(row["item_name"].split()).lower())
                if item is None:
                    logger.warning(
                        "Skipping inventory link %d for unit %s: unknown item '%s'",
                        row["row_num"],
                        unit_id,
                        row["item_name"],
                    )
                    continue
                self.db.upsert_inventory_count(
                    unit_id,
                    month,
                    item.id,
                    begin_qty=row["begin_qty"],
                    begin_unit_price=row["begin_unit_price"],
                    final_qty=row["final_qty"],
                    final_unit_price=row["final_unit_price"],
                )
                linked_items.add(item.id)

            if supersede:
                self.db.delete_inventory_counts(unit_id, month, keep_item_ids=linked_items)
            if not guard_exists:
                self.db.insert_period_guard(unit_id, month, kind)

        logger.info(
            "Imported inventory for unit %s month %s: %d items, %d BOM lines, %d linked",
            unit_id,
            month,
            len(item_rows),
            len(line_rows),
            len(linked_items),
        )
        return InventoryImportResult(
            unit_id=unit_id,
            period_month=month,
            upserted_items=len(item_rows),
            inserted_bom_lines=len(line_rows),
            linked=len(linked_items),
            superseded=guard_exists,
        )

    @staticmethod
    def _link_month(report_links: Sequence[Mapping[str, Any]]) -> date:
        months = set()
        for row_num, raw in enumerate(report_links, start=1):
            if not isinstance(raw, Mapping):
                raise ValidationError(f"Report link {row_num}: expected an object")
            try:
                value = to_date(raw.get("month"))
            except ValueError as e:
                raise ValidationError(f"Report link {row_num}: {e}", errors.INVALID_DATE) from e
            if value is not None:
                months.add(month_bucket(value))
        if not months:
            raise ValidationError("Missing or invalid month for inventory report", errors.MISSING_FIELDS)
        if len(months) > 1:
            raise ValidationError(
                errors.multi_month_payload(sorted(m.isoformat() for m in months)), errors.MULTI_MONTH_PAYLOAD
            )
        return months.pop()

    @staticmethod
    def _number(raw: Mapping[str, Any], field_name: str, label: str) -> Optional[Decimal]:
        try:
            return to_amount(raw.get(field_name))
        except ValueError as e:
            raise ValidationError(f"{label}: invalid {field_name}: {e}", errors.INVALID_AMOUNT) from e

    @staticmethod
    def _name(raw: Any, field_name: str, label: str) -> str:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"{label}: expected an object")
        value = raw.get(field_name)
        value = str(value).strip() if value is not None else ""
        if not value:
            raise ValidationError(f"{label}: {errors.missing_fields(field_name)}", errors.MISSING_FIELDS)
        return value

    def _parse_item(self, raw: Any, row_num: int) -> dict[str, Any]:
        label = f"Item {row_num}"
        name = self._name(raw, "item_name", label)
        bom_name = raw.get("bom_name")
        return {
            "item_name": name,
            "item_price": self._number(raw, "item_price", label),
            "item_beginning_inventory": self._number(raw, "item_beginning_inventory", label),
            "item_less_count": self._number(raw, "item_less_count", label),
            "bom_name": str(bom_name).strip() if bom_name and str(bom_name).strip() else None,
        }

    def _parse_bom_line(self, raw: Any, row_num: int) -> dict[str, Any]:
        label = f"BOM line {row_num}"
        name = self._name(raw, "raw_material_name", label)
        bom_name = raw.get("bom_name")
        return {
            "bom_name": str(bom_name).strip() if bom_name and str(bom_name).strip() else None,
            "raw_material_name": name,
            "raw_material_qty": self._number(raw, "raw_material_qty", label) or ZERO,
            "raw_material_price": self._number(raw, "raw_material_price", label) or ZERO,
        }

    def _parse_link(self, raw: Any, row_num: int) -> dict[str, Any]:
        label = f"Report link {row_num}"
        return {
            "row_num": row_num,
            "item_name": self._name(raw, "item_name", label),
            "begin_qty": self._number(raw, "begin_qty", label) or ZERO,
            "begin_unit_price": self._number(raw, "begin_unit_price", label),
            "final_qty": self._number(raw, "final_qty", label) or ZERO,
            "final_unit_price": self._number(raw, "final_unit_price", label),
        }
