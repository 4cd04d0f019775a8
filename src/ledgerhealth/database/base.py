"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerhealth.domain.entities import (
    Program,
    Unit,
    Category,
    CategoryKind,
    LedgerTransaction,
    Item,
    InventoryCount,
    PeriodGuard,
    ReportKind,
    Scope,
    Window,
)


class Database(ABC):
    """Abstract database interface for ledgerhealth.

    Calls made inside ``unit_of_work()`` share one transaction; calls made
    outside it run in their own short transaction.
    """

    @abstractmethod
    def disconnect(self) -> None:
        """Release pooled connections."""
        pass

    @abstractmethod
    def unit_of_work(self, lock_key: Optional[str] = None) -> AbstractContextManager[None]:
        """Open an all-or-nothing transaction, serialized on lock_key if given."""
        pass

    # Program and unit operations
    @abstractmethod
    def create_program(self, name: str) -> str:
        """Create a program. Returns program ID."""
        pass

    @abstractmethod
    def get_program(self, program_id: str) -> Optional[Program]:
        """Get program by ID."""
        pass

    @abstractmethod
    def list_programs(self) -> list[Program]:
        """List all programs."""
        pass

    @abstractmethod
    def create_unit(self, name: str, abbr: Optional[str] = None, program_id: Optional[str] = None) -> str:
        """Create a unit. Returns unit ID."""
        pass

    @abstractmethod
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        """Get unit by ID."""
        pass

    @abstractmethod
    def list_units(self, scope: Optional[Scope] = None, active_only: bool = True) -> list[Unit]:
        """List units inside a scope, ordered by name."""
        pass

    # Category operations
    @abstractmethod
    def get_or_create_category(self, kind: CategoryKind, canonical_name: str) -> int:
        """Get or create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, kind: Optional[CategoryKind] = None) -> list[Category]:
        """List categories, optionally filtered by kind."""
        pass

    @abstractmethod
    def recompute_category_totals(self, category_ids: Iterable[int]) -> None:
        """Recompute total_amount of the given categories from every amount bucket of linked rows."""
        pass

    # Ledger operations
    @abstractmethod
    def upsert_ledger_transaction(self, unit_id: str, content_key: str, fields: dict[str, Any]) -> int:
        """Insert or overwrite the row keyed by (unit_id, content_key). Returns row ID."""
        pass

    @abstractmethod
    def delete_ledger_transactions(self, unit_id: str, content_keys: Iterable[str]) -> int:
        """Delete rows by content key. Returns number of rows deleted."""
        pass

    @abstractmethod
    def list_split_children(self, unit_id: str, parent_key: str) -> list[LedgerTransaction]:
        """List split rows derived from a source row."""
        pass

    @abstractmethod
    def list_period_transactions(
        self, unit_id: str, kind: ReportKind, period_month: date
    ) -> list[LedgerTransaction]:
        """List rows of one unit, kind and period month."""
        pass

    @abstractmethod
    def list_ledger_transactions(
        self,
        unit_ids: Optional[Iterable[str]] = None,
        window: Optional[Window] = None,
        kind: Optional[ReportKind] = None,
    ) -> list[LedgerTransaction]:
        """List rows whose period month falls in the window."""
        pass

    # Period guard operations
    @abstractmethod
    def period_guard_exists(self, unit_id: str, month: date, kind: ReportKind) -> bool:
        """Check if the unit already submitted this report kind for the month."""
        pass

    @abstractmethod
    def insert_period_guard(self, unit_id: str, month: date, kind: ReportKind) -> int:
        """Insert a guard. Raises ConflictError if one exists. Returns guard ID."""
        pass

    @abstractmethod
    def list_period_guards(
        self, unit_ids: Optional[Iterable[str]] = None, window: Optional[Window] = None
    ) -> list[PeriodGuard]:
        """List guards whose month falls in the window."""
        pass

    # Inventory operations
    @abstractmethod
    def get_or_create_bom(self, name: str) -> int:
        """Get or create a bill of materials by name. Returns BOM ID."""
        pass

    @abstractmethod
    def upsert_bom_line(self, bom_id: int, raw_material_name: str, qty: Decimal, price: Decimal) -> bool:
        """Insert or update a BOM line. Returns True when a line was inserted."""
        pass

    @abstractmethod
    def upsert_item(
        self,
        name: str,
        price: Optional[Decimal] = None,
        beginning_inventory: Optional[Decimal] = None,
        less_count: Optional[Decimal] = None,
        bom_id: Optional[int] = None,
    ) -> int:
        """Get or create an item by case-insensitive name; non-null fields overwrite. Returns item ID."""
        pass

    @abstractmethod
    def find_items_by_names(self, names: Iterable[str]) -> dict[str, Item]:
        """Map lowercased item names to items."""
        pass

    @abstractmethod
    def upsert_inventory_count(
        self,
        unit_id: str,
        month: date,
        item_id: int,
        begin_qty: Decimal,
        begin_unit_price: Optional[Decimal],
        final_qty: Decimal,
        final_unit_price: Optional[Decimal],
    ) -> int:
        """Insert or overwrite the count for (unit, month, item). Returns count ID."""
        pass

    @abstractmethod
    def delete_inventory_counts(self, unit_id: str, month: date, keep_item_ids: Iterable[int]) -> int:
        """Delete counts of a unit-month except the given items. Returns number deleted."""
        pass

    @abstractmethod
    def list_inventory_counts(
        self, unit_ids: Optional[Iterable[str]] = None, window: Optional[Window] = None
    ) -> list[InventoryCount]:
        """List inventory counts whose month falls in the window."""
        pass
