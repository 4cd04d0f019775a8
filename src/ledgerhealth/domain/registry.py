"""Reference Registry: free-text asset and expense labels to category IDs."""

import logging
from typing import Iterable, Optional

from ledgerhealth.database.base import Database
from ledgerhealth.domain.canonical_names import canonical_name, normalize_label
from ledgerhealth.domain.entities import Category, CategoryKind

logger = logging.getLogger(__name__)


class ReferenceRegistry:
    """Resolve labels to canonical categories, creating them lazily."""

    def __init__(self, db: Database):
        """Initialize reference registry.

        Args:
            db: Database instance
        """
        self.db = db

    def resolve(self, raw_label: object, kind: CategoryKind) -> int:
        """Resolve a label to a category ID.

        The label is normalized (trimmed, whitespace collapsed, lowercased)
        and mapped through the synonym table. Empty or non-string labels
        resolve to the "uncategorized" category of the kind.

        Args:
            raw_label: Label as submitted
            kind: Asset or expense

        Returns:
            Category ID
        """
        return self.db.get_or_create_category(kind, canonical_name(raw_label, kind))

    def ensure_refs(
        self, assets: Optional[Iterable[object]] = None, expenses: Optional[Iterable[object]] = None
    ) -> dict[str, dict[str, int]]:
        """Resolve every distinct non-empty label in one transaction.

        Args:
            assets: Asset labels
            expenses: Expense labels

        Returns:
            Dict with "asset_map" and "expense_map", each keyed by the
            lowercased raw label
        """
        result = {"asset_map": {}, "expense_map": {}}
        with self.db.unit_of_work():
            for labels, kind, target in (
                (assets, CategoryKind.ASSET, result["asset_map"]),
                (expenses, CategoryKind.EXPENSE, result["expense_map"]),
            ):
                for raw in labels or ():
                    if not normalize_label(raw):
                        continue
                    key = raw.strip().lower()
                    if key not in target:
                        target[key] = self.resolve(raw, kind)
        logger.info(
            "Ensured %d asset and %d expense references",
            len(result["asset_map"]),
            len(result["expense_map"]),
        )
        return result

    def list_categories(self, kind: Optional[CategoryKind] = None) -> list[Category]:
        return self.db.list_categories(kind)
