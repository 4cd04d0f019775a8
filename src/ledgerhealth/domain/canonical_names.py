"""Static synonym table for asset and expense labels.

Keys are normalized labels (trimmed, single-spaced, lowercase). Bump
CANONICAL_NAMES_VERSION whenever an entry changes; category totals are
recomputed on the next import touching the affected categories.
"""

from types import MappingProxyType

from ledgerhealth.domain.entities import CategoryKind

CANONICAL_NAMES_VERSION = 3

UNCATEGORIZED = "uncategorized"

_ASSET_SYNONYMS = {
    "equipment": "equipment",
    "equipments": "equipment",
    "machine": "equipment",
    "machines": "equipment",
    "machinery": "equipment",
    "tools": "equipment",
    "furniture": "furniture and fixtures",
    "fixtures": "furniture and fixtures",
    "furniture and fixtures": "furniture and fixtures",
    "furnitures": "furniture and fixtures",
    "vehicle": "vehicle",
    "vehicles": "vehicle",
    "motorcycle": "vehicle",
    "tricycle": "vehicle",
    "truck": "vehicle",
    "computer": "computer equipment",
    "computers": "computer equipment",
    "laptop": "computer equipment",
    "computer equipment": "computer equipment",
    "land": "land and building",
    "building": "land and building",
    "land and building": "land and building",
    "receivable": "accounts receivable",
    "receivables": "accounts receivable",
    "accounts receivable": "accounts receivable",
    "a/r": "accounts receivable",
}

_EXPENSE_SYNONYMS = {
    "salary": "salaries and wages",
    "salaries": "salaries and wages",
    "wage": "salaries and wages",
    "wages": "salaries and wages",
    "payroll": "salaries and wages",
    "salaries and wages": "salaries and wages",
    "rent": "rent",
    "rental": "rent",
    "space rental": "rent",
    "lease": "rent",
    "electricity": "utilities",
    "electric bill": "utilities",
    "water": "utilities",
    "water bill": "utilities",
    "utilities": "utilities",
    "utility": "utilities",
    "transpo": "transportation",
    "transport": "transportation",
    "transportation": "transportation",
    "fare": "transportation",
    "fuel": "transportation",
    "gas": "transportation",
    "delivery": "delivery and shipping",
    "shipping": "delivery and shipping",
    "courier": "delivery and shipping",
    "internet": "communication",
    "load": "communication",
    "mobile load": "communication",
    "phone": "communication",
    "communication": "communication",
    "marketing": "marketing",
    "advertising": "marketing",
    "ads": "marketing",
    "supplies": "office supplies",
    "office supplies": "office supplies",
    "repairs": "repairs and maintenance",
    "maintenance": "repairs and maintenance",
    "repairs and maintenance": "repairs and maintenance",
    "misc": "miscellaneous",
    "miscellaneous": "miscellaneous",
    "others": "miscellaneous",
    "other": "miscellaneous",
}

CANONICAL_NAMES = MappingProxyType(
    {
        CategoryKind.ASSET: MappingProxyType(_ASSET_SYNONYMS),
        CategoryKind.EXPENSE: MappingProxyType(_EXPENSE_SYNONYMS),
    }
)


def normalize_label(raw_label: object) -> str:
    """Trim, collapse whitespace and lowercase a label. Non-strings become ''."""
    if not isinstance(raw_label, str):
        return ""
    return " ".join(raw_label.split()).lower()


def canonical_name(raw_label: object, kind: CategoryKind) -> str:
    """Map a free-text label to its canonical name for the given kind."""
    normalized = normalize_label(raw_label)
    if not normalized:
        return UNCATEGORIZED
    return CANONICAL_NAMES[kind].get(normalized, normalized)
