"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. Each error carries a stable
    ``code`` for API consumers and the HTTP status it maps to.
    """

    http_status = 400
    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code or self.default_code


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    http_status = 400
    default_code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    http_status = 404
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    """Domain conflict, such as a period that was already imported."""

    http_status = 409
    default_code = "CONFLICT"


class StorageError(DomainError):
    """Storage unavailable or failed unexpectedly. Safe to retry."""

    http_status = 500
    default_code = "STORAGE_UNAVAILABLE"


# Error codes
MISSING_FIELDS = "MISSING_FIELDS"
DUPLICATE_PERIOD = "DUPLICATE_PERIOD"
MULTI_MONTH_PAYLOAD = "MULTI_MONTH_PAYLOAD"
UNKNOWN_UNIT = "UNKNOWN_UNIT"
INVALID_AMOUNT = "INVALID_AMOUNT"
INVALID_DATE = "INVALID_DATE"
AMBIGUOUS_CATEGORY = "AMBIGUOUS_CATEGORY"
MIXED_SPLIT_ROW = "MIXED_SPLIT_ROW"
DUPLICATE_CONTENT_KEY = "DUPLICATE_CONTENT_KEY"
INVALID_UNIT_ID = "INVALID_UNIT_ID"
INVALID_PROGRAM_ID = "INVALID_PROGRAM_ID"
INTEGRITY_VIOLATION = "INTEGRITY_VIOLATION"


def missing_fields(*names: str) -> str:
    """Return message for missing required fields."""
    return f"Missing required field{'s' if len(names) != 1 else ''}: {', '.join(names)}"


def unit_not_found(unit_id: str) -> str:
    """Return message for an unknown unit."""
    return f"Unit {unit_id} not found"


def duplicate_period(unit_id: str, month: str, kind: str) -> str:
    """Return message when a unit already submitted a report for the month."""
    return f"A {kind} report for unit {unit_id} and month {month} already exists"


def multi_month_payload(months: list[str]) -> str:
    """Return message for inventory uploads spanning several months."""
    return (
        f"Multiple months detected in one inventory upload ({', '.join(months)}). "
        "Please split by month."
    )


def ambiguous_category(row_num: int) -> str:
    """Return message for a row linked to both an asset and an expense."""
    return f"Row {row_num}: a transaction cannot be linked to both an asset and an expense"


def mixed_split_row(row_num: int, buckets: list[str]) -> str:
    """Return message for a split row that also carries other amounts."""
    return (
        f"Row {row_num}: split amounts cannot be combined with {', '.join(buckets)}; "
        "submit those on a separate row"
    )


def invalid_identifier(label: str, value: str) -> str:
    """Return message for a malformed scope identifier."""
    return f"Invalid {label} '{value}'"


def duplicate_content_key(row_num: int, first_row: int, key: str) -> str:
    """Return message when two rows of one payload share a source key."""
    return f"Row {row_num}: content_key '{key}' already used by row {first_row}"
