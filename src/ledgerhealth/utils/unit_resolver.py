"""Utility for resolving unit names to IDs."""

from ledgerhealth.domain.errors import NotFoundError
from ledgerhealth.domain.scope import is_uuid
from ledgerhealth.domain.units import UnitService


def resolve_unit(unit_service: UnitService, unit: str) -> str:
    """Resolve a unit ID, name or abbreviation to a unit ID.

    Args:
        unit_service: UnitService instance
        unit: Unit UUID, display name or abbreviation (case-insensitive)

    Returns:
        Unit ID

    Raises:
        NotFoundError: If no unit matches
    """
    unit = unit.strip()
    if is_uuid(unit):
        if unit_service.get_unit(unit) is None:
            raise NotFoundError(f"Unit ID {unit} not found")
        return unit

    wanted = unit.lower()
    for candidate in unit_service.list_units():
        if candidate.name.lower() == wanted or (candidate.abbr or "").lower() == wanted:
            return candidate.id

    raise NotFoundError(f"Unit '{unit}' not found")
