"""Unit and program domain service."""

from typing import Optional

from ledgerhealth.database.base import Database
from ledgerhealth.domain import errors
from ledgerhealth.domain.entities import Program, Scope, Unit
from ledgerhealth.domain.errors import NotFoundError, ValidationError


class UnitService:
    """Minimal registration and lookup of units and programs.

    Units are reference data owned elsewhere; this service exists so the
    engine can be driven from the CLI and tests.
    """

    def __init__(self, db: Database):
        """Initialize unit service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_program(self, name: str) -> str:
        """Create a program.

        Raises:
            ValidationError: If the name is blank
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(errors.missing_fields("name"), errors.MISSING_FIELDS)
        return self.db.create_program(name)

    def get_or_create_program(self, name: str) -> str:
        """Return the ID of the program with this name, creating it if needed."""
        for program in self.db.list_programs():
            if program.name == name.strip():
                return program.id
        return self.create_program(name)

    def list_programs(self) -> list[Program]:
        return self.db.list_programs()

    def create_unit(self, name: str, abbr: Optional[str] = None, program_id: Optional[str] = None) -> str:
        """Create a unit.

        Args:
            name: Display name
            abbr: Optional abbreviation
            program_id: Optional owning program

        Returns:
            Unit ID

        Raises:
            ValidationError: If the name is blank
            NotFoundError: If the program doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(errors.missing_fields("name"), errors.MISSING_FIELDS)
        if program_id is not None and self.db.get_program(program_id) is None:
            raise NotFoundError(f"Program {program_id} not found")
        abbr = abbr.strip() if abbr and abbr.strip() else None
        return self.db.create_unit(name, abbr=abbr, program_id=program_id)

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.db.get_unit(unit_id)

    def list_units(self, scope: Optional[Scope] = None) -> list[Unit]:
        return self.db.list_units(scope)
