"""Tests for unit and program registration."""

import pytest

from ledgerhealth.domain.entities import Scope
from ledgerhealth.domain.errors import NotFoundError, ValidationError
from ledgerhealth.utils.unit_resolver import resolve_unit


class TestUnitService:
    """Tests for UnitService."""

    def test_create_unit(self, unit_service):
        unit_id = unit_service.create_unit("  Bakery Co-op ", abbr=" BCO ")
        unit = unit_service.get_unit(unit_id)
        assert unit.name == "Bakery Co-op"
        assert unit.abbr == "BCO"
        assert unit.is_active

    def test_display_abbr_falls_back_to_name(self, unit_service):
        unit = unit_service.get_unit(unit_service.create_unit("Weavers"))
        assert unit.display_abbr == "Weavers"

    def test_blank_name_rejected(self, unit_service):
        with pytest.raises(ValidationError):
            unit_service.create_unit("   ")

    def test_unknown_program_rejected(self, unit_service):
        with pytest.raises(NotFoundError):
            unit_service.create_unit("Bakery", program_id="0b7e8f6c-8f55-4b61-9a77-2f1ab0c4d3e2")

    def test_list_units_by_program(self, unit_service):
        program_id = unit_service.get_or_create_program("Cohort 2024")
        assert unit_service.get_or_create_program("Cohort 2024") == program_id
        inside = unit_service.create_unit("Inside", program_id=program_id)
        unit_service.create_unit("Outside")

        units = unit_service.list_units(Scope(program_id=program_id))
        assert [u.id for u in units] == [inside]
        assert len(unit_service.list_units()) == 2


class TestResolveUnit:
    """Tests for resolving CLI unit arguments."""

    def test_resolve_by_name_abbr_and_id(self, unit_service, sample_unit):
        assert resolve_unit(unit_service, "bakery co-op") == sample_unit.id
        assert resolve_unit(unit_service, "bco") == sample_unit.id
        assert resolve_unit(unit_service, sample_unit.id) == sample_unit.id

    def test_unknown_unit(self, unit_service, sample_unit):
        with pytest.raises(NotFoundError):
            resolve_unit(unit_service, "Nope")
        with pytest.raises(NotFoundError):
            resolve_unit(unit_service, "0b7e8f6c-8f55-4b61-9a77-2f1ab0c4d3e2")
