"""Shared pytest fixtures for ledgerhealth tests."""

import os
import tempfile
import pytest
from click.testing import CliRunner

from ledgerhealth.api.app import create_app
from ledgerhealth.database.factories import create_sqlite_database
from ledgerhealth.domain.ingestion import IngestionService
from ledgerhealth.domain.metrics import MetricsService
from ledgerhealth.domain.registry import ReferenceRegistry
from ledgerhealth.domain.scoring import ScoringService
from ledgerhealth.domain.units import UnitService
from ledgerhealth.domain.views import ViewService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Schema is created on construction
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def unit_service(temp_db):
    """Create a UnitService with a temporary database."""
    return UnitService(temp_db)


@pytest.fixture
def registry(temp_db):
    """Create a ReferenceRegistry with a temporary database."""
    return ReferenceRegistry(temp_db)


@pytest.fixture
def ingestion_service(temp_db):
    """Create an IngestionService with a temporary database."""
    return IngestionService(temp_db)


@pytest.fixture
def metrics_service(temp_db):
    """Create a MetricsService with a temporary database."""
    return MetricsService(temp_db)


@pytest.fixture
def scoring_service(temp_db):
    """Create a ScoringService with a temporary database."""
    return ScoringService(temp_db)


@pytest.fixture
def view_service(temp_db):
    """Create a ViewService with a temporary database."""
    return ViewService(temp_db)


@pytest.fixture
def sample_unit(unit_service):
    """Create a sample unit for testing."""
    unit_id = unit_service.create_unit("Bakery Co-op", abbr="BCO")
    return unit_service.get_unit(unit_id)


@pytest.fixture
def other_unit(unit_service):
    """Create a second unit for testing."""
    unit_id = unit_service.create_unit("Weavers Guild", abbr="WG")
    return unit_service.get_unit(unit_id)


@pytest.fixture
def complete_month(ingestion_service, sample_unit):
    """Import all three reports of January 2024 for the sample unit.

    Sales 1000 in; opex 400 and inventory purchases 200 out; 50 units at 10
    on hand at the beginning of the month and 30 at the end.
    """
    ingestion_service.import_cash_in(
        sample_unit.id,
        "2024-01-01",
        [{"transaction_date": "2024-01-10", "sales_amount": 1000}],
    )
    ingestion_service.import_cash_out(
        sample_unit.id,
        "2024-01-01",
        [
            {"transaction_date": "2024-01-12", "inventory_amount": 200},
            {"transaction_date": "2024-01-20", "cash_amount": 400, "expense_name": "Rent"},
        ],
    )
    ingestion_service.import_inventory(
        sample_unit.id,
        items=[{"item_name": "Bread", "item_price": 10}],
        report_links=[{"item_name": "Bread", "month": "2024-01-01", "begin_qty": 50, "final_qty": 30}],
    )
    return sample_unit


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def app(temp_db):
    """Create the HTTP app bound to the temporary database."""
    app = create_app(temp_db)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
