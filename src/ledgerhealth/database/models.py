"""SQLAlchemy models for the ledgerhealth database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

AMOUNT = Numeric(14, 2)
QUANTITY = Numeric(14, 4)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Program(Base):
    """Program grouping units."""

    __tablename__ = "programs"

    id = Column(String(36), primary_key=True)
    name = Column(String, unique=True, nullable=False)

    units = relationship("Unit", back_populates="program")


class Unit(Base):
    """Organizational unit (enterprise) model."""

    __tablename__ = "units"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    abbr = Column(String, nullable=True)
    program_id = Column(String(36), ForeignKey("programs.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    program = relationship("Program", back_populates="units")


class Category(Base):
    """Canonical asset/expense label with a recomputed total."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    kind = Column(String(16), nullable=False)
    canonical_name = Column(String, nullable=False)
    total_amount = Column(AMOUNT, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("kind", "canonical_name", name="uq_category_kind_name"),)


class LedgerTransaction(Base):
    """Cash-in or cash-out ledger row."""

    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True)
    unit_id = Column(String(36), ForeignKey("units.id"), nullable=False)
    kind = Column(String(16), nullable=False)
    period_month = Column(Date, nullable=False)
    transaction_date = Column(Date, nullable=False)
    content_key = Column(String, nullable=False)
    parent_key = Column(String, nullable=True)
    row_mode = Column(String(16), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    cash_amount = Column(AMOUNT, default=0, nullable=False)
    sales_amount = Column(AMOUNT, default=0, nullable=False)
    other_revenue_amount = Column(AMOUNT, default=0, nullable=False)
    liability_amount = Column(AMOUNT, default=0, nullable=False)
    owners_capital_amount = Column(AMOUNT, default=0, nullable=False)
    inventory_amount = Column(AMOUNT, default=0, nullable=False)
    owners_withdrawal_amount = Column(AMOUNT, default=0, nullable=False)
    note = Column(String, nullable=True)
    entered_by = Column(String, nullable=True)
    imported_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Idempotency anchor
    __table_args__ = (
        UniqueConstraint("unit_id", "content_key", name="uq_ledger_unit_content_key"),
        Index("ix_ledger_unit_kind_period", "unit_id", "kind", "period_month"),
        Index("ix_ledger_parent_key", "unit_id", "parent_key"),
    )

    category = relationship("Category")


class Bom(Base):
    """Bill of materials header."""

    __tablename__ = "boms"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)

    lines = relationship("BomLine", back_populates="bom", cascade="all, delete-orphan")


class BomLine(Base):
    """Raw material line of a bill of materials."""

    __tablename__ = "bom_lines"

    id = Column(Integer, primary_key=True)
    bom_id = Column(Integer, ForeignKey("boms.id"), nullable=False)
    raw_material_name = Column(String, nullable=False)
    raw_material_key = Column(String, nullable=False)
    raw_material_qty = Column(QUANTITY, default=0, nullable=False)
    raw_material_price = Column(AMOUNT, default=0, nullable=False)

    __table_args__ = (UniqueConstraint("bom_id", "raw_material_key", name="uq_bom_line_material"),)

    bom = relationship("Bom", back_populates="lines")


class Item(Base):
    """Inventory item."""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    name_key = Column(String, unique=True, nullable=False)
    price = Column(AMOUNT, default=0, nullable=False)
    beginning_inventory = Column(QUANTITY, default=0, nullable=False)
    less_count = Column(QUANTITY, default=0, nullable=False)
    bom_id = Column(Integer, ForeignKey("boms.id"), nullable=True)


class InventoryCount(Base):
    """Begin and final count of an item for one unit and month."""

    __tablename__ = "inventory_counts"

    id = Column(Integer, primary_key=True)
    unit_id = Column(String(36), ForeignKey("units.id"), nullable=False)
    month = Column(Date, nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    begin_qty = Column(QUANTITY, default=0, nullable=False)
    begin_unit_price = Column(AMOUNT, nullable=True)
    final_qty = Column(QUANTITY, default=0, nullable=False)
    final_unit_price = Column(AMOUNT, nullable=True)

    __table_args__ = (UniqueConstraint("unit_id", "month", "item_id", name="uq_inventory_unit_month_item"),)

    item = relationship("Item")


class PeriodGuard(Base):
    """One row per (unit, month, report kind) ever imported."""

    __tablename__ = "period_guards"

    id = Column(Integer, primary_key=True)
    unit_id = Column(String(36), ForeignKey("units.id"), nullable=False)
    month = Column(Date, nullable=False)
    report_kind = Column(String(16), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("unit_id", "month", "report_kind", name="uq_period_guard"),)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement for SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Concurrent writers wait on the file lock instead of failing at once
        connect_args = {"timeout": 30, "check_same_thread": False}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
