# app/db/schema.py

from sqlalchemy import (
    MetaData, Table, Column, Integer, String,
    Numeric, Date, ForeignKey, CheckConstraint,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

PHONE_TYPES = ("DirectDial", "Work", "Mobile")

customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    Column("email", String(200), nullable=False, unique=True),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("invoice_number", String(50), unique=True, nullable=False),
    Column(
        "customer_id",
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("invoice_date", Date, nullable=False),
    Column("amount", Numeric(18, 2), nullable=False),
    CheckConstraint("amount >= 0", name="ck_invoices_amount_nonneg"),
)

telephone_numbers = Table(
    "telephone_numbers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "customer_id",
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("type", String(20), nullable=False),
    Column("number", String(50), nullable=False),
    CheckConstraint(
        "type IN ('DirectDial', 'Work', 'Mobile')",
        name="ck_telephone_numbers_type",
    ),
)


def create_schema(engine: Engine) -> None:
    """Create any missing tables; existing tables and data are left alone."""
    metadata.create_all(engine, checkfirst=True)
