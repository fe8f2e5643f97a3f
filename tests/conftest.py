"""
Shared fixtures: a fresh SQLite file database per test with foreign keys on.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_cache
from app.db.cache import ReadThroughCache
from app.db.engine import create_store_engine, get_engine
from app.db.records import Customer, Invoice, PhoneType, TelephoneNumber
from app.db.schema import create_schema
from app.main import app
from app.repositories.customers import CustomerRepository
from app.repositories.invoices import InvoiceRepository
from app.repositories.telephone_numbers import TelephoneNumberRepository


@pytest.fixture
def engine(tmp_path):
    """Engine on a throwaway database with the schema created"""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'test.sqlite'}")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def customer_repo(engine):
    return CustomerRepository(engine)


@pytest.fixture
def invoice_repo(engine):
    return InvoiceRepository(engine)


@pytest.fixture
def phone_repo(engine):
    return TelephoneNumberRepository(engine)


@pytest.fixture
def make_customer(customer_repo):
    def _make(name="Acme", email="a@x.com"):
        return customer_repo.create(Customer(name=name, email=email))

    return _make


@pytest.fixture
def make_invoice(invoice_repo):
    counter = {"n": 0}

    def _make(customer_id, amount="100.00", invoice_number=None, invoice_date=date(2024, 1, 15)):
        counter["n"] += 1
        return invoice_repo.create(
            Invoice(
                invoice_number=invoice_number or f"INV-{counter['n']}",
                customer_id=customer_id,
                invoice_date=invoice_date,
                amount=Decimal(amount),
            )
        )

    return _make


@pytest.fixture
def make_phone(phone_repo):
    def _make(customer_id, type=PhoneType.MOBILE, number="07700 900123"):
        return phone_repo.create(
            TelephoneNumber(customer_id=customer_id, type=type, number=number)
        )

    return _make


@pytest.fixture
def client(engine):
    """TestClient wired to the test engine (lifespan is not run)"""
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_cache] = lambda: ReadThroughCache(ttl_seconds=0)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
