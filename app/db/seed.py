# app/db/seed.py
"""
Populate an empty database with fake customers, invoices and phone numbers.
Does nothing if any customer already exists.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from faker import Faker
from sqlalchemy import func, insert, select
from sqlalchemy.engine import Engine

from app.db.schema import PHONE_TYPES, customers, invoices, telephone_numbers

logger = logging.getLogger(__name__)

INVOICE_NUMBER_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


@dataclass
class SeedStats:
    customers: int = 0
    invoices: int = 0
    phone_numbers: int = 0
    skipped: bool = False


def seed_database(
    engine: Engine,
    customer_count: int = 50,
    min_invoices: int = 1,
    max_invoices: int = 5,
    min_phone_numbers: int = 1,
    max_phone_numbers: int = 3,
    seed: Optional[int] = None,
) -> SeedStats:
    fake = Faker("en_GB")
    if seed is not None:
        fake.seed_instance(seed)

    with engine.begin() as conn:
        existing = conn.execute(select(func.count()).select_from(customers)).scalar_one()
        if existing > 0:
            logger.info("Database already contains %s customers. Skipping seed.", existing)
            return SeedStats(skipped=True)

        logger.info("Database is empty. Generating %s customers...", customer_count)

        invoice_rows = []
        phone_rows = []

        for _ in range(customer_count):
            customer_id = conn.execute(
                insert(customers)
                .values(name=fake.company(), email=fake.unique.company_email())
                .returning(customers.c.id)
            ).scalar_one()

            for _ in range(fake.random_int(min_invoices, max_invoices)):
                invoice_rows.append(
                    {
                        "invoice_number": "INV-"
                        + fake.unique.lexify("????????", letters=INVOICE_NUMBER_CHARS),
                        "customer_id": customer_id,
                        "invoice_date": fake.date_between(start_date="-2y", end_date="today"),
                        "amount": Decimal(fake.random_int(1000, 500000)) / 100,
                    }
                )

            for _ in range(fake.random_int(min_phone_numbers, max_phone_numbers)):
                phone_rows.append(
                    {
                        "customer_id": customer_id,
                        "type": fake.random_element(PHONE_TYPES),
                        "number": fake.phone_number(),
                    }
                )

        if invoice_rows:
            conn.execute(insert(invoices), invoice_rows)
        if phone_rows:
            conn.execute(insert(telephone_numbers), phone_rows)

    stats = SeedStats(
        customers=customer_count,
        invoices=len(invoice_rows),
        phone_numbers=len(phone_rows),
    )
    logger.info(
        "Database seeded: %s customers, %s invoices, %s phone numbers",
        stats.customers,
        stats.invoices,
        stats.phone_numbers,
    )
    return stats
