# scripts/seed.py
"""
Create the schema if needed and fill an empty database with fake data.

Usage:
    python -m scripts.seed
"""

from app.config import get_settings
from app.db.engine import get_engine
from app.db.schema import create_schema
from app.db.seed import seed_database
from app.log import configure_logging


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = get_engine()
    create_schema(engine)
    stats = seed_database(
        engine,
        customer_count=settings.seed_customer_count,
        min_invoices=settings.seed_min_invoices,
        max_invoices=settings.seed_max_invoices,
        min_phone_numbers=settings.seed_min_phone_numbers,
        max_phone_numbers=settings.seed_max_phone_numbers,
    )

    if stats.skipped:
        print("Database already has data; nothing seeded.")
        return

    print("Seed complete.")
    print(f"Customers:      {stats.customers}")
    print(f"Invoices:       {stats.invoices}")
    print(f"Phone numbers:  {stats.phone_numbers}")


if __name__ == "__main__":
    main()
