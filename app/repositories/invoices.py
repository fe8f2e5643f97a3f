# app/repositories/invoices.py

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from app.db.records import Invoice, decode_invoice
from app.db.schema import invoices


class InvoiceRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        stmt = select(invoices).where(invoices.c.id == invoice_id)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()

        return decode_invoice(row) if row is not None else None

    def get_by_invoice_number(self, invoice_number: str) -> Optional[Invoice]:
        stmt = select(invoices).where(invoices.c.invoice_number == invoice_number)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()

        return decode_invoice(row) if row is not None else None

    def get_all(self) -> List[Invoice]:
        stmt = select(invoices).order_by(invoices.c.id)

        with self.engine.connect() as conn:
            return [decode_invoice(row) for row in conn.execute(stmt).mappings()]

    def get_by_customer_id(self, customer_id: int) -> List[Invoice]:
        stmt = (
            select(invoices)
            .where(invoices.c.customer_id == customer_id)
            .order_by(invoices.c.id)
        )

        with self.engine.connect() as conn:
            return [decode_invoice(row) for row in conn.execute(stmt).mappings()]

    def create(self, invoice: Invoice) -> Invoice:
        stmt = (
            insert(invoices)
            .values(
                invoice_number=invoice.invoice_number,
                customer_id=invoice.customer_id,
                invoice_date=invoice.invoice_date,
                amount=invoice.amount,
            )
            .returning(invoices.c.id)
        )

        with self.engine.begin() as conn:
            invoice.id = conn.execute(stmt).scalar_one()

        return invoice

    def update(self, invoice: Invoice) -> bool:
        # Owner is changed only through a transfer, never by a plain update
        stmt = (
            update(invoices)
            .where(invoices.c.id == invoice.id)
            .values(
                invoice_number=invoice.invoice_number,
                invoice_date=invoice.invoice_date,
                amount=invoice.amount,
            )
        )

        with self.engine.begin() as conn:
            updated = conn.execute(stmt).rowcount

        return updated > 0

    def adjust_all_amounts(self, percentage: Decimal) -> int:
        """
        Scale every invoice amount by ``percentage`` percent in one UPDATE,
        rounded to cents. Returns the number of invoices changed.
        """
        factor = 1 + Decimal(percentage) / 100
        stmt = update(invoices).values(amount=func.round(invoices.c.amount * factor, 2))

        with self.engine.begin() as conn:
            return conn.execute(stmt).rowcount

    def delete(self, invoice_id: int) -> bool:
        stmt = delete(invoices).where(invoices.c.id == invoice_id)

        with self.engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount

        return deleted > 0

    def exists(self, invoice_id: int) -> bool:
        stmt = select(func.count()).select_from(invoices).where(invoices.c.id == invoice_id)

        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one() > 0

    def invoice_number_exists(self, invoice_number: str, exclude_id: Optional[int] = None) -> bool:
        conditions = [invoices.c.invoice_number == invoice_number]
        if exclude_id is not None:
            conditions.append(invoices.c.id != exclude_id)

        stmt = select(func.count()).select_from(invoices).where(*conditions)

        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one() > 0

    # ---- Transaction-scoped helpers (caller owns the connection) ----

    @staticmethod
    def count_for_customer(conn: Connection, customer_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(invoices)
            .where(invoices.c.customer_id == customer_id)
        )
        return conn.execute(stmt).scalar_one()

    @staticmethod
    def reassign_all(conn: Connection, from_customer_id: int, to_customer_id: int) -> int:
        """Move every invoice of one customer to another in a single UPDATE."""
        stmt = (
            update(invoices)
            .where(invoices.c.customer_id == from_customer_id)
            .values(customer_id=to_customer_id)
        )
        return conn.execute(stmt).rowcount
