# app/db/relations.py
"""
Manual relationship loading for the Customer aggregate.

There is no ORM doing eager/lazy loading for us, so children are fetched
explicitly: one query per child type, whatever the number of parents. The
batch path then partitions the flat child rows by customer_id in one pass.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from sqlalchemy import select
from sqlalchemy.engine import Connection

from app.db.records import (
    Customer,
    Invoice,
    TelephoneNumber,
    decode_invoice,
    decode_telephone_number,
)
from app.db.schema import invoices, telephone_numbers

logger = logging.getLogger(__name__)


def index_parents(customers: Iterable[Customer]) -> Dict[int, Customer]:
    """
    Phase 1: key the parents by id (insertion-ordered) and reset their child
    lists so every parent ends up with a list, even an empty one.
    """
    by_id: Dict[int, Customer] = {}
    for customer in customers:
        if customer.id in by_id:
            raise ValueError(f"Customer {customer.id} appears more than once")
        customer.invoices = []
        customer.phone_numbers = []
        by_id[customer.id] = customer
    return by_id


def attach_children(
    by_id: Dict[int, Customer],
    invoice_rows: Iterable[Invoice],
    phone_rows: Iterable[TelephoneNumber],
) -> None:
    """Phase 2: hang each child on the parent its customer_id points at."""
    for invoice in invoice_rows:
        parent = by_id.get(invoice.customer_id)
        if parent is None:
            raise LookupError(
                f"Invoice {invoice.id} references customer {invoice.customer_id} outside the loaded set"
            )
        parent.invoices.append(invoice)

    for phone in phone_rows:
        parent = by_id.get(phone.customer_id)
        if parent is None:
            raise LookupError(
                f"Telephone number {phone.id} references customer {phone.customer_id} outside the loaded set"
            )
        parent.phone_numbers.append(phone)


def load_related(conn: Connection, customer: Customer) -> Customer:
    """Load invoices and phone numbers for a single customer."""
    invoice_stmt = (
        select(invoices)
        .where(invoices.c.customer_id == customer.id)
        .order_by(invoices.c.id)
    )
    phone_stmt = (
        select(telephone_numbers)
        .where(telephone_numbers.c.customer_id == customer.id)
        .order_by(telephone_numbers.c.id)
    )

    customer.invoices = [
        decode_invoice(row) for row in conn.execute(invoice_stmt).mappings()
    ]
    customer.phone_numbers = [
        decode_telephone_number(row) for row in conn.execute(phone_stmt).mappings()
    ]
    return customer


def load_related_many(conn: Connection, customers: Sequence[Customer]) -> List[Customer]:
    """
    Load children for many customers with one IN (...) query per child type.
    Returns the customers in their original order.
    """
    by_id = index_parents(customers)
    if not by_id:
        return []

    ids = list(by_id)

    invoice_stmt = (
        select(invoices)
        .where(invoices.c.customer_id.in_(ids))
        .order_by(invoices.c.id)
    )
    phone_stmt = (
        select(telephone_numbers)
        .where(telephone_numbers.c.customer_id.in_(ids))
        .order_by(telephone_numbers.c.id)
    )

    invoice_rows = [decode_invoice(row) for row in conn.execute(invoice_stmt).mappings()]
    phone_rows = [
        decode_telephone_number(row) for row in conn.execute(phone_stmt).mappings()
    ]
    attach_children(by_id, invoice_rows, phone_rows)

    logger.debug(
        "Loaded %s invoices and %s phone numbers for %s customers",
        len(invoice_rows),
        len(phone_rows),
        len(ids),
    )
    return list(by_id.values())
