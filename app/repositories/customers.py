# app/repositories/customers.py

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine

from app.db.filters import FilterBuilder, Predicate, optional_predicates
from app.db.records import Customer, decode_customer
from app.db.relations import load_related, load_related_many
from app.db.engine import upsert_insert
from app.db.schema import customers, invoices

# Correlated per-row aggregate: sum of this customer's invoice amounts, 0 if none
customer_balance = (
    select(func.coalesce(func.sum(invoices.c.amount), 0))
    .where(invoices.c.customer_id == customers.c.id)
    .scalar_subquery()
)

customer_filters = FilterBuilder(
    {
        "id": customers.c.id,
        "name": customers.c.name,
        "email": customers.c.email,
        "balance": customer_balance,
    }
)


def search_predicates(
    name: Optional[str] = None,
    email: Optional[str] = None,
    min_balance: Optional[Decimal] = None,
) -> List[Predicate]:
    return optional_predicates(
        name=("contains", name),
        email=("contains", email),
        balance=("ge", min_balance),
    )


def customer_select():
    return select(
        customers.c.id,
        customers.c.name,
        customers.c.email,
        customer_balance.label("balance"),
    )


class CustomerRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, customer_id: int, include_related: bool = False) -> Optional[Customer]:
        stmt = customer_select().where(customers.c.id == customer_id)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
            if row is None:
                return None
            customer = decode_customer(row)
            if include_related:
                load_related(conn, customer)

        return customer

    def get_by_email(self, email: str) -> Optional[Customer]:
        stmt = customer_select().where(customers.c.email == email)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()

        return decode_customer(row) if row is not None else None

    def get_all(self, include_related: bool = False) -> List[Customer]:
        stmt = customer_select().order_by(customers.c.name, customers.c.id)

        with self.engine.connect() as conn:
            items = [decode_customer(row) for row in conn.execute(stmt).mappings()]
            if include_related:
                load_related_many(conn, items)

        return items

    def get_paged(
        self, page: int, page_size: int, include_related: bool = False
    ) -> Tuple[List[Customer], int]:
        """
        One page ordered by name, plus the total row count from a separate
        COUNT query. Clamping page / page_size is the caller's job.
        """
        count_stmt = select(func.count()).select_from(customers)
        stmt = (
            customer_select()
            .order_by(customers.c.name, customers.c.id)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )

        with self.engine.connect() as conn:
            total_count = conn.execute(count_stmt).scalar_one()
            items = [decode_customer(row) for row in conn.execute(stmt).mappings()]
            if include_related:
                load_related_many(conn, items)

        return items, total_count

    def search_statement(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        min_balance: Optional[Decimal] = None,
    ):
        stmt = customer_select().order_by(customers.c.name, customers.c.id)
        return customer_filters.apply(stmt, search_predicates(name, email, min_balance))

    def search(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        min_balance: Optional[Decimal] = None,
    ) -> List[Customer]:
        stmt = self.search_statement(name, email, min_balance)

        with self.engine.connect() as conn:
            return [decode_customer(row) for row in conn.execute(stmt).mappings()]

    def create(self, customer: Customer) -> Customer:
        stmt = (
            insert(customers)
            .values(name=customer.name, email=customer.email)
            .returning(customers.c.id)
        )

        with self.engine.begin() as conn:
            customer.id = conn.execute(stmt).scalar_one()

        return customer

    def update(self, customer: Customer) -> bool:
        # Unconditional overwrite: no version column, last writer wins
        stmt = (
            update(customers)
            .where(customers.c.id == customer.id)
            .values(name=customer.name, email=customer.email)
        )

        with self.engine.begin() as conn:
            updated = conn.execute(stmt).rowcount

        return updated > 0

    def upsert(self, customer: Customer) -> Customer:
        """
        Insert, or overwrite name and email when a row with ``customer.id``
        already exists. Without an id this is a plain insert.
        """
        values = {"name": customer.name, "email": customer.email}
        if customer.id is not None:
            values["id"] = customer.id

        stmt = upsert_insert(self.engine, customers).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[customers.c.id],
            set_={"name": stmt.excluded.name, "email": stmt.excluded.email},
        ).returning(customers.c.id)

        with self.engine.begin() as conn:
            customer.id = conn.execute(stmt).scalar_one()

        return customer

    def delete(self, customer_id: int) -> bool:
        stmt = delete(customers).where(customers.c.id == customer_id)

        with self.engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount

        return deleted > 0

    def exists(self, customer_id: int) -> bool:
        with self.engine.connect() as conn:
            return self.exists_in(conn, customer_id)

    @staticmethod
    def exists_in(conn: Connection, customer_id: int) -> bool:
        """Existence probe on a connection (and transaction) owned by the caller."""
        stmt = select(func.count()).select_from(customers).where(customers.c.id == customer_id)
        return conn.execute(stmt).scalar_one() > 0

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        conditions = [customers.c.email == email]
        if exclude_id is not None:
            conditions.append(customers.c.id != exclude_id)

        stmt = select(func.count()).select_from(customers).where(*conditions)

        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one() > 0
