# app/repositories/reports.py
"""
Read-only projections computed in SQL (aggregates, grouping) rather than by
loading whole aggregates and summing in Python.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import Integer, Numeric, extract, func, select, type_coerce
from sqlalchemy.engine import Engine

from app.db.records import Customer, decode_customer
from app.db.relations import load_related
from app.db.schema import customers, invoices
from app.repositories.customers import customer_select


@dataclass
class CustomerSummary:
    id: int
    name: str
    email: str
    invoice_count: int
    total_amount: Decimal
    last_invoice_date: Optional[date]


@dataclass
class InvoiceStatistics:
    year: int
    total_revenue: Decimal
    invoice_count: int
    average_amount: Decimal
    min_amount: Decimal
    max_amount: Decimal


@dataclass
class MonthlyRevenue:
    year: int
    month: int
    revenue: Decimal
    previous_month_revenue: Optional[Decimal]
    growth_percentage: Decimal


@dataclass
class CustomerStats:
    invoice_count: int
    total_amount: Decimal
    average_amount: Decimal
    last_invoice_date: Optional[date]


def growth_percentage(revenue: Decimal, previous: Optional[Decimal]) -> Decimal:
    """Month-over-month change in percent; 0 when there is nothing to compare to."""
    if not previous:
        return Decimal("0.00")
    return ((revenue - previous) / previous * 100).quantize(Decimal("0.01"))


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))


class ReportRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def customer_summaries(self) -> List[CustomerSummary]:
        stmt = (
            select(
                customers.c.id,
                customers.c.name,
                customers.c.email,
                func.count(invoices.c.id).label("invoice_count"),
                func.coalesce(func.sum(invoices.c.amount), 0).label("total_amount"),
                func.max(invoices.c.invoice_date).label("last_invoice_date"),
            )
            .select_from(customers.outerjoin(invoices))
            .group_by(customers.c.id, customers.c.name, customers.c.email)
            .order_by(customers.c.name, customers.c.id)
        )

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()

        return [
            CustomerSummary(
                id=row["id"],
                name=row["name"],
                email=row["email"],
                invoice_count=row["invoice_count"],
                total_amount=_money(row["total_amount"]),
                last_invoice_date=row["last_invoice_date"],
            )
            for row in rows
        ]

    def invoice_statistics(self) -> List[InvoiceStatistics]:
        year = type_coerce(extract("year", invoices.c.invoice_date), Integer)

        stmt = (
            select(
                year.label("year"),
                func.sum(invoices.c.amount).label("total_revenue"),
                func.count().label("invoice_count"),
                type_coerce(func.avg(invoices.c.amount), Numeric(18, 2)).label("average_amount"),
                func.min(invoices.c.amount).label("min_amount"),
                func.max(invoices.c.amount).label("max_amount"),
            )
            .group_by(year)
            .order_by(year)
        )

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()

        return [
            InvoiceStatistics(
                year=int(row["year"]),
                total_revenue=_money(row["total_revenue"]),
                invoice_count=row["invoice_count"],
                average_amount=_money(row["average_amount"]),
                min_amount=_money(row["min_amount"]),
                max_amount=_money(row["max_amount"]),
            )
            for row in rows
        ]

    def monthly_revenue(self, year: int) -> List[MonthlyRevenue]:
        """
        Revenue per month of ``year`` alongside the previous month's revenue
        (LAG window) and the growth between the two. Months without invoices
        are not listed.
        """
        invoice_year = type_coerce(extract("year", invoices.c.invoice_date), Integer)
        invoice_month = type_coerce(extract("month", invoices.c.invoice_date), Integer)

        monthly = (
            select(
                invoice_month.label("month"),
                func.sum(invoices.c.amount).label("revenue"),
            )
            .where(invoice_year == year)
            .group_by(invoice_month)
            .subquery()
        )
        stmt = select(
            monthly.c.month,
            monthly.c.revenue,
            func.lag(monthly.c.revenue).over(order_by=monthly.c.month).label("previous_revenue"),
        ).order_by(monthly.c.month)

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()

        items = []
        for row in rows:
            revenue = _money(row["revenue"])
            previous = (
                _money(row["previous_revenue"]) if row["previous_revenue"] is not None else None
            )
            items.append(
                MonthlyRevenue(
                    year=year,
                    month=int(row["month"]),
                    revenue=revenue,
                    previous_month_revenue=previous,
                    growth_percentage=growth_percentage(revenue, previous),
                )
            )
        return items

    def customer_with_stats(self, customer_id: int) -> Optional[Tuple[Customer, CustomerStats]]:
        """
        A customer with invoices and phone numbers loaded, plus invoice
        aggregates, read on one connection.
        """
        stats_stmt = select(
            func.count(invoices.c.id).label("invoice_count"),
            func.coalesce(func.sum(invoices.c.amount), 0).label("total_amount"),
            type_coerce(func.avg(invoices.c.amount), Numeric(18, 2)).label("average_amount"),
            func.max(invoices.c.invoice_date).label("last_invoice_date"),
        ).where(invoices.c.customer_id == customer_id)

        with self.engine.connect() as conn:
            row = conn.execute(
                customer_select().where(customers.c.id == customer_id)
            ).mappings().first()
            if row is None:
                return None
            customer = decode_customer(row)
            load_related(conn, customer)
            stats = conn.execute(stats_stmt).mappings().one()

        return customer, CustomerStats(
            invoice_count=stats["invoice_count"],
            total_amount=_money(stats["total_amount"]),
            average_amount=_money(stats["average_amount"]),
            last_invoice_date=stats["last_invoice_date"],
        )
