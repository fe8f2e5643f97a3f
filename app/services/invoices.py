# app/services/invoices.py

import logging
from datetime import date
from decimal import Decimal
from typing import List

from app.db.records import Invoice
from app.errors import NotFoundError, UniqueConstraintError
from app.repositories.customers import CustomerRepository
from app.repositories.invoices import InvoiceRepository
from app.repositories.reports import (
    InvoiceStatistics,
    MonthlyRevenue,
    ReportRepository,
)
from app.services.base import BaseService

logger = logging.getLogger(__name__)


def _number_unique(invoice_number: str):
    return {"invoice_number": ("Invoice number", invoice_number)}


class InvoiceService(BaseService):
    def __init__(self, engine, **kwargs):
        super().__init__(engine, **kwargs)
        self.repo = InvoiceRepository(engine)
        self.customers = CustomerRepository(engine)
        self.reports = ReportRepository(engine)

    def list_invoices(self) -> List[Invoice]:
        return self._read(self.repo.get_all)

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self._read(lambda: self.repo.get_by_id(invoice_id))
        if invoice is None:
            logger.warning("Invoice %s not found", invoice_id)
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def get_invoice_by_number(self, invoice_number: str) -> Invoice:
        invoice = self._read(lambda: self.repo.get_by_invoice_number(invoice_number))
        if invoice is None:
            logger.warning("Invoice number %s not found", invoice_number)
            raise NotFoundError("Invoice", invoice_number, field="number")
        return invoice

    def list_for_customer(self, customer_id: int) -> List[Invoice]:
        if not self._read(lambda: self.customers.exists(customer_id)):
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)
        return self._read(lambda: self.repo.get_by_customer_id(customer_id))

    def create_invoice(
        self, customer_id: int, invoice_number: str, invoice_date: date, amount: Decimal
    ) -> Invoice:
        logger.info(
            "Creating invoice - Number: %s, CustomerId: %s", invoice_number, customer_id
        )

        if not self._read(lambda: self.customers.exists(customer_id)):
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)

        if self._read(lambda: self.repo.invoice_number_exists(invoice_number)):
            logger.warning("Invoice number %s already exists", invoice_number)
            raise UniqueConstraintError("Invoice number", invoice_number)

        invoice = Invoice(
            invoice_number=invoice_number,
            customer_id=customer_id,
            invoice_date=invoice_date,
            amount=amount,
        )
        created = self._write(
            lambda: self.repo.create(invoice), unique=_number_unique(invoice_number)
        )
        logger.info("Invoice created with ID: %s", created.id)
        return created

    def update_invoice(
        self, invoice_id: int, invoice_number: str, invoice_date: date, amount: Decimal
    ) -> Invoice:
        logger.info("Updating invoice %s", invoice_id)

        invoice = self._read(lambda: self.repo.get_by_id(invoice_id))
        if invoice is None:
            logger.warning("Invoice %s not found for update", invoice_id)
            raise NotFoundError("Invoice", invoice_id)

        if self._read(lambda: self.repo.invoice_number_exists(invoice_number, exclude_id=invoice_id)):
            logger.warning(
                "Invoice number %s already exists for another invoice", invoice_number
            )
            raise UniqueConstraintError("Invoice number", invoice_number)

        invoice.invoice_number = invoice_number
        invoice.invoice_date = invoice_date
        invoice.amount = amount
        if not self._write(
            lambda: self.repo.update(invoice), unique=_number_unique(invoice_number)
        ):
            logger.warning("Invoice %s deleted before update", invoice_id)
            raise NotFoundError("Invoice", invoice_id)

        logger.info("Invoice %s updated successfully", invoice_id)
        return invoice

    def adjust_all_amounts(self, percentage: Decimal) -> int:
        logger.info("Adjusting all invoice amounts by %s%%", percentage)
        changed = self._write(lambda: self.repo.adjust_all_amounts(percentage))
        logger.info("%s invoices adjusted", changed)
        return changed

    def delete_invoice(self, invoice_id: int) -> bool:
        logger.info("Deleting invoice %s", invoice_id)
        deleted = self._write(lambda: self.repo.delete(invoice_id))
        if not deleted:
            logger.warning("Invoice %s not found for deletion", invoice_id)
        return deleted

    def invoice_statistics(self) -> List[InvoiceStatistics]:
        return self._read(self.reports.invoice_statistics)

    def monthly_revenue(self, year: int) -> List[MonthlyRevenue]:
        return self._read(lambda: self.reports.monthly_revenue(year))
