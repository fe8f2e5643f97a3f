# app/services/customers.py

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from app.db.records import Customer
from app.errors import NotFoundError, UniqueConstraintError
from app.repositories.customers import CustomerRepository
from app.repositories.reports import CustomerStats, CustomerSummary, ReportRepository
from app.services.base import BaseService

logger = logging.getLogger(__name__)


def _email_unique(email: str):
    return {"email": ("Email", email)}


class CustomerService(BaseService):
    def __init__(self, engine, **kwargs):
        super().__init__(engine, **kwargs)
        self.repo = CustomerRepository(engine)
        self.reports = ReportRepository(engine)

    def create_customer(self, name: str, email: str) -> Customer:
        logger.info("Creating customer - Email: %s", email)

        if self._read(lambda: self.repo.email_exists(email)):
            logger.warning("Email %s already exists", email)
            raise UniqueConstraintError("Email", email)

        created = self._write(
            lambda: self.repo.create(Customer(name=name, email=email)),
            unique=_email_unique(email),
        )
        logger.info("Customer created with ID: %s", created.id)
        return created

    def get_customer(self, customer_id: int, include_related: bool = False) -> Customer:
        customer = self._read(lambda: self.repo.get_by_id(customer_id, include_related))
        if customer is None:
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)
        return customer

    def get_customer_with_stats(self, customer_id: int) -> Tuple[Customer, CustomerStats]:
        found = self._read(lambda: self.reports.customer_with_stats(customer_id))
        if found is None:
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)
        return found

    def list_customers(
        self, page: int, page_size: int, include_related: bool = False
    ) -> Tuple[List[Customer], int]:
        return self._read(lambda: self.repo.get_paged(page, page_size, include_related))

    def list_all_customers(self, include_related: bool = False) -> List[Customer]:
        key = f"customers:all:{include_related}"
        return self.cache.get_or_load(
            key, lambda: self._read(lambda: self.repo.get_all(include_related))
        )

    def search_customers(
        self,
        name: Optional[str] = None,
        email: Optional[str] = None,
        min_balance: Optional[Decimal] = None,
    ) -> List[Customer]:
        return self._read(lambda: self.repo.search(name, email, min_balance))

    def update_customer(self, customer_id: int, name: str, email: str) -> Customer:
        logger.info("Updating customer %s", customer_id)

        customer = self._read(lambda: self.repo.get_by_id(customer_id))
        if customer is None:
            logger.warning("Customer %s not found for update", customer_id)
            raise NotFoundError("Customer", customer_id)

        if self._read(lambda: self.repo.email_exists(email, exclude_id=customer_id)):
            logger.warning("Email %s already exists for another customer", email)
            raise UniqueConstraintError("Email", email)

        customer.name = name
        customer.email = email
        if not self._write(lambda: self.repo.update(customer), unique=_email_unique(email)):
            logger.warning("Customer %s deleted before update", customer_id)
            raise NotFoundError("Customer", customer_id)

        logger.info("Customer %s updated successfully", customer_id)
        return self.get_customer(customer_id)

    def upsert_customer(self, name: str, email: str, customer_id: Optional[int] = None) -> Customer:
        """
        Update the customer with ``customer_id`` if it exists, insert a new one
        otherwise, as a single statement.
        """
        logger.info("Upserting customer - ID: %s, Email: %s", customer_id, email)

        if self._read(lambda: self.repo.email_exists(email, exclude_id=customer_id)):
            logger.warning("Email %s already exists for another customer", email)
            raise UniqueConstraintError("Email", email)

        saved = self._write(
            lambda: self.repo.upsert(Customer(name=name, email=email, id=customer_id)),
            unique=_email_unique(email),
        )
        logger.info("Customer %s upserted", saved.id)
        return self.get_customer(saved.id)

    def delete_customer(self, customer_id: int) -> bool:
        logger.info("Deleting customer %s", customer_id)
        deleted = self._write(lambda: self.repo.delete(customer_id))
        if not deleted:
            logger.warning("Customer %s not found for deletion", customer_id)
        return deleted

    def customer_summaries(self) -> List[CustomerSummary]:
        return self._read(self.reports.customer_summaries)
