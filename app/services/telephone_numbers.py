# app/services/telephone_numbers.py

import logging
from typing import List

from app.db.records import PhoneType, TelephoneNumber
from app.errors import NotFoundError
from app.repositories.customers import CustomerRepository
from app.repositories.telephone_numbers import TelephoneNumberRepository
from app.services.base import BaseService

logger = logging.getLogger(__name__)


class TelephoneNumberService(BaseService):
    def __init__(self, engine, **kwargs):
        super().__init__(engine, **kwargs)
        self.repo = TelephoneNumberRepository(engine)
        self.customers = CustomerRepository(engine)

    def list_telephone_numbers(self) -> List[TelephoneNumber]:
        return self._read(self.repo.get_all)

    def get_telephone_number(self, phone_id: int) -> TelephoneNumber:
        phone = self._read(lambda: self.repo.get_by_id(phone_id))
        if phone is None:
            logger.warning("Telephone number %s not found", phone_id)
            raise NotFoundError("Telephone number", phone_id)
        return phone

    def list_for_customer(self, customer_id: int) -> List[TelephoneNumber]:
        if not self._read(lambda: self.customers.exists(customer_id)):
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)
        return self._read(lambda: self.repo.get_by_customer_id(customer_id))

    def create_telephone_number(
        self, customer_id: int, type: PhoneType, number: str
    ) -> TelephoneNumber:
        logger.info("Creating telephone number for customer %s", customer_id)

        if not self._read(lambda: self.customers.exists(customer_id)):
            logger.warning("Customer %s not found", customer_id)
            raise NotFoundError("Customer", customer_id)

        phone = TelephoneNumber(customer_id=customer_id, type=type, number=number)
        created = self._write(lambda: self.repo.create(phone))
        logger.info("Telephone number created with ID: %s", created.id)
        return created

    def update_telephone_number(
        self, phone_id: int, type: PhoneType, number: str
    ) -> TelephoneNumber:
        logger.info("Updating telephone number %s", phone_id)

        phone = self._read(lambda: self.repo.get_by_id(phone_id))
        if phone is None:
            logger.warning("Telephone number %s not found for update", phone_id)
            raise NotFoundError("Telephone number", phone_id)

        phone.type = type
        phone.number = number
        if not self._write(lambda: self.repo.update(phone)):
            logger.warning("Telephone number %s deleted before update", phone_id)
            raise NotFoundError("Telephone number", phone_id)
        return phone

    def delete_telephone_number(self, phone_id: int) -> bool:
        logger.info("Deleting telephone number %s", phone_id)
        deleted = self._write(lambda: self.repo.delete(phone_id))
        if not deleted:
            logger.warning("Telephone number %s not found for deletion", phone_id)
        return deleted
