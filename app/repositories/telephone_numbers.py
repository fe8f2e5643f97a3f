# app/repositories/telephone_numbers.py

from typing import List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine

from app.db.records import TelephoneNumber, decode_telephone_number
from app.db.schema import telephone_numbers


def _type_value(phone: TelephoneNumber) -> str:
    return getattr(phone.type, "value", phone.type)


class TelephoneNumberRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, phone_id: int) -> Optional[TelephoneNumber]:
        stmt = select(telephone_numbers).where(telephone_numbers.c.id == phone_id)

        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()

        return decode_telephone_number(row) if row is not None else None

    def get_all(self) -> List[TelephoneNumber]:
        stmt = select(telephone_numbers).order_by(telephone_numbers.c.id)

        with self.engine.connect() as conn:
            return [decode_telephone_number(row) for row in conn.execute(stmt).mappings()]

    def get_by_customer_id(self, customer_id: int) -> List[TelephoneNumber]:
        stmt = (
            select(telephone_numbers)
            .where(telephone_numbers.c.customer_id == customer_id)
            .order_by(telephone_numbers.c.id)
        )

        with self.engine.connect() as conn:
            return [decode_telephone_number(row) for row in conn.execute(stmt).mappings()]

    def create(self, phone: TelephoneNumber) -> TelephoneNumber:
        stmt = (
            insert(telephone_numbers)
            .values(
                customer_id=phone.customer_id,
                type=_type_value(phone),
                number=phone.number,
            )
            .returning(telephone_numbers.c.id)
        )

        with self.engine.begin() as conn:
            phone.id = conn.execute(stmt).scalar_one()

        return phone

    def update(self, phone: TelephoneNumber) -> bool:
        stmt = (
            update(telephone_numbers)
            .where(telephone_numbers.c.id == phone.id)
            .values(type=_type_value(phone), number=phone.number)
        )

        with self.engine.begin() as conn:
            updated = conn.execute(stmt).rowcount

        return updated > 0

    def delete(self, phone_id: int) -> bool:
        stmt = delete(telephone_numbers).where(telephone_numbers.c.id == phone_id)

        with self.engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount

        return deleted > 0

    def exists(self, phone_id: int) -> bool:
        stmt = (
            select(func.count())
            .select_from(telephone_numbers)
            .where(telephone_numbers.c.id == phone_id)
        )

        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one() > 0
