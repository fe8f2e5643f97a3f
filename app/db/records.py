# app/db/records.py
"""
Typed records for the three tables and one explicit decoder per table.

Decoders take a SQLAlchemy RowMapping (``conn.execute(...).mappings()``) and
build the record field by field; nothing is mapped by reflection.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PhoneType(str, Enum):
    DIRECT_DIAL = "DirectDial"
    WORK = "Work"
    MOBILE = "Mobile"


@dataclass
class Invoice:
    invoice_number: str
    customer_id: int
    invoice_date: date
    amount: Decimal
    id: Optional[int] = None


@dataclass
class TelephoneNumber:
    customer_id: int
    type: PhoneType
    number: str
    id: Optional[int] = None


@dataclass
class Customer:
    """
    A customer row plus its optionally loaded children.

    ``balance`` is derived by the store (sum of the customer's invoice
    amounts) and is never written back.
    """
    name: str
    email: str
    id: Optional[int] = None
    balance: Decimal = Decimal("0")
    invoices: List[Invoice] = field(default_factory=list)
    phone_numbers: List[TelephoneNumber] = field(default_factory=list)


def decode_customer(row) -> Customer:
    balance = row["balance"] if "balance" in row else None
    return Customer(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        balance=Decimal(balance) if balance is not None else Decimal("0"),
    )


def decode_invoice(row) -> Invoice:
    return Invoice(
        id=row["id"],
        invoice_number=row["invoice_number"],
        customer_id=row["customer_id"],
        invoice_date=row["invoice_date"],
        amount=Decimal(row["amount"]),
    )


def decode_telephone_number(row) -> TelephoneNumber:
    return TelephoneNumber(
        id=row["id"],
        customer_id=row["customer_id"],
        type=PhoneType(row["type"]),
        number=row["number"],
    )
