# app/models/customers.py

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.invoices import InvoiceOut
from app.models.telephone_numbers import TelephoneNumberOut


class CustomerOut(BaseModel):
    id: int
    name: str
    email: str
    balance: Decimal
    # Only populated when the caller asked for related data
    invoices: Optional[List[InvoiceOut]] = None
    phone_numbers: Optional[List[TelephoneNumberOut]] = None

    class Config:
        from_attributes = True


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class CustomerUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class CustomerSummaryOut(BaseModel):
    id: int
    name: str
    email: str
    invoice_count: int
    total_amount: Decimal
    last_invoice_date: Optional[date] = None

    class Config:
        from_attributes = True


class TransferOut(BaseModel):
    success: bool
    invoices_transferred: int
    message: str


class CustomerUpsert(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class CustomerWithStatsOut(BaseModel):
    customer: CustomerOut
    invoice_count: int
    total_amount: Decimal
    average_amount: Decimal
    last_invoice_date: Optional[date] = None
