# app/models/invoices.py

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class InvoiceOut(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    invoice_date: date
    amount: Decimal

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    invoice_number: str = Field(..., min_length=1, max_length=50)
    customer_id: int
    invoice_date: date
    amount: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)


class InvoiceUpdate(BaseModel):
    invoice_number: str = Field(..., min_length=1, max_length=50)
    invoice_date: date
    amount: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)


class InvoiceStatisticsOut(BaseModel):
    year: int
    total_revenue: Decimal
    invoice_count: int
    average_amount: Decimal
    min_amount: Decimal
    max_amount: Decimal

    class Config:
        from_attributes = True


class InvoiceStatisticsResponse(BaseModel):
    items: List[InvoiceStatisticsOut]


class MonthlyRevenueOut(BaseModel):
    year: int
    month: int
    revenue: Decimal
    previous_month_revenue: Optional[Decimal] = None
    growth_percentage: Decimal

    class Config:
        from_attributes = True


class AmountAdjustment(BaseModel):
    # Percent; 10 raises every amount by 10%, -10 lowers it by 10%
    percentage: Decimal = Field(..., gt=-100, le=1000)


class AmountAdjustmentOut(BaseModel):
    invoices_updated: int
