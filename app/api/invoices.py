# app/api/invoices.py

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_invoice_service
from app.errors import NotFoundError
from app.models.invoices import (
    AmountAdjustment,
    AmountAdjustmentOut,
    InvoiceCreate,
    InvoiceOut,
    InvoiceStatisticsOut,
    InvoiceStatisticsResponse,
    InvoiceUpdate,
    MonthlyRevenueOut,
)
from app.services.invoices import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/", response_model=List[InvoiceOut])
def list_invoices(service: InvoiceService = Depends(get_invoice_service)) -> List[InvoiceOut]:
    logger.info("Getting all invoices")
    return [InvoiceOut.model_validate(i) for i in service.list_invoices()]


@router.get("/statistics", response_model=InvoiceStatisticsResponse)
def invoice_statistics(
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceStatisticsResponse:
    """
    Revenue, count, average, min and max invoice amount per year.
    """
    return InvoiceStatisticsResponse(
        items=[InvoiceStatisticsOut.model_validate(s) for s in service.invoice_statistics()]
    )


@router.get("/monthly-revenue", response_model=List[MonthlyRevenueOut])
def monthly_revenue(
    year: int = Query(..., ge=1, le=9999, description="Calendar year"),
    service: InvoiceService = Depends(get_invoice_service),
) -> List[MonthlyRevenueOut]:
    """
    Revenue per month of the year with growth against the previous month.
    """
    return [MonthlyRevenueOut.model_validate(m) for m in service.monthly_revenue(year)]


@router.post("/adjust-amounts", response_model=AmountAdjustmentOut)
def adjust_amounts(
    payload: AmountAdjustment,
    service: InvoiceService = Depends(get_invoice_service),
) -> AmountAdjustmentOut:
    """
    Scale every invoice amount by a percentage in one statement.
    """
    return AmountAdjustmentOut(invoices_updated=service.adjust_all_amounts(payload.percentage))


@router.get("/customer/{customer_id}", response_model=List[InvoiceOut])
def list_invoices_for_customer(
    customer_id: int,
    service: InvoiceService = Depends(get_invoice_service),
) -> List[InvoiceOut]:
    logger.info("Getting invoices for customer %s", customer_id)
    return [InvoiceOut.model_validate(i) for i in service.list_for_customer(customer_id)]


@router.get("/number/{invoice_number}", response_model=InvoiceOut)
def get_invoice_by_number(
    invoice_number: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    """
    Look up a single invoice by its invoice_number.
    """
    return InvoiceOut.model_validate(service.get_invoice_by_number(invoice_number))


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    logger.info("Getting invoice %s", invoice_id)
    return InvoiceOut.model_validate(service.get_invoice(invoice_id))


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    response: Response,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    created = service.create_invoice(
        customer_id=payload.customer_id,
        invoice_number=payload.invoice_number,
        invoice_date=payload.invoice_date,
        amount=payload.amount,
    )
    response.headers["Location"] = f"/invoices/{created.id}"
    return InvoiceOut.model_validate(created)


@router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceOut:
    updated = service.update_invoice(
        invoice_id,
        invoice_number=payload.invoice_number,
        invoice_date=payload.invoice_date,
        amount=payload.amount,
    )
    return InvoiceOut.model_validate(updated)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    service: InvoiceService = Depends(get_invoice_service),
) -> Response:
    if not service.delete_invoice(invoice_id):
        raise NotFoundError("Invoice", invoice_id)
    logger.info("Invoice %s deleted successfully", invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
