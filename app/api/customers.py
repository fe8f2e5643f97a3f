# app/api/customers.py

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.deps import get_customer_service, get_transfer_service
from app.db.records import Customer
from app.errors import NotFoundError
from app.models.customers import (
    CustomerCreate,
    CustomerOut,
    CustomerSummaryOut,
    CustomerUpdate,
    CustomerUpsert,
    CustomerWithStatsOut,
    TransferOut,
)
from app.models.invoices import InvoiceOut
from app.models.pagination import DEFAULT_PAGE_SIZE, PagedResult, clamp_paging
from app.models.telephone_numbers import TelephoneNumberOut
from app.services.customers import CustomerService
from app.services.transfers import TransferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


def _to_customer_out(customer: Customer, include_related: bool = False) -> CustomerOut:
    out = CustomerOut(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        balance=customer.balance,
    )
    if include_related:
        out.invoices = [InvoiceOut.model_validate(i) for i in customer.invoices]
        out.phone_numbers = [TelephoneNumberOut.model_validate(p) for p in customer.phone_numbers]
    return out


@router.get("/", response_model=PagedResult[CustomerOut])
def list_customers(
    page: int = Query(1, description="1-based page number; values below 1 are treated as 1"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description="Clamped to 1..100"),
    include_related: bool = Query(False, description="Include invoices and phone numbers"),
    service: CustomerService = Depends(get_customer_service),
) -> PagedResult[CustomerOut]:
    """
    Return one page of customers ordered by name.
    """
    logger.info(
        "Getting customers - Page: %s, PageSize: %s, IncludeRelated: %s",
        page,
        page_size,
        include_related,
    )
    page, page_size = clamp_paging(page, page_size)

    items, total_count = service.list_customers(page, page_size, include_related)

    return PagedResult[CustomerOut](
        items=[_to_customer_out(c, include_related) for c in items],
        total_count=total_count,
        page=page,
        page_size=page_size,
    )


@router.get("/all", response_model=List[CustomerOut])
def list_all_customers(
    include_related: bool = Query(False),
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerOut]:
    """
    Return every customer (served from the read-through cache when enabled).
    """
    customers = service.list_all_customers(include_related)
    return [_to_customer_out(c, include_related) for c in customers]


@router.get("/search", response_model=List[CustomerOut])
def search_customers(
    name: Optional[str] = Query(None, description="Name contains (partial match)"),
    email: Optional[str] = Query(None, description="Email contains (partial match)"),
    min_balance: Optional[Decimal] = Query(None, description="Minimum balance"),
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerOut]:
    logger.info(
        "Searching customers - Name: %s, Email: %s, MinBalance: %s", name, email, min_balance
    )
    return [_to_customer_out(c) for c in service.search_customers(name, email, min_balance)]


@router.get("/summary", response_model=List[CustomerSummaryOut])
def customer_summary(
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerSummaryOut]:
    """
    Per-customer invoice count, total and last invoice date, aggregated in SQL.
    """
    return [CustomerSummaryOut.model_validate(s) for s in service.customer_summaries()]


@router.put("/upsert", response_model=CustomerOut)
def upsert_customer(
    payload: CustomerUpsert,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerOut:
    """
    Overwrite the customer with the given id, or insert it when there is none.
    """
    return _to_customer_out(service.upsert_customer(payload.name, payload.email, payload.id))


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    include_related: bool = Query(False, description="Include invoices and phone numbers"),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerOut:
    logger.info("Getting customer %s, IncludeRelated: %s", customer_id, include_related)
    customer = service.get_customer(customer_id, include_related)
    return _to_customer_out(customer, include_related)


@router.get("/{customer_id}/stats", response_model=CustomerWithStatsOut)
def get_customer_with_stats(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerWithStatsOut:
    customer, stats = service.get_customer_with_stats(customer_id)
    return CustomerWithStatsOut(
        customer=_to_customer_out(customer, include_related=True),
        invoice_count=stats.invoice_count,
        total_amount=stats.total_amount,
        average_amount=stats.average_amount,
        last_invoice_date=stats.last_invoice_date,
    )


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    response: Response,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerOut:
    created = service.create_customer(payload.name, payload.email)
    response.headers["Location"] = f"/customers/{created.id}"
    return _to_customer_out(created)


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerOut:
    updated = service.update_customer(customer_id, payload.name, payload.email)
    return _to_customer_out(updated)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
) -> Response:
    if not service.delete_customer(customer_id):
        raise NotFoundError("Customer", customer_id)
    logger.info("Customer %s deleted successfully", customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{from_customer_id}/transfer-invoices/{to_customer_id}", response_model=TransferOut)
def transfer_invoices(
    from_customer_id: int,
    to_customer_id: int,
    service: TransferService = Depends(get_transfer_service),
) -> TransferOut:
    """
    Move all invoices from one customer to another in a single transaction.
    """
    result = service.transfer_invoices(from_customer_id, to_customer_id)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return TransferOut(
        success=result.success,
        invoices_transferred=result.invoices_transferred,
        message=result.message,
    )
