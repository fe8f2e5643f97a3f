# app/api/deps.py
"""
FastAPI dependencies. Tests swap the engine (and cache) through
app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine

from app.config import get_settings
from app.db.cache import ReadThroughCache
from app.db.engine import get_engine
from app.services.customers import CustomerService
from app.services.invoices import InvoiceService
from app.services.telephone_numbers import TelephoneNumberService
from app.services.transfers import TransferService


@lru_cache(maxsize=1)
def get_cache() -> ReadThroughCache:
    return ReadThroughCache(ttl_seconds=get_settings().cache_ttl_seconds)


def _service_kwargs(cache: ReadThroughCache) -> dict:
    settings = get_settings()
    return {
        "cache": cache,
        "max_retries": settings.retry_max_attempts,
        "retry_delay": settings.retry_base_delay,
    }


def get_customer_service(
    engine: Engine = Depends(get_engine),
    cache: ReadThroughCache = Depends(get_cache),
) -> CustomerService:
    return CustomerService(engine, **_service_kwargs(cache))


def get_invoice_service(
    engine: Engine = Depends(get_engine),
    cache: ReadThroughCache = Depends(get_cache),
) -> InvoiceService:
    return InvoiceService(engine, **_service_kwargs(cache))


def get_telephone_number_service(
    engine: Engine = Depends(get_engine),
    cache: ReadThroughCache = Depends(get_cache),
) -> TelephoneNumberService:
    return TelephoneNumberService(engine, **_service_kwargs(cache))


def get_transfer_service(
    engine: Engine = Depends(get_engine),
    cache: ReadThroughCache = Depends(get_cache),
) -> TransferService:
    return TransferService(engine, **_service_kwargs(cache))
