import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.customers import router as customers_router
from app.api.invoices import router as invoices_router
from app.api.telephone_numbers import router as telephone_numbers_router
from app.config import get_settings
from app.db.engine import get_engine
from app.db.schema import create_schema
from app.db.seed import seed_database
from app.errors import (
    ConstraintViolation,
    NotFoundError,
    TransientStoreError,
    UniqueConstraintError,
)
from app.log import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = get_engine()
    logger.info("Initializing database...")
    create_schema(engine)

    if settings.seed_on_startup:
        logger.info("Seeding database...")
        seed_database(
            engine,
            customer_count=settings.seed_customer_count,
            min_invoices=settings.seed_min_invoices,
            max_invoices=settings.seed_max_invoices,
            min_phone_numbers=settings.seed_min_phone_numbers,
            max_phone_numbers=settings.seed_max_phone_numbers,
        )
    else:
        logger.info("Database seeding is disabled in configuration")

    yield

    engine.dispose()


app = FastAPI(
    title="Customer Invoices API",
    version="0.1.0",
    lifespan=lifespan,
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("%s %s -> 404: %s", request.method, request.url.path, exc)
    return _error(404, exc)


@app.exception_handler(UniqueConstraintError)
def unique_constraint_handler(request: Request, exc: UniqueConstraintError):
    logger.warning("%s %s -> 409: %s", request.method, request.url.path, exc)
    return _error(409, exc)


@app.exception_handler(ConstraintViolation)
def constraint_violation_handler(request: Request, exc: ConstraintViolation):
    logger.warning("%s %s -> 422: %s", request.method, request.url.path, exc)
    return _error(422, exc)


@app.exception_handler(TransientStoreError)
def transient_store_handler(request: Request, exc: TransientStoreError):
    logger.error("%s %s -> 503: %s", request.method, request.url.path, exc)
    return _error(503, exc)


@app.get("/health")
def health_check():
    return {"status": "ok"}

app.include_router(customers_router)
app.include_router(invoices_router)
app.include_router(telephone_numbers_router)
