# app/services/base.py

from typing import Callable, Mapping, Optional, Tuple, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.db.cache import ReadThroughCache
from app.db.retry import with_retry
from app.errors import ConstraintViolation, UniqueConstraintError

T = TypeVar("T")


def unique_violation(exc: IntegrityError, unique: Mapping[str, Tuple[str, object]]):
    """
    Match a driver uniqueness error to one of the caller's unique columns.

    ``unique`` maps a column name to the (field label, value) reported back.
    Returns a UniqueConstraintError, or None for CHECK / foreign key failures.
    """
    message = str(exc.orig).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for column, (field_label, value) in unique.items():
        if column in message:
            return UniqueConstraintError(field_label, value)
    return None


class BaseService:
    def __init__(
        self,
        engine: Engine,
        cache: Optional[ReadThroughCache] = None,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ):
        self.engine = engine
        self.cache = cache if cache is not None else ReadThroughCache(ttl_seconds=0)
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def _read(self, operation: Callable[[], T]) -> T:
        """Reads are idempotent, so transient failures are retried."""
        return with_retry(operation, self.max_retries, self.retry_delay)

    def _write(
        self,
        operation: Callable[[], T],
        unique: Optional[Mapping[str, Tuple[str, object]]] = None,
    ) -> T:
        """
        Writes run once. A uniqueness race on one of the ``unique`` columns
        surfaces as UniqueConstraintError; any other row the store rejects
        (CHECK / foreign key) as ConstraintViolation. Any successful write
        invalidates cached reads.
        """
        try:
            result = operation()
        except IntegrityError as exc:
            duplicate = unique_violation(exc, unique or {})
            if duplicate is not None:
                raise duplicate from exc
            raise ConstraintViolation(str(exc.orig)) from exc
        self.cache.invalidate()
        return result
