# app/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

Stores never raise these themselves: they return None / False for absence and
let driver errors propagate. Services turn explicit existence and uniqueness
checks into the typed errors below.
"""


class StoreError(Exception):
    """Base class for every typed data-access failure."""


class NotFoundError(StoreError):
    def __init__(self, entity: str, key, field: str = "ID"):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} with {field} {key} not found")


class UniqueConstraintError(StoreError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' is already in use")


class ConstraintViolation(StoreError):
    """The store rejected a row (CHECK or foreign key failure)."""


class TransientStoreError(StoreError):
    """Connectivity / timeout failure that survived the retry budget."""
