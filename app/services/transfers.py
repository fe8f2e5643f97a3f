# app/services/transfers.py

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from app.repositories.customers import CustomerRepository
from app.repositories.invoices import InvoiceRepository
from app.services.base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    success: bool
    invoices_transferred: int
    message: str


class TransferAborted(Exception):
    """Raised inside the transaction to roll it back with a reason."""


class TransferService(BaseService):
    def transfer_invoices(self, from_customer_id: int, to_customer_id: int) -> TransferResult:
        """
        Move every invoice of one customer to another as one atomic unit.

        All checks and the bulk UPDATE share a single transaction; any
        failure rolls the whole thing back and is reported in the result.
        """
        if from_customer_id == to_customer_id:
            return TransferResult(False, 0, "Cannot transfer to the same customer")

        try:
            with self.engine.begin() as conn:
                if not CustomerRepository.exists_in(conn, to_customer_id):
                    raise TransferAborted(f"Target customer {to_customer_id} not found")
                if not CustomerRepository.exists_in(conn, from_customer_id):
                    raise TransferAborted(f"Source customer {from_customer_id} not found")

                expected = InvoiceRepository.count_for_customer(conn, from_customer_id)
                if expected == 0:
                    raise TransferAborted(f"No invoices found for customer {from_customer_id}")

                moved = InvoiceRepository.reassign_all(conn, from_customer_id, to_customer_id)
                if moved != expected:
                    raise TransferAborted(
                        f"Expected to move {expected} invoices but moved {moved}"
                    )
        except TransferAborted as exc:
            logger.warning(
                "Transfer from %s to %s aborted: %s", from_customer_id, to_customer_id, exc
            )
            return TransferResult(False, 0, str(exc))
        except SQLAlchemyError as exc:
            logger.error(
                "Transfer from %s to %s failed: %s", from_customer_id, to_customer_id, exc
            )
            return TransferResult(False, 0, f"Transaction failed and was rolled back: {exc}")

        self.cache.invalidate()
        logger.info(
            "Transferred %s invoices from customer %s to %s",
            moved,
            from_customer_id,
            to_customer_id,
        )
        return TransferResult(True, moved, "All invoices transferred successfully")
