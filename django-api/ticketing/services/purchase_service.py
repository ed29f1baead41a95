"""Purchase service.

Runs the inventory ledger and the ticket issuer in one store transaction.
The transaction commits only when both steps return a value; a returned
domain error marks it for rollback and is raised after the transaction
has ended.
"""

import logging

from ticketing.domain import PurchaseReceipt, PurchaseRequest, Reservation
from ticketing.domain.errors import (
    DomainError,
    InvalidPurchaseError,
    InvalidQuantityError,
)
from ticketing.services.issuer import TicketIssuer
from ticketing.services.ledger import InventoryLedger
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


class PurchaseService:
    """Service for ticket purchases."""

    def __init__(
        self,
        store: TicketingStore,
        max_per_purchase: int = 10,
        ledger: InventoryLedger | None = None,
        issuer: TicketIssuer | None = None,
    ) -> None:
        self._store = store
        self._max_per_purchase = max_per_purchase
        self._ledger = ledger or InventoryLedger()
        self._issuer = issuer or TicketIssuer(max_per_purchase=max_per_purchase)

    def purchase(self, request: PurchaseRequest) -> PurchaseReceipt:
        """Reserve stock and issue tickets, all or nothing.

        Raises:
            InvalidPurchaseError: If buyer data or the payment method is missing.
            InvalidQuantityError: If the quantity is outside 1..max_per_purchase.
            TicketTypeNotFoundError: If the ticket type does not exist.
            InsufficientStockError: If the remaining stock cannot cover the quantity.
            BusyError: If the ticket type row stayed locked past the timeout.
            StoreInternalError: If the store failed; nothing was committed.
        """
        self._validate(request)

        with self._store.transaction() as tx:
            outcome = self._ledger.reserve(
                tx, request.ticket_type_id, request.quantity
            )
            if isinstance(outcome, Reservation):
                outcome = self._issuer.issue(
                    tx, outcome, request.buyer, request.payment_method
                )
            if isinstance(outcome, DomainError):
                tx.mark_rollback()

        if isinstance(outcome, DomainError):
            raise outcome

        logger.info(
            "Issued %d ticket(s) of %s",
            len(outcome.tickets),
            outcome.ticket_type.name,
            extra={
                "ticket_type_id": str(outcome.ticket_type.id),
                "buyer_id": str(outcome.buyer.id),
                "quantity": len(outcome.tickets),
            },
        )
        return outcome

    def _validate(self, request: PurchaseRequest) -> None:
        if not request.buyer.name.strip() or not request.buyer.email.strip():
            raise InvalidPurchaseError("Buyer name and email are required")
        if not request.payment_method.strip():
            raise InvalidPurchaseError("Payment method is required")
        if not 1 <= request.quantity <= self._max_per_purchase:
            logger.warning(
                "Rejected purchase quantity %d",
                request.quantity,
                extra={"ticket_type_id": str(request.ticket_type_id)},
            )
            raise InvalidQuantityError(request.quantity, self._max_per_purchase)
