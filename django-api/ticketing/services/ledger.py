"""Inventory ledger.

Serializes concurrent demand for a single ticket type row against its
finite stock. The stock is read and written back while the row lock taken
by the store transaction is held, so two buyers can never be granted the
same unit.
"""

import logging
from dataclasses import replace

from ticketing.domain import Reservation, TicketTypeId
from ticketing.domain.errors import (
    DomainError,
    InsufficientStockError,
    InvalidQuantityError,
    TicketTypeNotFoundError,
)
from ticketing.stores.interfaces import StoreTransaction

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Atomic "reserve N units or fail" over ticket type stock."""

    def reserve(
        self, tx: StoreTransaction, ticket_type_id: TicketTypeId, quantity: int
    ) -> Reservation | DomainError:
        """Take `quantity` units of a ticket type inside `tx`.

        The decrement only becomes durable if `tx` commits. Failures are
        returned, not raised, and nothing is written when one occurs.
        """
        if quantity < 1:
            return InvalidQuantityError(quantity)

        ticket_type = tx.lock_ticket_type(ticket_type_id)
        if ticket_type is None:
            return TicketTypeNotFoundError(str(ticket_type_id))

        if not ticket_type.stock.covers(quantity):
            logger.warning(
                "Insufficient stock for ticket type %s",
                ticket_type.id,
                extra={
                    "ticket_type_id": str(ticket_type.id),
                    "requested": quantity,
                    "available": ticket_type.stock.value,
                },
            )
            return InsufficientStockError(
                ticket_type.name, quantity, ticket_type.stock.value
            )

        remaining = ticket_type.stock.take(quantity)
        tx.save_stock(ticket_type.id, remaining)
        return Reservation(
            ticket_type=replace(ticket_type, stock=remaining), quantity=quantity
        )
