"""Ticket issuer: turns a live reservation into redeemable tickets."""

from collections.abc import Callable

from ticketing.domain import BuyerInfo, PurchaseReceipt, RedemptionCode, Reservation
from ticketing.domain.errors import DomainError, InvalidQuantityError
from ticketing.stores.interfaces import StoreTransaction


class TicketIssuer:
    """Mints one ticket per reserved unit, in the reservation's transaction."""

    def __init__(
        self,
        max_per_purchase: int = 10,
        generate_code: Callable[[], RedemptionCode] = RedemptionCode.generate,
    ) -> None:
        self._max_per_purchase = max_per_purchase
        self._generate_code = generate_code

    def issue(
        self,
        tx: StoreTransaction,
        reservation: Reservation,
        buyer: BuyerInfo,
        payment_method: str,
    ) -> PurchaseReceipt | DomainError:
        """Insert the buyer and `reservation.quantity` unused tickets.

        A new buyer row is written for every purchase, repeat buyers are not
        merged by email. Store failures propagate and roll back `tx`,
        taking the reserved stock back with it.
        """
        quantity = reservation.quantity
        if not 1 <= quantity <= self._max_per_purchase:
            return InvalidQuantityError(quantity, self._max_per_purchase)

        buyer_row = tx.create_buyer(buyer)
        tickets = tuple(
            tx.create_ticket(
                buyer_row.id,
                reservation.ticket_type.id,
                self._generate_code(),
                payment_method,
            )
            for _ in range(quantity)
        )
        return PurchaseReceipt(
            buyer=buyer_row, ticket_type=reservation.ticket_type, tickets=tickets
        )
