"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Stock and redemption state are owned by the store. Anything read through a
StoreTransaction is only valid until that transaction ends; callers never
keep it around.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from ticketing.domain import (
    Buyer,
    BuyerId,
    BuyerInfo,
    Event,
    EventId,
    RedemptionCode,
    SalesStats,
    Stock,
    Ticket,
    TicketDetails,
    TicketId,
    TicketType,
    TicketTypeId,
)


class StoreTransaction(ABC):
    """One all-or-nothing unit of work against the store.

    The transaction commits when its context exits normally, unless
    mark_rollback() was called. Any exception leaving the context rolls
    it back.
    """

    @abstractmethod
    def mark_rollback(self) -> None:
        """Discard every change made in this transaction on exit."""
        ...

    @abstractmethod
    def lock_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        """Take an exclusive lock on a ticket type row and return its current state.

        Blocks while another transaction holds the lock, up to the store's
        lock timeout, then raises BusyError.
        """
        ...

    @abstractmethod
    def save_stock(self, ticket_type_id: TicketTypeId, stock: Stock) -> None:
        """Write the stock of a ticket type locked by this transaction."""
        ...

    @abstractmethod
    def create_buyer(self, info: BuyerInfo) -> Buyer:
        """Insert a new buyer row."""
        ...

    @abstractmethod
    def create_ticket(
        self,
        buyer_id: BuyerId,
        ticket_type_id: TicketTypeId,
        code: RedemptionCode,
        payment_method: str,
    ) -> Ticket:
        """Insert an unused ticket. Redemption codes are unique."""
        ...

    @abstractmethod
    def lock_ticket(self, code: RedemptionCode) -> TicketDetails | None:
        """Lock the ticket carrying `code` and return its joined details."""
        ...

    @abstractmethod
    def mark_redeemed(self, ticket_id: TicketId, at: datetime) -> None:
        """Set the used flag of a ticket locked by this transaction."""
        ...

    @abstractmethod
    def lock_event(self, event_id: EventId) -> Event | None:
        """Lock an event together with all of its ticket type rows."""
        ...

    @abstractmethod
    def count_event_tickets(self, event_id: EventId) -> int:
        """Return how many tickets were issued against the event's ticket types."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> None:
        """Delete an event and its ticket types."""
        ...


class TicketingStore(ABC):
    """Interface for ticketing persistence operations."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[StoreTransaction]:
        """Open a transaction.

        Raises:
            BusyError: If a lock could not be acquired in time or the store
                reported a transient failure. The transaction was rolled back.
            StoreInternalError: On any other store failure. The transaction
                was rolled back.
        """
        ...

    @abstractmethod
    def list_events(self, organizer_id: int | None = None) -> list[Event]:
        """Return events ordered by start time, optionally only one organizer's."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def get_ticket_types(self, event_id: EventId) -> list[TicketType]:
        """Return the ticket types of an event ordered by name."""
        ...

    @abstractmethod
    def list_event_tickets(self, event_id: EventId) -> list[TicketDetails]:
        """Return every ticket issued for an event."""
        ...

    @abstractmethod
    def sales_stats(self, organizer_id: int | None = None) -> SalesStats:
        """Aggregate committed sales, optionally only for one organizer's events."""
        ...
