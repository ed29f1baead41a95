"""Event service - catalog reads and event lifecycle rules.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging

from ticketing.domain import Event, EventId, Principal, TicketDetails, TicketType
from ticketing.domain.errors import (
    DomainError,
    EventHasTicketsError,
    EventNotFoundError,
    ForbiddenError,
    InvalidEventIdError,
)
from ticketing.stores.interfaces import StoreTransaction, TicketingStore

logger = logging.getLogger(__name__)


def parse_event_id(event_id: str) -> EventId:
    try:
        return EventId.from_string(event_id)
    except ValueError:
        raise InvalidEventIdError() from None


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def list_events(self) -> list[Event]:
        """Return all events."""
        return self._store.list_events()

    def list_events_for(self, principal: Principal) -> list[Event]:
        """Return the events a principal manages. Admins manage all of them."""
        return self._store.list_events(None if principal.is_admin else principal.id)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get_event(parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def get_ticket_types(self, event_id: str) -> list[TicketType]:
        """Return ticket types for an event.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self.get_event(event_id)
        return self._store.get_ticket_types(event.id)

    def list_event_tickets(
        self, principal: Principal, event_id: str
    ) -> list[TicketDetails]:
        """Return every ticket issued for an event the principal manages.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If an admin asks for a missing event.
            ForbiddenError: If an organizer asks for a missing event or one
                they do not own.
        """
        event = self._store.get_event(parse_event_id(event_id))
        error = self._check_access(principal, event, event_id)
        if error is not None:
            raise error
        return self._store.list_event_tickets(event.id)

    def delete_event(self, principal: Principal, event_id: str) -> None:
        """Delete an event and its ticket types.

        Events that already have issued tickets are kept. The event's ticket
        type rows are locked while counting, so no purchase can complete
        between the check and the delete.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If an admin deletes a missing event.
            ForbiddenError: If an organizer deletes a missing event or one
                they do not own.
            EventHasTicketsError: If tickets were issued for the event.
        """
        parsed = parse_event_id(event_id)
        with self._store.transaction() as tx:
            error = self._delete(tx, principal, parsed, event_id)
            if error is not None:
                tx.mark_rollback()

        if error is not None:
            raise error
        logger.info(
            "Event %s deleted",
            event_id,
            extra={"event_id": event_id, "principal_id": principal.id},
        )

    def _delete(
        self, tx: StoreTransaction, principal: Principal, event_id: EventId, raw_id: str
    ) -> DomainError | None:
        event = tx.lock_event(event_id)
        error = self._check_access(principal, event, raw_id)
        if error is not None:
            return error
        issued = tx.count_event_tickets(event_id)
        if issued:
            logger.warning(
                "Refused to delete event %s with %d issued ticket(s)",
                raw_id,
                issued,
                extra={"event_id": raw_id},
            )
            return EventHasTicketsError(issued)
        tx.delete_event(event_id)
        return None

    @staticmethod
    def _check_access(
        principal: Principal, event: Event | None, raw_id: str
    ) -> DomainError | None:
        if event is None:
            if principal.is_admin:
                return EventNotFoundError(raw_id)
            return ForbiddenError()
        if not principal.can_manage(event.organizer_id):
            return ForbiddenError()
        return None
