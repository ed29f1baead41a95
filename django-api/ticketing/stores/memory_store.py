"""In-memory implementation of the TicketingStore.

Behaves like a relational store with row-level locking: every locked row
has its own lock held until the transaction ends, writes are staged and
only become visible to other readers on commit, and waiting for a lock
is bounded by a timeout. Used for unit and concurrency tests.
"""

import logging
import threading
import uuid
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from ticketing.domain import (
    Buyer,
    BuyerId,
    BuyerInfo,
    Event,
    EventId,
    Money,
    RedemptionCode,
    SalesStats,
    Stock,
    Ticket,
    TicketDetails,
    TicketId,
    TicketType,
    TicketTypeId,
)
from ticketing.domain.errors import BusyError, StoreInternalError
from ticketing.stores.interfaces import StoreTransaction, TicketingStore

logger = logging.getLogger(__name__)


class ConstraintViolation(Exception):
    """A write broke a uniqueness or integrity rule."""


@dataclass(frozen=True)
class TicketRow:
    ticket: Ticket
    redeemed_at: datetime | None = None


class InMemoryStoreTransaction(StoreTransaction):
    """Staged writes plus the row locks held by one transaction."""

    def __init__(self, store: "InMemoryTicketingStore") -> None:
        self._store = store
        self._held: dict[Hashable, threading.Lock] = {}
        self._stock: dict[TicketTypeId, Stock] = {}
        self._buyers: list[Buyer] = []
        self._tickets: list[Ticket] = []
        self._redeemed: dict[TicketId, datetime] = {}
        self._deleted_events: list[EventId] = []
        self.rollback_requested = False

    def mark_rollback(self) -> None:
        self.rollback_requested = True

    def _lock(self, key: Hashable) -> None:
        if key in self._held:
            return
        lock = self._store.row_lock(key)
        if not lock.acquire(timeout=self._store.lock_timeout):
            logger.warning("Store transaction aborted, lock on %s not acquired", key)
            raise BusyError()
        self._held[key] = lock

    def release(self) -> None:
        for lock in self._held.values():
            lock.release()
        self._held.clear()

    def lock_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        if self._store.read(lambda s: s.ticket_types.get(ticket_type_id)) is None:
            return None
        self._lock(("ticket_type", ticket_type_id))
        # Re-read under the lock; the row may have changed while waiting.
        row = self._store.read(lambda s: s.ticket_types.get(ticket_type_id))
        if row is None:
            return None
        if ticket_type_id in self._stock:
            row = replace(row, stock=self._stock[ticket_type_id])
        return row

    def save_stock(self, ticket_type_id: TicketTypeId, stock: Stock) -> None:
        self._stock[ticket_type_id] = stock

    def create_buyer(self, info: BuyerInfo) -> Buyer:
        buyer = Buyer(id=BuyerId(uuid.uuid4()), name=info.name, email=info.email)
        self._buyers.append(buyer)
        return buyer

    def create_ticket(
        self,
        buyer_id: BuyerId,
        ticket_type_id: TicketTypeId,
        code: RedemptionCode,
        payment_method: str,
    ) -> Ticket:
        taken = self._store.read(lambda s: code.value in s.codes)
        if taken or any(ticket.code == code for ticket in self._tickets):
            raise ConstraintViolation(f"duplicate redemption code {code}")
        ticket = Ticket(
            id=TicketId(uuid.uuid4()),
            buyer_id=buyer_id,
            ticket_type_id=ticket_type_id,
            code=code,
            payment_method=payment_method,
        )
        self._tickets.append(ticket)
        return ticket

    def lock_ticket(self, code: RedemptionCode) -> TicketDetails | None:
        ticket_id = self._store.read(lambda s: s.codes.get(code.value))
        if ticket_id is None:
            return None
        self._lock(("ticket", ticket_id))
        details = self._store.read(lambda s: s.details(ticket_id))
        if ticket_id in self._redeemed:
            details = details.redeemed(self._redeemed[ticket_id])
        return details

    def mark_redeemed(self, ticket_id: TicketId, at: datetime) -> None:
        self._redeemed[ticket_id] = at

    def lock_event(self, event_id: EventId) -> Event | None:
        event = self._store.read(lambda s: s.events.get(event_id))
        if event is None:
            return None
        self._lock(("event", event_id))
        for ticket_type in self._store.read(lambda s: s.types_of(event_id)):
            self._lock(("ticket_type", ticket_type.id))
        return self._store.read(lambda s: s.events.get(event_id))

    def count_event_tickets(self, event_id: EventId) -> int:
        type_ids = {t.id for t in self._store.read(lambda s: s.types_of(event_id))}
        committed = self._store.read(
            lambda s: sum(
                1 for row in s.tickets.values() if row.ticket.ticket_type_id in type_ids
            )
        )
        staged = sum(1 for t in self._tickets if t.ticket_type_id in type_ids)
        return committed + staged

    def delete_event(self, event_id: EventId) -> None:
        self._deleted_events.append(event_id)

    def apply(self, store: "InMemoryTicketingStore") -> None:
        """Publish staged writes. Called with the store guard held."""
        for ticket in self._tickets:
            if ticket.code.value in store.codes:
                raise ConstraintViolation(f"duplicate redemption code {ticket.code}")
        for ticket_type_id, stock in self._stock.items():
            store.ticket_types[ticket_type_id] = replace(
                store.ticket_types[ticket_type_id], stock=stock
            )
        for buyer in self._buyers:
            store.buyers[buyer.id] = buyer
        for ticket in self._tickets:
            store.tickets[ticket.id] = TicketRow(ticket=ticket)
            store.codes[ticket.code.value] = ticket.id
        for ticket_id, at in self._redeemed.items():
            row = store.tickets[ticket_id]
            store.tickets[ticket_id] = TicketRow(
                ticket=replace(row.ticket, used=True), redeemed_at=at
            )
        for event_id in self._deleted_events:
            for ticket_type in store.types_of(event_id):
                del store.ticket_types[ticket_type.id]
            del store.events[event_id]


class InMemoryTicketingStore(TicketingStore):
    """Thread-safe store keeping committed rows in dictionaries."""

    transaction_class = InMemoryStoreTransaction

    def __init__(self, lock_timeout_ms: int = 5000) -> None:
        self.lock_timeout = lock_timeout_ms / 1000
        self.events: dict[EventId, Event] = {}
        self.ticket_types: dict[TicketTypeId, TicketType] = {}
        self.buyers: dict[BuyerId, Buyer] = {}
        self.tickets: dict[TicketId, TicketRow] = {}
        self.codes: dict[str, TicketId] = {}
        self._guard = threading.Lock()
        self._row_locks: dict[Hashable, threading.Lock] = {}

    def row_lock(self, key: Hashable) -> threading.Lock:
        with self._guard:
            return self._row_locks.setdefault(key, threading.Lock())

    def read(self, query):
        with self._guard:
            return query(self)

    def types_of(self, event_id: EventId) -> list[TicketType]:
        return [t for t in self.ticket_types.values() if t.event_id == event_id]

    def details(self, ticket_id: TicketId) -> TicketDetails:
        row = self.tickets[ticket_id]
        ticket_type = self.ticket_types[row.ticket.ticket_type_id]
        event = self.events[ticket_type.event_id]
        buyer = self.buyers[row.ticket.buyer_id]
        return TicketDetails(
            ticket_id=ticket_id,
            code=row.ticket.code,
            used=row.ticket.used,
            redeemed_at=row.redeemed_at,
            payment_method=row.ticket.payment_method,
            event_id=event.id,
            event_title=event.title,
            organizer_id=event.organizer_id,
            ticket_type_name=ticket_type.name,
            price=ticket_type.price,
            buyer_name=buyer.name,
            buyer_email=buyer.email,
        )

    def add_event(
        self, title: str, starts_at: datetime, venue: str, organizer_id: int
    ) -> Event:
        event = Event(
            id=EventId(uuid.uuid4()),
            title=title,
            starts_at=starts_at,
            venue=venue,
            organizer_id=organizer_id,
        )
        with self._guard:
            self.events[event.id] = event
        return event

    def add_ticket_type(
        self, event_id: EventId, name: str, price: Decimal, stock: int
    ) -> TicketType:
        ticket_type = TicketType(
            id=TicketTypeId(uuid.uuid4()),
            event_id=event_id,
            name=name,
            price=Money(price),
            stock=Stock(stock),
        )
        with self._guard:
            self.ticket_types[ticket_type.id] = ticket_type
        return ticket_type

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        tx = self.transaction_class(self)
        try:
            yield tx
            if not tx.rollback_requested:
                with self._guard:
                    tx.apply(self)
        except ConstraintViolation as exc:
            logger.exception("Store transaction failed")
            raise StoreInternalError() from exc
        finally:
            tx.release()

    def list_events(self, organizer_id: int | None = None) -> list[Event]:
        with self._guard:
            events = list(self.events.values())
        if organizer_id is not None:
            events = [e for e in events if e.organizer_id == organizer_id]
        return sorted(events, key=lambda e: e.starts_at)

    def get_event(self, event_id: EventId) -> Event | None:
        with self._guard:
            return self.events.get(event_id)

    def get_ticket_types(self, event_id: EventId) -> list[TicketType]:
        with self._guard:
            return sorted(self.types_of(event_id), key=lambda t: t.name)

    def list_event_tickets(self, event_id: EventId) -> list[TicketDetails]:
        with self._guard:
            rows = [self.details(ticket_id) for ticket_id in self.tickets]
        return [row for row in rows if row.event_id == event_id]

    def sales_stats(self, organizer_id: int | None = None) -> SalesStats:
        with self._guard:
            rows = [self.details(ticket_id) for ticket_id in self.tickets]
            events = list(self.events.values())
        if organizer_id is not None:
            rows = [r for r in rows if r.organizer_id == organizer_id]
            events = [e for e in events if e.organizer_id == organizer_id]
        revenue = Money(Decimal("0"))
        for row in rows:
            revenue = revenue + row.price
        return SalesStats(
            tickets_sold=len(rows),
            tickets_redeemed=sum(1 for r in rows if r.used),
            revenue=revenue,
            events=len(events),
        )
