"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import datetime

from ticketing.domain.value_objects import (
    BuyerId,
    EventId,
    Money,
    RedemptionCode,
    Stock,
    TicketId,
    TicketTypeId,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    starts_at: datetime
    venue: str
    organizer_id: int


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType."""

    id: TicketTypeId
    event_id: EventId
    name: str
    price: Money
    stock: Stock


@dataclass(frozen=True)
class BuyerInfo:
    """Buyer data as supplied with a purchase."""

    name: str
    email: str


@dataclass(frozen=True)
class Buyer:
    """Domain representation of a Buyer."""

    id: BuyerId
    name: str
    email: str


@dataclass(frozen=True)
class Ticket:
    """Domain representation of an issued Ticket."""

    id: TicketId
    buyer_id: BuyerId
    ticket_type_id: TicketTypeId
    code: RedemptionCode
    payment_method: str
    used: bool = False


@dataclass(frozen=True)
class Reservation:
    """Stock taken from a ticket type inside a still-open transaction.

    Only durable once the transaction that produced it commits.
    """

    ticket_type: TicketType
    quantity: int


@dataclass(frozen=True)
class PurchaseRequest:
    """Input of a purchase."""

    buyer: BuyerInfo
    ticket_type_id: TicketTypeId
    quantity: int
    payment_method: str


@dataclass(frozen=True)
class PurchaseReceipt:
    """Result of a committed purchase."""

    buyer: Buyer
    ticket_type: TicketType
    tickets: tuple[Ticket, ...]


@dataclass(frozen=True)
class TicketDetails:
    """A ticket joined with its type, event and buyer."""

    ticket_id: TicketId
    code: RedemptionCode
    used: bool
    redeemed_at: datetime | None
    payment_method: str
    event_id: EventId
    event_title: str
    organizer_id: int
    ticket_type_name: str
    price: Money
    buyer_name: str
    buyer_email: str

    def redeemed(self, at: datetime) -> "TicketDetails":
        return replace(self, used=True, redeemed_at=at)


@dataclass(frozen=True)
class SalesStats:
    """Aggregate sales figures over committed data."""

    tickets_sold: int
    tickets_redeemed: int
    revenue: Money
    events: int
