"""Django ORM implementation of the TicketingStore.

Row locks are taken with SELECT ... FOR UPDATE, which Django ignores on
SQLite. SQLite locks the whole database for writers instead: stock still
never oversells, but concurrent buyers may get BusyError while stock
remains, where PostgreSQL would serialize them on the row.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from django.db import DatabaseError, OperationalError, connection
from django.db import transaction as db_transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from ticketing import models
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


def to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        starts_at=row.starts_at,
        venue=row.venue,
        organizer_id=row.organizer_id,
    )


def to_ticket_type(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(row.price),
        stock=Stock(row.stock),
    )


def to_ticket_details(row: models.Ticket) -> TicketDetails:
    """Convert a ticket fetched with its type, event and buyer."""
    ticket_type = row.ticket_type
    return TicketDetails(
        ticket_id=TicketId(row.id),
        code=RedemptionCode(row.code),
        used=row.used,
        redeemed_at=row.redeemed_at,
        payment_method=row.payment_method,
        event_id=EventId(ticket_type.event_id),
        event_title=ticket_type.event.title,
        organizer_id=ticket_type.event.organizer_id,
        ticket_type_name=ticket_type.name,
        price=Money(ticket_type.price),
        buyer_name=row.buyer.name,
        buyer_email=row.buyer.email,
    )


class DjangoStoreTransaction(StoreTransaction):
    """Operations bound to the enclosing atomic block."""

    def __init__(self) -> None:
        self.rollback_requested = False

    def mark_rollback(self) -> None:
        self.rollback_requested = True

    def lock_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        try:
            row = models.TicketType.objects.select_for_update().get(
                pk=ticket_type_id.value
            )
        except models.TicketType.DoesNotExist:
            return None
        return to_ticket_type(row)

    def save_stock(self, ticket_type_id: TicketTypeId, stock: Stock) -> None:
        models.TicketType.objects.filter(pk=ticket_type_id.value).update(
            stock=stock.value
        )

    def create_buyer(self, info: BuyerInfo) -> Buyer:
        row = models.Buyer.objects.create(name=info.name, email=info.email)
        return Buyer(id=BuyerId(row.id), name=row.name, email=row.email)

    def create_ticket(
        self,
        buyer_id: BuyerId,
        ticket_type_id: TicketTypeId,
        code: RedemptionCode,
        payment_method: str,
    ) -> Ticket:
        row = models.Ticket.objects.create(
            buyer_id=buyer_id.value,
            ticket_type_id=ticket_type_id.value,
            code=code.value,
            payment_method=payment_method,
        )
        return Ticket(
            id=TicketId(row.id),
            buyer_id=buyer_id,
            ticket_type_id=ticket_type_id,
            code=code,
            payment_method=payment_method,
            used=row.used,
        )

    def lock_ticket(self, code: RedemptionCode) -> TicketDetails | None:
        # Lock the ticket row alone so redemptions never contend with
        # purchases on the ticket type row.
        locked = (
            models.Ticket.objects.select_for_update()
            .filter(code=code.value)
            .values_list("pk", flat=True)
            .first()
        )
        if locked is None:
            return None
        row = models.Ticket.objects.select_related("ticket_type__event", "buyer").get(
            pk=locked
        )
        return to_ticket_details(row)

    def mark_redeemed(self, ticket_id: TicketId, at: datetime) -> None:
        models.Ticket.objects.filter(pk=ticket_id.value).update(
            used=True, redeemed_at=at
        )

    def lock_event(self, event_id: EventId) -> Event | None:
        try:
            row = models.Event.objects.select_for_update().get(pk=event_id.value)
        except models.Event.DoesNotExist:
            return None
        list(
            models.TicketType.objects.select_for_update()
            .filter(event_id=row.pk)
            .values_list("pk", flat=True)
        )
        return to_event(row)

    def count_event_tickets(self, event_id: EventId) -> int:
        return models.Ticket.objects.filter(
            ticket_type__event_id=event_id.value
        ).count()

    def delete_event(self, event_id: EventId) -> None:
        models.Event.objects.filter(pk=event_id.value).delete()


class DjangoTicketingStore(TicketingStore):
    """PostgreSQL-backed ticketing store using Django ORM."""

    def __init__(self, lock_timeout_ms: int = 5000) -> None:
        self._lock_timeout_ms = lock_timeout_ms

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        try:
            with db_transaction.atomic():
                self._apply_lock_timeout()
                tx = DjangoStoreTransaction()
                yield tx
                if tx.rollback_requested:
                    db_transaction.set_rollback(True)
        except OperationalError as exc:
            logger.warning("Store transaction aborted, lock not acquired: %s", exc)
            raise BusyError() from exc
        except DatabaseError as exc:
            logger.exception("Store transaction failed")
            raise StoreInternalError() from exc

    def _apply_lock_timeout(self) -> None:
        """Bound row lock waits for the rest of the current transaction."""
        if connection.vendor != "postgresql":
            return
        with connection.cursor() as cursor:
            cursor.execute(
                "SELECT set_config('lock_timeout', %s, true)",
                [f"{self._lock_timeout_ms}ms"],
            )

    def list_events(self, organizer_id: int | None = None) -> list[Event]:
        rows = models.Event.objects.order_by("starts_at")
        if organizer_id is not None:
            rows = rows.filter(organizer_id=organizer_id)
        return [to_event(row) for row in rows]

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return to_event(row) if row is not None else None

    def get_ticket_types(self, event_id: EventId) -> list[TicketType]:
        rows = models.TicketType.objects.filter(event_id=event_id.value)
        return [to_ticket_type(row) for row in rows.order_by("name")]

    def list_event_tickets(self, event_id: EventId) -> list[TicketDetails]:
        rows = (
            models.Ticket.objects.filter(ticket_type__event_id=event_id.value)
            .select_related("ticket_type__event", "buyer")
            .order_by("created_at")
        )
        return [to_ticket_details(row) for row in rows]

    def sales_stats(self, organizer_id: int | None = None) -> SalesStats:
        tickets = models.Ticket.objects.all()
        events = models.Event.objects.all()
        if organizer_id is not None:
            tickets = tickets.filter(ticket_type__event__organizer_id=organizer_id)
            events = events.filter(organizer_id=organizer_id)
        totals = tickets.aggregate(
            sold=Count("id"),
            redeemed=Count("id", filter=Q(used=True)),
            revenue=Coalesce(
                Sum("ticket_type__price"),
                Value(Decimal("0")),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            ),
        )
        return SalesStats(
            tickets_sold=totals["sold"],
            tickets_redeemed=totals["redeemed"],
            revenue=Money(Decimal(totals["revenue"])),
            events=events.count(),
        )
