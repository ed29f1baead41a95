"""Unit tests for the services against the in-memory store.

These test business rules and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from helpers import purchase_request

from ticketing.domain import BuyerInfo, Money, RedemptionCode, Reservation, TicketTypeId
from ticketing.domain.errors import (
    AlreadyRedeemedError,
    EventHasTicketsError,
    EventNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidEventIdError,
    InvalidPurchaseError,
    InvalidQuantityError,
    TicketNotFoundError,
    TicketTypeNotFoundError,
)
from ticketing.services import (
    EventService,
    InventoryLedger,
    PurchaseService,
    RedemptionGate,
    StatsService,
    TicketIssuer,
)

FIXED_NOW = datetime(2030, 4, 1, 19, 30, tzinfo=timezone.utc)


class TestInventoryLedger:
    """Tests for InventoryLedger.reserve."""

    def test_reserve_decrements_stock_on_commit(self, store, ticket_type):
        with store.transaction() as tx:
            outcome = InventoryLedger().reserve(tx, ticket_type.id, 2)

        assert isinstance(outcome, Reservation)
        assert outcome.quantity == 2
        assert outcome.ticket_type.stock.value == 3
        assert store.ticket_types[ticket_type.id].stock.value == 3

    def test_reserve_returns_insufficient_stock_without_writing(
        self, store, ticket_type
    ):
        with store.transaction() as tx:
            outcome = InventoryLedger().reserve(tx, ticket_type.id, 6)

        assert isinstance(outcome, InsufficientStockError)
        assert "General" in outcome.message
        assert store.ticket_types[ticket_type.id].stock.value == 5

    def test_reserve_unknown_ticket_type(self, store):
        with store.transaction() as tx:
            outcome = InventoryLedger().reserve(tx, TicketTypeId(uuid.uuid4()), 1)

        assert isinstance(outcome, TicketTypeNotFoundError)

    def test_reserve_rejects_zero_quantity(self, store, ticket_type):
        with store.transaction() as tx:
            outcome = InventoryLedger().reserve(tx, ticket_type.id, 0)

        assert isinstance(outcome, InvalidQuantityError)

    def test_rolled_back_reservation_restores_stock(self, store, ticket_type):
        with store.transaction() as tx:
            InventoryLedger().reserve(tx, ticket_type.id, 4)
            tx.mark_rollback()

        assert store.ticket_types[ticket_type.id].stock.value == 5


class TestTicketIssuer:
    """Tests for TicketIssuer.issue."""

    def test_issue_creates_one_ticket_per_unit(self, store, ticket_type):
        buyer = BuyerInfo(name="Grace", email="grace@example.com")
        with store.transaction() as tx:
            reservation = InventoryLedger().reserve(tx, ticket_type.id, 3)
            receipt = TicketIssuer().issue(tx, reservation, buyer, "cash")

        assert len(receipt.tickets) == 3
        assert len({t.code for t in receipt.tickets}) == 3
        assert all(not t.used for t in receipt.tickets)
        assert all(t.payment_method == "cash" for t in receipt.tickets)
        assert receipt.buyer.email == "grace@example.com"
        assert len(store.tickets) == 3

    def test_issue_rejects_quantity_above_bound(self, store, ticket_type):
        buyer = BuyerInfo(name="Grace", email="grace@example.com")
        with store.transaction() as tx:
            reservation = InventoryLedger().reserve(tx, ticket_type.id, 3)
            outcome = TicketIssuer(max_per_purchase=2).issue(
                tx, reservation, buyer, "cash"
            )
            tx.mark_rollback()

        assert isinstance(outcome, InvalidQuantityError)
        assert store.tickets == {}

    def test_issue_uses_injected_code_generator(self, store, ticket_type):
        codes = iter(["code-a", "code-b"])
        issuer = TicketIssuer(generate_code=lambda: RedemptionCode(next(codes)))
        buyer = BuyerInfo(name="Grace", email="grace@example.com")
        with store.transaction() as tx:
            reservation = InventoryLedger().reserve(tx, ticket_type.id, 2)
            receipt = issuer.issue(tx, reservation, buyer, "cash")

        assert [t.code.value for t in receipt.tickets] == ["code-a", "code-b"]


class TestPurchaseService:
    """Tests for PurchaseService.purchase."""

    def test_purchase_returns_receipt(self, store, ticket_type):
        receipt = PurchaseService(store).purchase(purchase_request(ticket_type.id, 2))

        assert receipt.buyer.name == "Ada Lovelace"
        assert len(receipt.tickets) == 2
        assert store.ticket_types[ticket_type.id].stock.value == 3

    def test_every_purchase_creates_a_new_buyer(self, store, ticket_type):
        service = PurchaseService(store)
        first = service.purchase(purchase_request(ticket_type.id))
        second = service.purchase(purchase_request(ticket_type.id))

        assert first.buyer.id != second.buyer.id
        assert len(store.buyers) == 2

    def test_purchase_insufficient_stock_raises(self, store, ticket_type):
        with pytest.raises(InsufficientStockError):
            PurchaseService(store).purchase(purchase_request(ticket_type.id, 6))

        assert store.ticket_types[ticket_type.id].stock.value == 5
        assert store.buyers == {}

    def test_purchase_unknown_ticket_type_raises(self, store):
        with pytest.raises(TicketTypeNotFoundError):
            PurchaseService(store).purchase(
                purchase_request(TicketTypeId(uuid.uuid4()))
            )

    @pytest.mark.parametrize("quantity", [0, -1, 11])
    def test_purchase_quantity_outside_bound_raises(self, store, ticket_type, quantity):
        with pytest.raises(InvalidQuantityError):
            PurchaseService(store).purchase(purchase_request(ticket_type.id, quantity))

        assert store.ticket_types[ticket_type.id].stock.value == 5

    def test_purchase_bound_is_configurable(self, store, ticket_type):
        service = PurchaseService(store, max_per_purchase=1)
        with pytest.raises(InvalidQuantityError):
            service.purchase(purchase_request(ticket_type.id, 2))

    def test_purchase_requires_payment_method(self, store, ticket_type):
        with pytest.raises(InvalidPurchaseError):
            PurchaseService(store).purchase(
                purchase_request(ticket_type.id, payment_method=" ")
            )

    def test_purchase_requires_buyer_email(self, store, ticket_type):
        with pytest.raises(InvalidPurchaseError):
            PurchaseService(store).purchase(
                purchase_request(ticket_type.id, buyer=BuyerInfo(name="Ada", email=""))
            )


class TestRedemptionGate:
    """Tests for RedemptionGate.redeem."""

    @pytest.fixture
    def code(self, store, ticket_type) -> str:
        receipt = PurchaseService(store).purchase(purchase_request(ticket_type.id))
        return receipt.tickets[0].code.value

    def test_redeem_marks_ticket_used(self, store, code, organizer):
        details = RedemptionGate(store, clock=lambda: FIXED_NOW).redeem(code, organizer)

        assert details.used is True
        assert details.redeemed_at == FIXED_NOW
        assert details.event_title == "Spring Concert"
        assert details.ticket_type_name == "General"
        assert details.price == Money(Decimal("25.00"))
        assert details.buyer_email == "ada@example.com"
        ticket_id = store.codes[code]
        assert store.tickets[ticket_id].ticket.used is True

    def test_second_redeem_raises_already_redeemed_with_details(
        self, store, code, organizer
    ):
        gate = RedemptionGate(store, clock=lambda: FIXED_NOW)
        gate.redeem(code, organizer)

        with pytest.raises(AlreadyRedeemedError) as excinfo:
            gate.redeem(code, organizer)

        assert excinfo.value.details.code.value == code
        assert excinfo.value.details.redeemed_at == FIXED_NOW

    def test_unknown_code_raises_not_found(self, store, organizer):
        with pytest.raises(TicketNotFoundError):
            RedemptionGate(store).redeem(str(uuid.uuid4()), organizer)

    def test_blank_code_raises_not_found(self, store, organizer):
        with pytest.raises(TicketNotFoundError):
            RedemptionGate(store).redeem("", organizer)

    def test_other_organizer_is_forbidden_and_ticket_stays_unused(
        self, store, code, other_organizer
    ):
        with pytest.raises(ForbiddenError):
            RedemptionGate(store).redeem(code, other_organizer)

        assert store.tickets[store.codes[code]].ticket.used is False

    def test_admin_can_redeem_any_event(self, store, code, admin):
        assert RedemptionGate(store).redeem(code, admin).used is True


class TestStatsService:
    """Tests for StatsService.stats."""

    def test_stats_scoped_to_organizer(self, store, ticket_type, organizer, admin):
        other_event = store.add_event(
            "Other", datetime(2030, 5, 1, tzinfo=timezone.utc), "Annex", 2
        )
        other_type = store.add_ticket_type(other_event.id, "Floor", Decimal("10"), 5)
        service = PurchaseService(store)
        receipt = service.purchase(purchase_request(ticket_type.id, 2))
        service.purchase(purchase_request(other_type.id, 1))
        RedemptionGate(store).redeem(receipt.tickets[0].code.value, organizer)

        own = StatsService(store).stats(organizer)
        everything = StatsService(store).stats(admin)

        assert (own.tickets_sold, own.tickets_redeemed, own.events) == (2, 1, 1)
        assert own.revenue == Money(Decimal("50.00"))
        assert (everything.tickets_sold, everything.events) == (3, 2)
        assert everything.revenue == Money(Decimal("60.00"))

    def test_stats_empty(self, store, organizer):
        stats = StatsService(store).stats(organizer)
        assert stats.tickets_sold == 0
        assert stats.revenue == Money(Decimal("0"))


class TestEventService:
    """Tests for EventService."""

    def test_get_event_invalid_id_raises_error(self, store):
        """get_event raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError):
            EventService(store).get_event("nope")

    def test_get_event_not_found_raises_error(self, store):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError):
            EventService(store).get_event(str(uuid.uuid4()))

    def test_get_ticket_types(self, store, event, ticket_type):
        types = EventService(store).get_ticket_types(str(event.id))
        assert [t.name for t in types] == ["General"]

    def test_list_events_for_organizer(self, store, event, organizer, other_organizer):
        service = EventService(store)
        assert service.list_events_for(organizer) == [event]
        assert service.list_events_for(other_organizer) == []

    def test_list_event_tickets_forbidden_for_other_organizer(
        self, store, event, other_organizer
    ):
        with pytest.raises(ForbiddenError):
            EventService(store).list_event_tickets(other_organizer, str(event.id))

    def test_missing_event_is_forbidden_for_organizer(self, store, organizer):
        with pytest.raises(ForbiddenError):
            EventService(store).list_event_tickets(organizer, str(uuid.uuid4()))

    def test_missing_event_is_not_found_for_admin(self, store, admin):
        with pytest.raises(EventNotFoundError):
            EventService(store).delete_event(admin, str(uuid.uuid4()))

    def test_delete_event_without_tickets(self, store, event, ticket_type, organizer):
        EventService(store).delete_event(organizer, str(event.id))

        assert store.events == {}
        assert store.ticket_types == {}

    def test_delete_event_with_tickets_is_rejected(
        self, store, event, ticket_type, admin
    ):
        PurchaseService(store).purchase(purchase_request(ticket_type.id))

        with pytest.raises(EventHasTicketsError):
            EventService(store).delete_event(admin, str(event.id))

        assert event.id in store.events

    def test_delete_event_forbidden_for_other_organizer(
        self, store, event, other_organizer
    ):
        with pytest.raises(ForbiddenError):
            EventService(store).delete_event(other_organizer, str(event.id))

        assert event.id in store.events
