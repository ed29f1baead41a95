"""Builders shared by the test modules."""

from ticketing.domain import BuyerInfo, PurchaseRequest, TicketTypeId


def purchase_request(
    ticket_type_id: TicketTypeId, quantity: int = 1, **overrides
) -> PurchaseRequest:
    values = {
        "buyer": BuyerInfo(name="Ada Lovelace", email="ada@example.com"),
        "ticket_type_id": ticket_type_id,
        "quantity": quantity,
        "payment_method": "card",
    }
    values.update(overrides)
    return PurchaseRequest(**values)
