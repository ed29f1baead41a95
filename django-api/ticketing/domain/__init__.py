from ticketing.domain.models import (
    Buyer,
    BuyerInfo,
    Event,
    PurchaseReceipt,
    PurchaseRequest,
    Reservation,
    SalesStats,
    Ticket,
    TicketDetails,
    TicketType,
)
from ticketing.domain.value_objects import (
    BuyerId,
    EventId,
    Money,
    Principal,
    RedemptionCode,
    Role,
    Stock,
    TicketId,
    TicketTypeId,
)

__all__ = [
    "Buyer",
    "BuyerInfo",
    "Event",
    "PurchaseReceipt",
    "PurchaseRequest",
    "Reservation",
    "SalesStats",
    "Ticket",
    "TicketDetails",
    "TicketType",
    "BuyerId",
    "EventId",
    "Money",
    "Principal",
    "RedemptionCode",
    "Role",
    "Stock",
    "TicketId",
    "TicketTypeId",
]
