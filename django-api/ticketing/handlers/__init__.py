from ticketing.handlers.views import (
    EventDetailView,
    EventListView,
    EventTicketListView,
    MyEventListView,
    PurchaseView,
    RedemptionView,
    StatsView,
)

__all__ = [
    "EventDetailView",
    "EventListView",
    "EventTicketListView",
    "MyEventListView",
    "PurchaseView",
    "RedemptionView",
    "StatsView",
]
