from django.urls import path

from ticketing.handlers import (
    EventDetailView,
    EventListView,
    EventTicketListView,
    MyEventListView,
    PurchaseView,
    RedemptionView,
    StatsView,
)

urlpatterns = [
    path("purchases", PurchaseView.as_view(), name="purchase"),
    path("redemptions", RedemptionView.as_view(), name="redemption"),
    path("stats", StatsView.as_view(), name="stats"),
    path("events", EventListView.as_view(), name="event-list"),
    path("events/mine", MyEventListView.as_view(), name="my-event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path(
        "events/<str:event_id>/tickets",
        EventTicketListView.as_view(),
        name="event-ticket-list",
    ),
]
