"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.conf import ticketing_settings
from ticketing.domain import BuyerInfo, PurchaseRequest, TicketTypeId
from ticketing.domain.errors import AlreadyRedeemedError, DomainError, ErrorCode
from ticketing.handlers.auth import IsOrganizerOrAdmin, principal_for
from ticketing.handlers.serializers import (
    EventSerializer,
    PurchaseInputSerializer,
    PurchaseReceiptSerializer,
    RedemptionInputSerializer,
    SalesStatsSerializer,
    TicketDetailsSerializer,
    TicketTypeSerializer,
)
from ticketing.services import (
    EventService,
    PurchaseService,
    RedemptionGate,
    StatsService,
)
from ticketing.stores.django_store import DjangoTicketingStore

ERROR_STATUS = {
    ErrorCode.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PURCHASE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.TICKET_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_REDEEMED: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_HAS_TICKETS: status.HTTP_409_CONFLICT,
    ErrorCode.BUSY: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

RETRY_AFTER_SECONDS = "1"


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if isinstance(error, AlreadyRedeemedError):
        body["ticket"] = TicketDetailsSerializer(error.details).data
    headers = {"Retry-After": RETRY_AFTER_SECONDS} if error.retryable else None
    return Response(body, status=ERROR_STATUS[error.code], headers=headers)


def ticketing_store() -> DjangoTicketingStore:
    return DjangoTicketingStore(lock_timeout_ms=ticketing_settings().lock_timeout_ms)


class PurchaseView(APIView):
    """Handler for POST /api/purchases"""

    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        serializer = PurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        service = PurchaseService(
            ticketing_store(),
            max_per_purchase=ticketing_settings().max_tickets_per_purchase,
        )
        try:
            receipt = service.purchase(
                PurchaseRequest(
                    buyer=BuyerInfo(name=data["name"], email=data["email"]),
                    ticket_type_id=TicketTypeId(data["ticket_type_id"]),
                    quantity=data["quantity"],
                    payment_method=data["payment_method"],
                )
            )
        except DomainError as error:
            return error_response(error)
        return Response(
            PurchaseReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED
        )


class RedemptionView(APIView):
    """Handler for POST /api/redemptions"""

    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def post(self, request: Request) -> Response:
        serializer = RedemptionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        gate = RedemptionGate(ticketing_store())
        try:
            details = gate.redeem(
                serializer.validated_data["code"], principal_for(request.user)
            )
        except DomainError as error:
            return error_response(error)
        return Response(TicketDetailsSerializer(details).data)


class StatsView(APIView):
    """Handler for GET /api/stats"""

    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def get(self, request: Request) -> Response:
        stats = StatsService(ticketing_store()).stats(principal_for(request.user))
        return Response(SalesStatsSerializer(stats).data)


class EventListView(APIView):
    """Handler for GET /api/events"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        events = EventService(ticketing_store()).list_events()
        return Response(EventSerializer(events, many=True).data)


class MyEventListView(APIView):
    """Handler for GET /api/events/mine"""

    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def get(self, request: Request) -> Response:
        service = EventService(ticketing_store())
        events = service.list_events_for(principal_for(request.user))
        return Response(EventSerializer(events, many=True).data)


class EventDetailView(APIView):
    """Handler for GET and DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated(), IsOrganizerOrAdmin()]

    def get(self, request: Request, event_id: str) -> Response:
        service = EventService(ticketing_store())
        try:
            event = service.get_event(event_id)
            ticket_types = service.get_ticket_types(event_id)
        except DomainError as error:
            return error_response(error)
        body = EventSerializer(event).data
        body["ticket_types"] = TicketTypeSerializer(ticket_types, many=True).data
        return Response(body)

    def delete(self, request: Request, event_id: str) -> Response:
        service = EventService(ticketing_store())
        try:
            service.delete_event(principal_for(request.user), event_id)
        except DomainError as error:
            return error_response(error)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventTicketListView(APIView):
    """Handler for GET /api/events/{event_id}/tickets"""

    permission_classes = [IsAuthenticated, IsOrganizerOrAdmin]

    def get(self, request: Request, event_id: str) -> Response:
        service = EventService(ticketing_store())
        try:
            tickets = service.list_event_tickets(principal_for(request.user), event_id)
        except DomainError as error:
            return error_response(error)
        return Response(TicketDetailsSerializer(tickets, many=True).data)
