"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum

from ticketing.domain.models import TicketDetails


class ErrorCode(Enum):
    """Domain error codes."""

    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_PURCHASE = "INVALID_PURCHASE"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    FORBIDDEN = "FORBIDDEN"
    ALREADY_REDEEMED = "ALREADY_REDEEMED"
    EVENT_HAS_TICKETS = "EVENT_HAS_TICKETS"
    BUSY = "BUSY"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    @property
    def retryable(self) -> bool:
        return self.code is ErrorCode.BUSY


class InsufficientStockError(DomainError):
    """Raised when a ticket type cannot cover the requested quantity."""

    def __init__(self, ticket_type_name: str, requested: int, available: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            message=f"Not enough stock for '{ticket_type_name}'",
        )
        self.requested = requested
        self.available = available


class InvalidQuantityError(DomainError):
    """Raised when a purchase quantity is outside the allowed range."""

    def __init__(self, quantity: int, max_per_purchase: int | None = None) -> None:
        if max_per_purchase is None:
            message = "Quantity must be at least 1"
        else:
            message = f"Quantity must be between 1 and {max_per_purchase}"
        super().__init__(code=ErrorCode.INVALID_QUANTITY, message=message)
        self.quantity = quantity


class InvalidPurchaseError(DomainError):
    """Raised when required purchase data is missing."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_PURCHASE, message=message)


class TicketTypeNotFoundError(DomainError):
    """Raised when a ticket type is not found."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type not found",
        )
        self.ticket_type_id = ticket_type_id


class TicketNotFoundError(DomainError):
    """Raised when no ticket carries the presented redemption code."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found or invalid",
        )


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


class ForbiddenError(DomainError):
    """Raised when a principal acts on an event it does not own.

    The message is the same whatever the target, so callers cannot probe
    other organizers' events.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message="You do not have permission to perform this action",
        )


class AlreadyRedeemedError(DomainError):
    """Raised when a ticket is presented after it was already used."""

    def __init__(self, details: TicketDetails) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REDEEMED,
            message="This ticket has already been used",
        )
        self.details = details


class EventHasTicketsError(DomainError):
    """Raised when deleting an event that already has issued tickets."""

    def __init__(self, issued: int) -> None:
        super().__init__(
            code=ErrorCode.EVENT_HAS_TICKETS,
            message="Event cannot be deleted once tickets have been issued",
        )
        self.issued = issued


class BusyError(DomainError):
    """Raised when a row lock could not be acquired in time. Safe to retry."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BUSY,
            message="The system is busy, please retry",
        )


class StoreInternalError(DomainError):
    """Raised on an unexpected store or driver failure."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INTERNAL,
            message="Internal error",
        )
