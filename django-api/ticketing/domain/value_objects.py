"""Domain primitives that enforce validity at creation time."""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketTypeId:
    """Unique identifier for a TicketType."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BuyerId:
    """Unique identifier for a Buyer."""

    value: UUID

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RedemptionCode:
    """Opaque token printed as the ticket's QR code.

    The code is the only credential checked at the door, so it is drawn
    from a 122-bit random UUID4.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Redemption code cannot be empty")

    @classmethod
    def generate(cls) -> Self:
        return cls(value=str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Stock:
    """Remaining units of a ticket type. Never negative."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Stock cannot be negative")

    def covers(self, quantity: int) -> bool:
        return self.value >= quantity

    def take(self, quantity: int) -> "Stock":
        return Stock(self.value - quantity)


class Role(Enum):
    """Roles an authenticated principal can hold."""

    ADMIN = "admin"
    ORGANIZER = "organizer"


@dataclass(frozen=True)
class Principal:
    """The authenticated actor performing a redemption or a stats query."""

    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def can_manage(self, organizer_id: int) -> bool:
        """Admins manage every event, organizers only their own."""
        return self.is_admin or self.id == organizer_id
