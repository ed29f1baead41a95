"""Core tunables read from the TICKETING settings dict."""

from dataclasses import dataclass

from django.conf import settings

DEFAULTS = {
    "MAX_TICKETS_PER_PURCHASE": 10,
    "LOCK_TIMEOUT_MS": 5000,
    "ORGANIZER_GROUP": "organizers",
}


@dataclass(frozen=True)
class TicketingSettings:
    max_tickets_per_purchase: int
    lock_timeout_ms: int
    organizer_group: str

    def __post_init__(self) -> None:
        if self.max_tickets_per_purchase < 1:
            raise ValueError("MAX_TICKETS_PER_PURCHASE must be at least 1")
        if self.lock_timeout_ms < 1:
            raise ValueError("LOCK_TIMEOUT_MS must be positive")


def ticketing_settings() -> TicketingSettings:
    values = {**DEFAULTS, **getattr(settings, "TICKETING", {})}
    return TicketingSettings(
        max_tickets_per_purchase=int(values["MAX_TICKETS_PER_PURCHASE"]),
        lock_timeout_ms=int(values["LOCK_TIMEOUT_MS"]),
        organizer_group=values["ORGANIZER_GROUP"],
    )
