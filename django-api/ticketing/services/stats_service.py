"""Sales statistics over committed data."""

from ticketing.domain import Principal, SalesStats
from ticketing.stores.interfaces import TicketingStore


class StatsService:
    """Read-only aggregates scoped to the principal's events."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def stats(self, principal: Principal) -> SalesStats:
        """Return sold, redeemed and revenue totals. Admins see every event."""
        organizer_id = None if principal.is_admin else principal.id
        return self._store.sales_stats(organizer_id)
