"""Redemption gate.

A ticket moves from unredeemed to redeemed exactly once. The check and the
flip happen under the ticket's row lock, so of several concurrent attempts
with the same code only the first to get the lock succeeds; the others see
the flag already set.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from ticketing.domain import Principal, RedemptionCode, TicketDetails
from ticketing.domain.errors import (
    AlreadyRedeemedError,
    DomainError,
    ForbiddenError,
    TicketNotFoundError,
)
from ticketing.stores.interfaces import StoreTransaction, TicketingStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RedemptionGate:
    """Service validating tickets at the venue door."""

    def __init__(
        self, store: TicketingStore, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self._store = store
        self._clock = clock

    def redeem(self, code: str, principal: Principal) -> TicketDetails:
        """Consume the ticket carrying `code` and return its details.

        Raises:
            TicketNotFoundError: If no ticket carries the code.
            ForbiddenError: If the principal does not own the ticket's event.
            AlreadyRedeemedError: If the ticket was used before. Carries the
                ticket details.
            BusyError: If the ticket row stayed locked past the timeout.
        """
        try:
            redemption_code = RedemptionCode(code)
        except ValueError:
            raise TicketNotFoundError() from None

        with self._store.transaction() as tx:
            outcome = self._check_and_flip(tx, redemption_code, principal)
            if isinstance(outcome, DomainError):
                tx.mark_rollback()

        if isinstance(outcome, DomainError):
            raise outcome
        return outcome

    def _check_and_flip(
        self, tx: StoreTransaction, code: RedemptionCode, principal: Principal
    ) -> TicketDetails | DomainError:
        details = tx.lock_ticket(code)
        if details is None:
            logger.info("Unknown redemption code presented")
            return TicketNotFoundError()

        if not principal.can_manage(details.organizer_id):
            logger.warning(
                "Principal %s may not redeem tickets of event %s",
                principal.id,
                details.event_id,
                extra={"principal_id": principal.id},
            )
            return ForbiddenError()

        if details.used:
            # Replays are expected at the door, not a failure.
            logger.info(
                "Ticket %s presented again",
                details.ticket_id,
                extra={"ticket_id": str(details.ticket_id)},
            )
            return AlreadyRedeemedError(details)

        redeemed_at = self._clock()
        tx.mark_redeemed(details.ticket_id, redeemed_at)
        logger.info(
            "Ticket %s redeemed",
            details.ticket_id,
            extra={"ticket_id": str(details.ticket_id), "principal_id": principal.id},
        )
        return details.redeemed(redeemed_at)
