from ticketing.services.event_service import EventService
from ticketing.services.issuer import TicketIssuer
from ticketing.services.ledger import InventoryLedger
from ticketing.services.purchase_service import PurchaseService
from ticketing.services.redemption_gate import RedemptionGate
from ticketing.services.stats_service import StatsService

__all__ = [
    "EventService",
    "InventoryLedger",
    "PurchaseService",
    "RedemptionGate",
    "StatsService",
    "TicketIssuer",
]
