from ticketing.stores.interfaces import StoreTransaction, TicketingStore

__all__ = ["StoreTransaction", "TicketingStore"]
