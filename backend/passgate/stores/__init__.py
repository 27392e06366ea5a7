from passgate.stores.interfaces import BookingStore, EntryLogStore
from passgate.stores.sql_store import SqlBookingStore, SqlEntryLogStore

__all__ = ["BookingStore", "EntryLogStore", "SqlBookingStore", "SqlEntryLogStore"]
