from passgate.models.pass_type import PassType
from passgate.models.booking import Booking, BookingPass
from passgate.models.entry_log import EntryLog

__all__ = ["PassType", "Booking", "BookingPass", "EntryLog"]
