"""
Servicios con I/O: stores, feed y sincronización OTA, documentos, e-mail
"""

from .booking_store import BookingStore
from .rate_store import RateStore, seed_default_rates
from .ota_sync import SyncResult, sync_external_bookings

__all__ = [
    "BookingStore",
    "RateStore",
    "seed_default_rates",
    "SyncResult",
    "sync_external_bookings",
]
