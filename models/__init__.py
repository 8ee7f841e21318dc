"""
Archivo de inicialización del paquete models.
Expone todas las clases para que SQLAlchemy (Base.metadata) las detecte
al importar 'models'.
"""

# 1. Tarifas (desde room_rate.py)
from .room_rate import RoomRate

# 2. Reservas/estadías (desde booking.py)
from .booking import Booking, IdTypeEnum, PaymentModeEnum, NO_FILE

__all__ = [
    "RoomRate",
    "Booking", "IdTypeEnum", "PaymentModeEnum", "NO_FILE",
]
