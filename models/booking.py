"""
Modelo de Booking (estadía de un huésped en una habitación)
Los importes son una foto al momento de guardar, no una referencia viva a la tarifa
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, Index
from database.conexion import Base
from datetime import datetime
from enum import Enum


# ========================================================================
# ENUMS
# ========================================================================

class IdTypeEnum(str, Enum):
    """Documentos de identidad aceptados en recepción"""
    AADHAR = "Aadhar"
    PAN = "PAN"
    PASSPORT = "Passport"
    DRIVING_LICENSE = "Driving License"
    OTA = "OTA"  # reservas importadas: el id externo ocupa el lugar del documento


class PaymentModeEnum(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"
    TRANSFER = "Transfer"


NO_FILE = "No File"


# ----------- BOOKING -----------
class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index('idx_bookings_mobile', 'mobile'),
        Index('idx_bookings_name', 'name'),
        Index('idx_bookings_room', 'room'),
        Index('idx_bookings_check_in', 'check_in'),
        Index('idx_bookings_payment_ref', 'payment_ref'),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Huésped
    name = Column(String(150), nullable=False)
    mobile = Column(String(30), nullable=True)
    email = Column(String(150), nullable=True)
    id_type = Column(String(30), nullable=True)
    id_number = Column(String(100), nullable=True)
    document_path = Column(Text, nullable=True, default=NO_FILE)  # ruta del scan ya guardado
    document_ext = Column(String(10), nullable=True)

    # Estadía
    room = Column(String(100), nullable=False)  # room_no o "Unassigned (<tipo>)"
    check_in = Column(DateTime, nullable=False)
    check_out = Column(DateTime, nullable=False)
    days = Column(Integer, nullable=False, default=1)

    # Facturación
    rent = Column(Numeric(12, 2), nullable=False, default=0)
    advance = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    due = Column(Numeric(12, 2), nullable=False, default=0)
    commission = Column(Numeric(12, 2), nullable=False, default=0)
    payment_mode = Column(String(20), nullable=True, default=PaymentModeEnum.CASH.value)
    payment_ref = Column(String(100), nullable=True)  # también id externo OTA (dedup)

    # Origen: "Walk-in" | "Agent - <nombre>" | "OTA - <plataforma>"
    ref_by = Column(String(120), nullable=False, default="Walk-in")

    # Auditoría
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def is_unassigned(self) -> bool:
        return (self.room or "").startswith("Unassigned (")

    @property
    def is_overpaid(self) -> bool:
        return float(self.due or 0) < 0

    def __repr__(self):
        return f"<Booking(id={self.id}, room='{self.room}', name='{self.name}')>"
