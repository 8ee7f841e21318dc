"""
Store de reservas sobre SQLAlchemy
Cada operación de escritura es atómica: commit o rollback + StoreError
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.booking import Booking, NO_FILE
from utils.errors import StoreError
from utils.logging_utils import log_error, log_event


# nombre público (UI) o de columna -> columna
LOOKUP_FIELDS = {
    "mobile": "mobile",
    "email": "email",
    "name": "name",
    "room": "room",
    "paymentRef": "payment_ref",
    "payment_ref": "payment_ref",
    "idNumber": "id_number",
    "id_number": "id_number",
}

WRITABLE_COLUMNS = (
    "room", "name", "mobile", "email", "id_type", "id_number", "document_path", "document_ext",
    "check_in", "check_out", "days", "rent", "advance", "total", "due", "commission",
    "payment_mode", "payment_ref", "ref_by",
)


def _clean(record: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in record.items() if key in WRITABLE_COLUMNS}


class BookingStore:
    """Colección persistida de reservas (una sesión por instancia)"""

    def __init__(self, db: Session, user: str = "admin"):
        self.db = db
        self.user = user

    def _fail(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        message = f"Error {action}: {error.__class__.__name__}: {error}"
        log_error("bookings", self.user, action, message)
        return StoreError(message, cause=error)

    def insert(self, record: Dict[str, Any]) -> int:
        data = _clean(record)
        data.setdefault("document_path", NO_FILE)
        booking = Booking(**data, created_at=datetime.utcnow())
        try:
            self.db.add(booking)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("insert booking", e)
        self.db.refresh(booking)
        log_event("bookings", self.user, "Insert booking", f"id={booking.id} room={booking.room}")
        return booking.id

    def insert_many(self, records: Iterable[Dict[str, Any]]) -> List[int]:
        """Inserta todo el lote en una sola transacción: todo o nada"""
        bookings = []
        for record in records:
            data = _clean(record)
            data.setdefault("document_path", NO_FILE)
            bookings.append(Booking(**data, created_at=datetime.utcnow()))
        if not bookings:
            return []
        try:
            self.db.add_all(bookings)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("insert booking batch", e)
        ids = [b.id for b in bookings]
        log_event("bookings", self.user, "Insert booking batch", f"ids={ids}")
        return ids

    def get(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def update(self, booking_id: int, record: Dict[str, Any]) -> None:
        """Reemplazo completo de la fila; created_at nunca cambia"""
        booking = self.get(booking_id)
        if booking is None:
            raise StoreError(f"Booking {booking_id} not found")
        for column in WRITABLE_COLUMNS:
            if column in record:
                setattr(booking, column, record[column])
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update booking", e)
        log_event("bookings", self.user, "Update booking", f"id={booking_id}")

    def delete(self, booking_id: int) -> None:
        booking = self.get(booking_id)
        if booking is None:
            raise StoreError(f"Booking {booking_id} not found")
        try:
            self.db.delete(booking)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete booking", e)
        log_event("bookings", self.user, "Delete booking", f"id={booking_id}")

    def list_all(self, search: Optional[str] = None) -> List[Booking]:
        query = self.db.query(Booking)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Booking.name.ilike(pattern),
                    Booking.mobile.like(pattern),
                    Booking.room.like(pattern),
                )
            )
        return query.order_by(Booking.id.desc()).all()

    def find_by_field(self, field: str, value: Any) -> Optional[Booking]:
        """Reserva más reciente cuyo campo coincide exactamente con value"""
        column_name = LOOKUP_FIELDS.get(field)
        if column_name is None:
            raise ValueError(f"Unsupported lookup field: {field}")
        column = getattr(Booking, column_name)
        return (
            self.db.query(Booking)
            .filter(column == value)
            .order_by(Booking.id.desc())
            .first()
        )
