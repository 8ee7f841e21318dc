"""
Catálogo de tarifas por habitación (room_no -> tipo y tarifa por noche)
"""

from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import DEFAULT_RATES
from models.room_rate import RoomRate
from utils.errors import StoreError
from utils.logging_utils import log_error, log_event


class RateStore:

    def __init__(self, db: Session, user: str = "admin"):
        self.db = db
        self.user = user

    def list(self) -> List[RoomRate]:
        return self.db.query(RoomRate).order_by(RoomRate.room_no.asc()).all()

    def get(self, room_no: str) -> Optional[RoomRate]:
        return self.db.query(RoomRate).filter(RoomRate.room_no == room_no).first()

    def rate_card(self) -> Dict[str, RoomRate]:
        return {rate.room_no: rate for rate in self.list()}

    def insert(self, room_no: str, room_type: str, rate: int) -> RoomRate:
        room_rate = RoomRate(room_no=room_no, room_type=room_type, rate=rate)
        try:
            self.db.add(room_rate)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            log_error("rates", self.user, "Insert room", f"room_no={room_no} duplicated")
            raise StoreError(f"Room {room_no} already exists", cause=e)
        except SQLAlchemyError as e:
            self.db.rollback()
            log_error("rates", self.user, "Insert room", str(e))
            raise StoreError(f"Error inserting room {room_no}: {e}", cause=e)
        self.db.refresh(room_rate)
        log_event("rates", self.user, "Insert room", f"room_no={room_no} rate={rate}")
        return room_rate

    def update(self, room_no: str, room_type: Optional[str] = None, rate: Optional[int] = None) -> RoomRate:
        room_rate = self.get(room_no)
        if room_rate is None:
            raise StoreError(f"Room {room_no} not found")
        if room_type is not None:
            room_rate.room_type = room_type
        if rate is not None:
            room_rate.rate = rate
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log_error("rates", self.user, "Update room", str(e))
            raise StoreError(f"Error updating room {room_no}: {e}", cause=e)
        self.db.refresh(room_rate)
        log_event("rates", self.user, "Update room", f"room_no={room_no}")
        return room_rate

    def delete(self, room_no: str) -> None:
        room_rate = self.get(room_no)
        if room_rate is None:
            raise StoreError(f"Room {room_no} not found")
        try:
            self.db.delete(room_rate)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log_error("rates", self.user, "Delete room", str(e))
            raise StoreError(f"Error deleting room {room_no}: {e}", cause=e)
        log_event("rates", self.user, "Delete room", f"room_no={room_no}")


def seed_default_rates(db: Session) -> int:
    """Carga la tarifa por defecto si el catálogo está vacío"""
    if db.query(RoomRate).count() > 0:
        return 0
    db.add_all(RoomRate(room_no=r[0], room_type=r[1], rate=r[2]) for r in DEFAULT_RATES)
    db.commit()
    log_event("rates", "system", "Seed default rates", f"total={len(DEFAULT_RATES)}")
    return len(DEFAULT_RATES)
