"""
Dependencias de FastAPI: configuración, stores y feed OTA inyectados por request
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import Settings
from database import conexion
from services.booking_store import BookingStore
from services.rate_store import RateStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_booking_store(db: Session = Depends(conexion.get_db)) -> BookingStore:
    return BookingStore(db)


def get_rate_store(db: Session = Depends(conexion.get_db)) -> RateStore:
    return RateStore(db)


def get_ota_feed(request: Request):
    return request.app.state.ota_feed
