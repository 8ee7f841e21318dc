"""
Normalización de reservas OTA
Cada plataforma conocida tiene su extractor; las desconocidas usan un merge
permisivo para que una plataforma nueva degrade en vez de romper la sincronización.

normalize() es total: nunca lanza excepción, un campo roto queda vacío/cero.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from dateutil import parser as date_parser

from utils.booking_engine import _safe_decimal


@dataclass
class NormalizedReservation:
    external_id: str = ""
    guest_name: str = ""
    phone: str = ""
    room_type: str = ""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    price: Decimal = Decimal("0")  # total de la estadía, no por noche
    source_platform: str = ""

    @property
    def has_dates(self) -> bool:
        return self.check_in is not None and self.check_out is not None


CANONICAL_FIELDS = tuple(f.name for f in fields(NormalizedReservation))

Extractor = Callable[[Mapping], Dict[str, Any]]


# ========================================================================
# HELPERS TOLERANTES
# ========================================================================

def _dig(raw: Any, *path: str) -> Any:
    current = raw
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple, set)):
        return ""
    return str(value).strip()


def _amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    amount = _safe_decimal(value)
    if not amount.is_finite():
        return Decimal("0")
    return amount


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date_parser.parse(value).date()
        except (ValueError, OverflowError):
            return None
    return None


def _full_name(*parts: Any) -> str:
    return " ".join(p for p in (_text(x) for x in parts) if p)


# ========================================================================
# EXTRACTORES POR PLATAFORMA
# ========================================================================

def _extract_booking_com(raw: Mapping) -> Dict[str, Any]:
    return {
        "external_id": _text(raw.get("reservation_id")),
        "guest_name": _full_name(_dig(raw, "guest", "first_name"), _dig(raw, "guest", "last_name")),
        "phone": _text(_dig(raw, "guest", "phone")),
        "room_type": _text(_dig(raw, "room", "name")),
        "check_in": _as_date(raw.get("arrival_date")),
        "check_out": _as_date(raw.get("departure_date")),
        "price": _amount(_dig(raw, "price", "total")),
    }


def _extract_agoda(raw: Mapping) -> Dict[str, Any]:
    return {
        "external_id": _text(raw.get("BookingID")),
        "guest_name": _text(_dig(raw, "GuestDetails", "Name")),
        "phone": _text(_dig(raw, "GuestDetails", "Phone")),
        "room_type": _text(raw.get("RoomType")),
        "check_in": _as_date(raw.get("CheckInDate")),
        "check_out": _as_date(raw.get("CheckOutDate")),
        "price": _amount(raw.get("TotalAmount")),
    }


def _extract_makemytrip(raw: Mapping) -> Dict[str, Any]:
    return {
        "external_id": _text(raw.get("booking_ref")),
        "guest_name": _text(_dig(raw, "customer", "full_name")),
        "phone": _text(_dig(raw, "customer", "mobile")),
        "room_type": _text(raw.get("room_category")),
        "check_in": _as_date(_dig(raw, "stay", "from")),
        "check_out": _as_date(_dig(raw, "stay", "to")),
        "price": _amount(_dig(raw, "amount", "net")),
    }


def _extract_airbnb(raw: Mapping) -> Dict[str, Any]:
    return {
        "external_id": _text(raw.get("confirmation_code")),
        "guest_name": _text(raw.get("guest_name")),
        "phone": _text(raw.get("guest_phone")),
        "room_type": _text(_dig(raw, "listing", "room_type")),
        "check_in": _as_date(raw.get("start_date")),
        "check_out": _as_date(raw.get("end_date")),
        "price": _amount(raw.get("total_payout")),
    }


def _extract_passthrough(raw: Mapping) -> Dict[str, Any]:
    """Plataforma desconocida: copia superficial de los campos con nombre canónico"""
    merged: Dict[str, Any] = {}
    for key in CANONICAL_FIELDS:
        if key in raw and key != "source_platform":
            merged[key] = raw[key]
    return {
        "external_id": _text(merged.get("external_id")),
        "guest_name": _text(merged.get("guest_name")),
        "phone": _text(merged.get("phone")),
        "room_type": _text(merged.get("room_type")),
        "check_in": _as_date(merged.get("check_in")),
        "check_out": _as_date(merged.get("check_out")),
        "price": _amount(merged.get("price")),
    }


# clave normalizada -> (nombre visible, extractor)
KNOWN_PLATFORMS: Dict[str, Tuple[str, Extractor]] = {
    "bookingcom": ("Booking.com", _extract_booking_com),
    "agoda": ("Agoda", _extract_agoda),
    "makemytrip": ("MakeMyTrip", _extract_makemytrip),
    "airbnb": ("Airbnb", _extract_airbnb),
}


def platform_key(platform: Optional[str]) -> str:
    return "".join(ch for ch in (platform or "").lower() if ch.isalnum())


def resolve_platform(platform: Optional[str]) -> Tuple[str, Extractor]:
    """(nombre visible, extractor) de la plataforma; fallback para las desconocidas"""
    known = KNOWN_PLATFORMS.get(platform_key(platform))
    if known:
        return known
    return (_text(platform), _extract_passthrough)


def normalize(raw_payload: Any, source_platform: str) -> NormalizedReservation:
    display_name, extractor = resolve_platform(source_platform)
    if not isinstance(raw_payload, Mapping):
        return NormalizedReservation(source_platform=display_name)

    extracted = extractor(raw_payload)
    return NormalizedReservation(source_platform=display_name, **extracted)


def is_known_platform(platform: str) -> bool:
    return platform_key(platform) in KNOWN_PLATFORMS

