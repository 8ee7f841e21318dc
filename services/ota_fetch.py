"""
Clientes de feed OTA
- HttpOtaFeed: consulta un endpoint HTTP por plataforma (requests, con timeout)
- SimulatedOtaFeed: respuesta fija, sin red

Ambos devuelven {plataforma: [payload crudo, ...]} y lanzan SyncError si algo falla.
"""

from typing import Any, Dict, List, Optional

import requests

from config import Settings
from utils.errors import SyncError
from utils.logging_utils import log_error, log_event

RawFeed = Dict[str, List[Dict[str, Any]]]


SIMULATED_RESERVATIONS: RawFeed = {
    "Booking.com": [
        {
            "reservation_id": "BDC-4471023",
            "guest": {"first_name": "Rahul", "last_name": "Sharma", "phone": "+91 98100 11223"},
            "room": {"name": "Super Deluxe Room"},
            "arrival_date": "2025-03-10",
            "departure_date": "2025-03-12",
            "price": {"total": 6400, "currency": "INR"},
        },
    ],
    "Agoda": [
        {
            "BookingID": 88213410,
            "GuestDetails": {"Name": "Emily Clarke", "Phone": "+44 7700 900123"},
            "RoomType": "Family Suite",
            "CheckInDate": "2025-03-14T14:00:00",
            "CheckOutDate": "2025-03-17T11:00:00",
            "TotalAmount": "15,000.00",
        },
    ],
    "MakeMyTrip": [
        {
            "booking_ref": "MMT-NH7731",
            "customer": {"full_name": "Priya Nair", "mobile": "9845012345"},
            "room_category": "Deluxe Non AC Room",
            "stay": {"from": "2025-03-20", "to": "2025-03-21"},
            "amount": {"net": 2100},
        },
    ],
}


class SimulatedOtaFeed:
    """Feed fijo usado mientras no hay integración real con las OTAs"""

    def __init__(self, reservations: Optional[RawFeed] = None):
        self.reservations = SIMULATED_RESERVATIONS if reservations is None else reservations

    def fetch_raw_reservations(self, platform: str) -> List[Dict[str, Any]]:
        return [dict(payload) for payload in self.reservations.get(platform, [])]

    def fetch_all(self) -> RawFeed:
        return {platform: self.fetch_raw_reservations(platform) for platform in self.reservations}


class HttpOtaFeed:

    def __init__(self, base_url: str, platforms: List[str], api_key: str = "", timeout: int = 15,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.platforms = platforms
        self.api_key = api_key
        self.timeout = timeout
        self.http = session or requests.Session()

    def fetch_raw_reservations(self, platform: str) -> List[Dict[str, Any]]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            resp = self.http.get(
                f"{self.base_url}/reservations",
                params={"platform": platform},
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            log_error("ota", "system", "Fetch reservations", f"platform={platform} error={e}")
            raise SyncError(f"Could not fetch {platform} reservations: {e}") from e
        except ValueError as e:
            log_error("ota", "system", "Fetch reservations", f"platform={platform} invalid JSON")
            raise SyncError(f"Invalid response from {platform} feed") from e

        if isinstance(data, dict):
            data = data.get("reservations", [])
        if not isinstance(data, list):
            raise SyncError(f"Unexpected response shape from {platform} feed")
        log_event("ota", "system", "Fetch reservations", f"platform={platform} total={len(data)}")
        return data

    def fetch_all(self) -> RawFeed:
        return {platform: self.fetch_raw_reservations(platform) for platform in self.platforms}


def build_feed(settings: Settings):
    """Feed HTTP si hay OTA_FEED_URL configurada; si no, el simulado"""
    if settings.ota_feed_url:
        return HttpOtaFeed(
            settings.ota_feed_url,
            settings.ota_platforms,
            api_key=settings.ota_api_key,
            timeout=settings.ota_fetch_timeout,
        )
    return SimulatedOtaFeed()
