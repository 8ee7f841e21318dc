"""
Sincronización de reservas OTA
fetch -> normalize -> dedup por paymentRef -> insert del lote en una sola transacción
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from models.booking import IdTypeEnum, PaymentModeEnum
from services.booking_store import BookingStore
from utils.booking_engine import BookingSource, stay_nights, unassigned_room
from utils.errors import StoreError, SyncError
from utils.logging_utils import log_error, log_event
from utils.ota_normalizer import NormalizedReservation, is_known_platform, normalize

# Hora estándar de entrada/salida para reservas que sólo traen fecha
STANDARD_CHECK_TIME = time(12, 0)


@dataclass
class SyncResult:
    inserted_count: int = 0
    skipped_count: int = 0
    errors: List[str] = field(default_factory=list)
    failed: bool = False

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def message(self) -> str:
        if self.failed:
            return self.errors[0] if self.errors else "OTA sync failed"
        total = self.inserted_count + self.skipped_count
        return (
            f"{self.inserted_count} of {total} OTA bookings added, "
            f"{self.skipped_count} were duplicates"
        )


def build_ota_booking(reservation: NormalizedReservation) -> Dict[str, Any]:
    """Reserva canónica para una OTA todavía sin habitación asignada"""
    check_in = datetime.combine(reservation.check_in, STANDARD_CHECK_TIME)
    check_out = datetime.combine(reservation.check_out, STANDARD_CHECK_TIME)
    nights = stay_nights(check_in, check_out)
    price = reservation.price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    rent = (price / nights).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return {
        "room": unassigned_room(reservation.room_type),
        "name": reservation.guest_name,
        "mobile": reservation.phone,
        "id_type": IdTypeEnum.OTA.value,
        "id_number": reservation.external_id,
        "check_in": check_in,
        "check_out": check_out,
        "days": nights,
        "rent": rent,
        "advance": Decimal("0.00"),
        "total": price,
        "due": price,
        "commission": Decimal("0.00"),
        "payment_mode": PaymentModeEnum.TRANSFER.value,
        "payment_ref": reservation.external_id,
        "ref_by": BookingSource.ota(reservation.source_platform).to_ref_by(),
    }


def _fail(result: SyncResult, user: str, message: str) -> SyncResult:
    log_error("ota", user, "Sync", message)
    result.failed = True
    result.errors.append(message)
    return result


def sync_external_bookings(
    fetch: Callable[[], Dict[str, List[Any]]],
    store: BookingStore,
    user: str = "system",
) -> SyncResult:
    """
    Trae el feed, normaliza cada payload e inserta sólo lo nuevo.

    Duplicados (ya existentes por paymentRef o repetidos en el feed) se saltean
    sin contarse como error. Si el fetch o el insert fallan no queda nada insertado.
    """
    result = SyncResult()
    try:
        feed = fetch()
    except SyncError as e:
        return _fail(result, user, str(e))
    except Exception as e:
        # fetch es un colaborador inyectado: timeouts o errores de red llegan crudos
        return _fail(result, user, f"Could not fetch OTA reservations: {e.__class__.__name__}: {e}")

    try:
        known_refs = {b.payment_ref for b in store.list_all() if b.payment_ref}
    except (StoreError, SQLAlchemyError) as e:
        return _fail(result, user, f"Could not read existing bookings: {e}")
    records: List[Dict[str, Any]] = []

    for platform, payloads in (feed or {}).items():
        if not is_known_platform(platform):
            log_event("ota", user, "Sync", f"platform={platform} uses generic mapping")
        for raw in payloads or []:
            reservation = normalize(raw, platform)
            if not reservation.external_id:
                result.errors.append(f"{reservation.source_platform}: reservation without booking id skipped")
                continue
            if reservation.external_id in known_refs:
                result.skipped_count += 1
                continue
            if not reservation.has_dates or reservation.check_out <= reservation.check_in:
                result.errors.append(
                    f"{reservation.source_platform} {reservation.external_id}: invalid stay dates skipped"
                )
                continue
            known_refs.add(reservation.external_id)
            records.append(build_ota_booking(reservation))

    try:
        store.insert_many(records)
    except StoreError as e:
        result.failed = True
        result.errors.insert(0, e.message)
        return result

    result.inserted_count = len(records)
    log_event("ota", user, "Sync", result.message)
    return result
