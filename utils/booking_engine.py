"""
Booking Engine - cálculo y validación de reservas de recepción
SINGLE SOURCE OF TRUTH para noches, totales, saldo, origen y choques de habitación

Es puro: recibe la foto completa de reservas existentes y no persiste nada.
Quien llama decide si guarda (y si fuerza el guardado ante un choque).
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dateutil import parser as date_parser

from utils.errors import BookingValidationError


# Constantes
ONE_DAY_SECONDS = 86400
SOURCE_SEPARATOR = " - "
UNASSIGNED_PREFIX = "Unassigned ("
CENTS = Decimal("0.01")


def _safe_decimal(value, fallback: Decimal = Decimal("0")) -> Decimal:
    """Convierte a Decimal de forma segura"""
    if value is None or value == "":
        return fallback
    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        return fallback


def _money(value) -> Decimal:
    return _safe_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _field(row: Any, name: str, default=None):
    """Lee un campo de una fila ORM, un objeto simple o un dict"""
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def parse_datetime(value) -> Optional[datetime]:
    """Convierte string/datetime a datetime naive; None si no se puede"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, str):
        try:
            parsed = date_parser.isoparse(value)
        except ValueError:
            try:
                parsed = date_parser.parse(value)
            except (ValueError, OverflowError):
                return None
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    return None


# ========================================================================
# ORIGEN DE LA RESERVA
# ========================================================================

class SourceKind(str, Enum):
    WALK_IN = "Walk-in"
    AGENT = "Agent"
    OTA = "OTA"


@dataclass(frozen=True)
class BookingSource:
    """
    Origen estructurado de una reserva.
    Se guarda como el string legado: "Walk-in", "Agent - <nombre>", "OTA - <plataforma>".
    Un nombre vacío se conserva ("OTA - ") y cuenta como su propio grupo.
    """
    kind: SourceKind = SourceKind.WALK_IN
    name: str = ""

    @classmethod
    def walk_in(cls) -> "BookingSource":
        return cls(SourceKind.WALK_IN)

    @classmethod
    def agent(cls, name: str) -> "BookingSource":
        return cls(SourceKind.AGENT, (name or "").strip())

    @classmethod
    def ota(cls, platform: str) -> "BookingSource":
        return cls(SourceKind.OTA, (platform or "").strip())

    @classmethod
    def from_selection(cls, source_type, source_name: Optional[str] = None) -> "BookingSource":
        kind_value = source_type.value if isinstance(source_type, Enum) else (source_type or "")
        if kind_value == SourceKind.OTA.value:
            return cls.ota(source_name)
        if kind_value == SourceKind.AGENT.value:
            return cls.agent(source_name)
        return cls.walk_in()

    @classmethod
    def parse(cls, ref_by: Optional[str]) -> "BookingSource":
        head, sep, tail = (ref_by or "").partition(SOURCE_SEPARATOR)
        if not sep and (ref_by or "").rstrip() in ("OTA -", "Agent -"):
            head, sep, tail = ref_by.rstrip()[:-2], SOURCE_SEPARATOR, ""
        if sep and head == SourceKind.OTA.value:
            return cls.ota(tail)
        if sep and head == SourceKind.AGENT.value:
            return cls.agent(tail)
        return cls.walk_in()

    def to_ref_by(self) -> str:
        if self.kind == SourceKind.WALK_IN:
            return SourceKind.WALK_IN.value
        return f"{self.kind.value}{SOURCE_SEPARATOR}{self.name}"


# ========================================================================
# HABITACIONES SIN ASIGNAR
# ========================================================================

def unassigned_room(room_type: str) -> str:
    return f"{UNASSIGNED_PREFIX}{room_type or ''})"


def is_unassigned_room(room: Optional[str]) -> bool:
    return (room or "").startswith(UNASSIGNED_PREFIX)


def unassigned_room_type(room: str) -> str:
    """'Unassigned (Deluxe)' -> 'Deluxe'; cualquier otra cosa se devuelve igual"""
    if is_unassigned_room(room) and room.endswith(")"):
        return room[len(UNASSIGNED_PREFIX):-1]
    return room


# ========================================================================
# NOCHES Y CHOQUES
# ========================================================================

def stay_nights(check_in: datetime, check_out: datetime) -> int:
    """Noches cobradas: días de 24h redondeados hacia arriba, mínimo 1"""
    seconds = (check_out - check_in).total_seconds()
    return max(1, math.ceil(seconds / ONE_DAY_SECONDS))


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    # Intervalos semiabiertos: terminar justo cuando otro empieza no es choque
    return a_start < b_end and a_end > b_start


@dataclass
class BookingConflict:
    booking_id: Optional[int]
    name: str
    room: str
    check_in: datetime
    check_out: datetime

    @property
    def message(self) -> str:
        return (
            f"Room {self.room} is already booked by {self.name} "
            f"(#{self.booking_id}) until {self.check_out:%Y-%m-%d %H:%M}"
        )


def _is_settled_and_past(booking: Any, check_out: datetime, now: Optional[datetime]) -> bool:
    if now is None:
        return False
    return _safe_decimal(_field(booking, "due")) <= 0 and check_out < now


def find_conflict(
    room: Optional[str],
    check_in: datetime,
    check_out: datetime,
    existing: Iterable[Any],
    editing_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Optional[BookingConflict]:
    """
    Primera reserva existente que choca en la misma habitación real.

    Las habitaciones "Unassigned (...)" nunca se chequean. Se excluye la reserva
    en edición. Con `now`, una reserva ya saldada y con salida en el pasado no
    bloquea la habitación.
    """
    if not room or is_unassigned_room(room):
        return None

    for booking in existing:
        booking_id = _field(booking, "id")
        if editing_id is not None and booking_id == editing_id:
            continue
        if _field(booking, "room") != room:
            continue
        start = parse_datetime(_field(booking, "check_in"))
        end = parse_datetime(_field(booking, "check_out"))
        if start is None or end is None:
            continue
        if _is_settled_and_past(booking, end, now):
            continue
        if overlaps(check_in, check_out, start, end):
            return BookingConflict(
                booking_id=booking_id,
                name=_field(booking, "name") or "",
                room=room,
                check_in=start,
                check_out=end,
            )
    return None


# ========================================================================
# PREPARACIÓN DE RESERVAS
# ========================================================================

@dataclass
class BookingDraft:
    """Campos crudos del formulario de recepción"""
    room: Optional[str] = None
    name: Optional[str] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    days: Optional[int] = None
    rent: Optional[Decimal] = None
    advance: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    source_type: Any = SourceKind.WALK_IN
    source_name: str = ""
    mobile: Optional[str] = None
    email: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    payment_mode: Optional[str] = None
    payment_ref: Optional[str] = None

    @classmethod
    def from_record(cls, booking: Any) -> "BookingDraft":
        source = BookingSource.parse(_field(booking, "ref_by"))
        return cls(
            room=_field(booking, "room"),
            name=_field(booking, "name"),
            check_in=parse_datetime(_field(booking, "check_in")),
            check_out=parse_datetime(_field(booking, "check_out")),
            rent=_safe_decimal(_field(booking, "rent")),
            advance=_safe_decimal(_field(booking, "advance")),
            commission=_safe_decimal(_field(booking, "commission")),
            source_type=source.kind,
            source_name=source.name,
            mobile=_field(booking, "mobile"),
            email=_field(booking, "email"),
            id_type=_field(booking, "id_type"),
            id_number=_field(booking, "id_number"),
            payment_mode=_field(booking, "payment_mode"),
            payment_ref=_field(booking, "payment_ref"),
        )


@dataclass
class PreparedBooking:
    """Reserva lista para persistir, con campos derivados siempre consistentes"""
    room: str
    name: str
    check_in: datetime
    check_out: datetime
    days: int
    rent: Decimal
    advance: Decimal
    total: Decimal
    due: Decimal
    commission: Decimal
    source: BookingSource
    mobile: Optional[str] = None
    email: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    payment_mode: Optional[str] = None
    payment_ref: Optional[str] = None
    conflict: Optional[BookingConflict] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def ref_by(self) -> str:
        return self.source.to_ref_by()

    @property
    def has_conflict(self) -> bool:
        return self.conflict is not None

    @property
    def is_overpaid(self) -> bool:
        return self.due < 0

    def to_record(self) -> Dict[str, Any]:
        """Columnas de la tabla bookings (sin id, documento ni created_at)"""
        return {
            "room": self.room,
            "name": self.name,
            "mobile": self.mobile,
            "email": self.email,
            "id_type": self.id_type,
            "id_number": self.id_number,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "days": self.days,
            "rent": self.rent,
            "advance": self.advance,
            "total": self.total,
            "due": self.due,
            "commission": self.commission,
            "payment_mode": self.payment_mode,
            "payment_ref": self.payment_ref,
            "ref_by": self.ref_by,
        }


def _nightly_rate(draft: BookingDraft, room: str, rate_card: Optional[Mapping[str, Any]]) -> Decimal:
    if draft.rent is not None:
        return _money(draft.rent)
    if rate_card and room in rate_card:
        return _money(_field(rate_card[room], "rate"))
    return Decimal("0.00")


def prepare_booking(
    draft: BookingDraft,
    existing: Iterable[Any],
    editing_id: Optional[int] = None,
    rate_card: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
) -> PreparedBooking:
    """
    MOTOR ÚNICO DE RESERVAS

    Orden de derivación:
      1) checkOut dado -> days = ceil((checkOut - checkIn) / 1 día), mínimo 1
      2) sólo days dado -> checkOut = checkIn + days (se conserva la hora)
      3) total = days * rent ; due = total - advance

    Raises:
        BookingValidationError: falta room/name/checkIn o la estadía no es positiva

    Un choque de habitación no es error: queda en `conflict` para que quien
    llama decida si fuerza el guardado.
    """
    room = (draft.room or "").strip()
    name = (draft.name or "").strip()
    if not room:
        raise BookingValidationError(BookingValidationError.REQUIRED_FIELD, field="room")
    if not name:
        raise BookingValidationError(BookingValidationError.REQUIRED_FIELD, field="name")

    check_in = parse_datetime(draft.check_in)
    if check_in is None:
        raise BookingValidationError(BookingValidationError.REQUIRED_FIELD, field="checkIn")

    check_out = parse_datetime(draft.check_out)
    if check_out is not None:
        if check_out <= check_in:
            raise BookingValidationError(BookingValidationError.INVALID_STAY, field="checkOut")
        days = stay_nights(check_in, check_out)
    else:
        days = 1 if draft.days is None else int(draft.days)
        if days < 1:
            raise BookingValidationError(BookingValidationError.INVALID_STAY, field="days")
        try:
            check_out = check_in + timedelta(days=days)
        except OverflowError:
            raise BookingValidationError(BookingValidationError.INVALID_STAY, field="days")

    rent = _nightly_rate(draft, room, rate_card)
    advance = _money(draft.advance)
    total = (rent * days).quantize(CENTS)
    due = total - advance

    prepared = PreparedBooking(
        room=room,
        name=name,
        check_in=check_in,
        check_out=check_out,
        days=days,
        rent=rent,
        advance=advance,
        total=total,
        due=due,
        commission=_money(draft.commission),
        source=BookingSource.from_selection(draft.source_type, draft.source_name),
        mobile=draft.mobile,
        email=draft.email,
        id_type=draft.id_type,
        id_number=draft.id_number,
        payment_mode=draft.payment_mode,
        payment_ref=draft.payment_ref,
    )

    prepared.conflict = find_conflict(room, check_in, check_out, existing, editing_id=editing_id, now=now)
    if prepared.conflict:
        prepared.warnings.append(prepared.conflict.message)
    if prepared.is_overpaid:
        prepared.warnings.append(f"Advance exceeds total by {-due}")
    if prepared.source.kind != SourceKind.WALK_IN and not prepared.source.name:
        prepared.warnings.append(f"{prepared.source.kind.value} name not specified")
    return prepared


def checkout_now(
    booking: Any,
    existing: Iterable[Any],
    now: datetime,
) -> PreparedBooking:
    """
    Cierra la estadía en `now` y recalcula noches/total/saldo
    por el mismo camino de validación que una edición.
    """
    draft = BookingDraft.from_record(booking)
    if draft.check_in is not None and now <= draft.check_in:
        raise BookingValidationError(BookingValidationError.INVALID_STAY, field="checkOut")
    draft = replace(draft, check_out=now, days=None)
    return prepare_booking(draft, existing, editing_id=_field(booking, "id"), now=now)


def guest_profile(booking: Any) -> Dict[str, Any]:
    """Datos de un huésped previo para autocompletar el formulario"""
    return {
        "name": _field(booking, "name"),
        "mobile": _field(booking, "mobile"),
        "email": _field(booking, "email"),
        "id_type": _field(booking, "id_type"),
        "id_number": _field(booking, "id_number"),
        "document_path": _field(booking, "document_path"),
    }
