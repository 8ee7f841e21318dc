import base64
import binascii
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from config import Settings
from models.booking import NO_FILE
from schemas.bookings import (
    BookingConflictRead,
    BookingCreate,
    BookingPreview,
    BookingRead,
    GuestProfile,
    InvoiceEmailRequest,
    OperationResult,
)
from services.booking_store import BookingStore
from services.document_storage import DocumentStorageError, is_encoded_document, save_identity_document
from services.email_service import send_invoice_email
from services.rate_store import RateStore
from utils.booking_engine import BookingConflict, PreparedBooking, checkout_now, guest_profile, prepare_booking
from utils.dependencies import get_app_settings, get_booking_store, get_rate_store
from utils.errors import BookingValidationError, StoreError
from utils.logging_utils import log_event
from utils.timezone import get_local_now


router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _conflict_read(conflict: BookingConflict) -> BookingConflictRead:
    return BookingConflictRead(
        id=conflict.booking_id,
        name=conflict.name,
        room=conflict.room,
        check_in=conflict.check_in,
        check_out=conflict.check_out,
        message=conflict.message,
    )


def _raise_conflict(conflict: BookingConflict) -> None:
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": "room conflict",
            "conflict": _conflict_read(conflict).model_dump(mode="json", by_alias=True),
        },
    )


def _validation_failed(error: BookingValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": error.message, "field": error.field},
    )


def _store_failed(error: StoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)


def _buscar_booking(store: BookingStore, booking_id: int):
    booking = store.get(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def _preparar(
    data: BookingCreate,
    store: BookingStore,
    rates: RateStore,
    settings: Settings,
    editing_id: Optional[int] = None,
) -> PreparedBooking:
    try:
        return prepare_booking(
            data.to_draft(),
            store.list_all(),
            editing_id=editing_id,
            rate_card=rates.rate_card(),
            now=get_local_now(settings.hotel_timezone),
        )
    except BookingValidationError as e:
        raise _validation_failed(e)


def _resolver_documento(
    data: BookingCreate,
    prepared: PreparedBooking,
    settings: Settings,
    previous_path: Optional[str] = None,
) -> str:
    """Guarda el scan si llegó uno nuevo; si no, conserva la ruta previa"""
    if is_encoded_document(data.file_base64):
        try:
            return save_identity_document(
                data.file_base64,
                prepared.name,
                prepared.check_in,
                prepared.room,
                data.file_ext,
                settings.guest_docs_path,
            )
        except DocumentStorageError as e:
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return data.saved_file_path or previous_path or NO_FILE


def _preview(prepared: PreparedBooking) -> BookingPreview:
    return BookingPreview(
        room=prepared.room,
        name=prepared.name,
        check_in=prepared.check_in,
        check_out=prepared.check_out,
        days=prepared.days,
        rent=prepared.rent,
        advance=prepared.advance,
        total=prepared.total,
        due=prepared.due,
        commission=prepared.commission,
        ref_by=prepared.ref_by,
        overpaid=prepared.is_overpaid,
        conflict=_conflict_read(prepared.conflict) if prepared.conflict else None,
        warnings=prepared.warnings,
    )


@router.get("", response_model=List[BookingRead])
def listar_bookings(
    search: Optional[str] = Query(None, max_length=100),
    store: BookingStore = Depends(get_booking_store),
):
    bookings = store.list_all(search=search)
    log_event("bookings", "admin", "List bookings", f"total={len(bookings)}")
    return bookings


@router.get("/guest-lookup", response_model=GuestProfile)
def buscar_huesped(
    mobile: str = Query(..., min_length=3, max_length=30),
    store: BookingStore = Depends(get_booking_store),
):
    previous = store.find_by_field("mobile", mobile.strip())
    if not previous:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest_profile(previous)


@router.post("/preview", response_model=BookingPreview)
def previsualizar_booking(
    data: BookingCreate,
    editing_id: Optional[int] = Query(None, alias="editingId", gt=0),
    store: BookingStore = Depends(get_booking_store),
    rates: RateStore = Depends(get_rate_store),
    settings: Settings = Depends(get_app_settings),
):
    return _preview(_preparar(data, store, rates, settings, editing_id))


@router.get("/{booking_id}", response_model=BookingRead)
def obtener_booking(
    booking_id: int = Path(..., gt=0),
    store: BookingStore = Depends(get_booking_store),
):
    return _buscar_booking(store, booking_id)


@router.post("", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
def crear_booking(
    data: BookingCreate,
    force: bool = Query(False, description="Guardar aunque la habitación choque con otra reserva"),
    store: BookingStore = Depends(get_booking_store),
    rates: RateStore = Depends(get_rate_store),
    settings: Settings = Depends(get_app_settings),
):
    prepared = _preparar(data, store, rates, settings)
    if prepared.has_conflict and not force:
        _raise_conflict(prepared.conflict)

    record: Dict[str, Any] = prepared.to_record()
    record["document_path"] = _resolver_documento(data, prepared, settings)
    record["document_ext"] = data.file_ext
    try:
        booking_id = store.insert(record)
    except StoreError as e:
        raise _store_failed(e)

    message = "Booking saved"
    if record["document_path"] != NO_FILE:
        message += f" & file stored at {record['document_path']}"
    if prepared.has_conflict:
        message += " (room conflict overridden)"
    return OperationResult(success=True, message=message, id=booking_id, document_path=record["document_path"])


@router.put("/{booking_id}", response_model=OperationResult)
def actualizar_booking(
    data: BookingCreate,
    booking_id: int = Path(..., gt=0),
    force: bool = Query(False),
    store: BookingStore = Depends(get_booking_store),
    rates: RateStore = Depends(get_rate_store),
    settings: Settings = Depends(get_app_settings),
):
    existing = _buscar_booking(store, booking_id)
    previous_path, previous_ext = existing.document_path, existing.document_ext

    prepared = _preparar(data, store, rates, settings, editing_id=booking_id)
    if prepared.has_conflict and not force:
        _raise_conflict(prepared.conflict)

    record = prepared.to_record()
    record["document_path"] = _resolver_documento(data, prepared, settings, previous_path)
    record["document_ext"] = data.file_ext if is_encoded_document(data.file_base64) else previous_ext
    try:
        store.update(booking_id, record)
    except StoreError as e:
        raise _store_failed(e)
    return OperationResult(success=True, message="Booking updated", id=booking_id, document_path=record["document_path"])


@router.post("/{booking_id}/checkout-now", response_model=BookingRead)
def checkout_ahora(
    booking_id: int = Path(..., gt=0),
    force: bool = Query(False),
    store: BookingStore = Depends(get_booking_store),
    settings: Settings = Depends(get_app_settings),
):
    booking = _buscar_booking(store, booking_id)
    try:
        prepared = checkout_now(booking, store.list_all(), get_local_now(settings.hotel_timezone))
    except BookingValidationError as e:
        raise _validation_failed(e)
    if prepared.has_conflict and not force:
        _raise_conflict(prepared.conflict)

    try:
        store.update(booking_id, prepared.to_record())
    except StoreError as e:
        raise _store_failed(e)
    log_event("bookings", "admin", "Checkout now", f"id={booking_id} days={prepared.days}")
    return store.get(booking_id)


@router.delete("/{booking_id}", response_model=OperationResult)
def eliminar_booking(
    booking_id: int = Path(..., gt=0),
    store: BookingStore = Depends(get_booking_store),
):
    _buscar_booking(store, booking_id)
    try:
        store.delete(booking_id)
    except StoreError as e:
        raise _store_failed(e)
    return OperationResult(success=True, message="Booking deleted", id=booking_id)


@router.post("/{booking_id}/email-invoice", response_model=OperationResult)
def enviar_factura(
    payload: InvoiceEmailRequest,
    booking_id: int = Path(..., gt=0),
    store: BookingStore = Depends(get_booking_store),
    settings: Settings = Depends(get_app_settings),
):
    booking = _buscar_booking(store, booking_id)
    to_address = payload.to or booking.email
    try:
        attachment = base64.b64decode(payload.pdf_base64.split("base64,")[-1])
    except (binascii.Error, ValueError):
        return OperationResult(success=False, message="Invoice PDF is not valid base64", id=booking_id)

    success, message = send_invoice_email(
        to_address,
        payload.subject or f"Invoice - {settings.hotel_name} Room {booking.room}",
        payload.body or f"Dear {booking.name},\n\nPlease find attached invoice.\n\n{settings.hotel_name}",
        attachment,
        payload.file_name or f"Invoice_{booking.id}.pdf",
        settings,
    )
    return OperationResult(success=success, message=message, id=booking_id)
