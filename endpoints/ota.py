from fastapi import APIRouter, Depends

from schemas.ota import SyncResponse
from services.booking_store import BookingStore
from services.ota_sync import sync_external_bookings
from utils.dependencies import get_booking_store, get_ota_feed


router = APIRouter(prefix="/ota", tags=["OTA"])


@router.post("/sync", response_model=SyncResponse)
def sincronizar_ota(
    store: BookingStore = Depends(get_booking_store),
    feed=Depends(get_ota_feed),
):
    """
    Trae reservas de las plataformas configuradas y agrega las nuevas
    como habitaciones sin asignar. Un fallo no deja inserciones parciales.
    """
    result = sync_external_bookings(feed.fetch_all, store, user="admin")
    return SyncResponse(
        success=result.success,
        message=result.message,
        inserted_count=result.inserted_count,
        skipped_count=result.skipped_count,
        errors=result.errors,
    )
