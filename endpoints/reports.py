"""
Dashboard de reportes: resumen, serie mensual, fuentes, agentes y ocupación
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from services.booking_store import BookingStore
from utils.dependencies import get_booking_store
from utils.logging_utils import log_event
from utils.report_engine import aggregate


router = APIRouter(prefix="/reports", tags=["Reportes"])


@router.get("/dashboard")
def dashboard(
    period: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="Mes YYYY-MM"),
    store: BookingStore = Depends(get_booking_store),
) -> Dict[str, Any]:
    bookings = store.list_all()
    log_event("reports", "admin", "Dashboard", f"bookings={len(bookings)} period={period}")
    return aggregate(bookings, period)
