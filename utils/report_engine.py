"""
Motor de reportes: P&L mensual, origen de reservas, agentes y ocupación
Pura agregación sobre la colección de reservas; ninguna fila mal formada la rompe
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from utils.booking_engine import (
    SOURCE_SEPARATOR,
    _field,
    parse_datetime,
    unassigned_room_type,
)

DIRECT_SOURCE = "Direct"


def _safe_float(value, fallback: float = 0.0) -> float:
    """Convierte a float de forma segura"""
    if value is None:
        return fallback
    try:
        number = float(value)
    except (ValueError, TypeError):
        return fallback
    if number != number or number in (float("inf"), float("-inf")):
        return fallback
    return number


def _safe_int(value, fallback: int = 0) -> int:
    return int(_safe_float(value, fallback))


def period_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def source_group(ref_by: Optional[str]) -> str:
    """'OTA - Agoda' -> 'OTA'; sin separador se usa el string entero; vacío -> Direct"""
    text = ref_by.strip() if isinstance(ref_by, str) else ""
    if not text:
        return DIRECT_SOURCE
    head, sep, _ = text.partition(SOURCE_SEPARATOR)
    if sep:
        return head.strip() or DIRECT_SOURCE
    if text.endswith(" -"):
        return text[:-2].strip() or DIRECT_SOURCE
    return text


def _in_period(check_in: Optional[datetime], period: Optional[str]) -> bool:
    if period is None:
        return True
    return check_in is not None and period_key(check_in) == period


def build_summary(bookings: List[Any]) -> Dict[str, Any]:
    total_revenue = 0.0
    total_due = 0.0
    total_commission = 0.0
    overpaid = 0
    for booking in bookings:
        due = _safe_float(_field(booking, "due"))
        total_revenue += _safe_float(_field(booking, "total"))
        total_due += due
        total_commission += _safe_float(_field(booking, "commission"))
        if due < 0:
            overpaid += 1
    return {
        "totalBookings": len(bookings),
        "totalRevenue": total_revenue,
        "totalDue": total_due,
        "totalCommission": total_commission,
        "netProfit": total_revenue - total_commission,
        "overpaidCount": overpaid,
    }


def build_monthly_series(bookings: List[Any]) -> List[Dict[str, Any]]:
    months: Dict[str, Dict[str, Any]] = {}
    for booking in bookings:
        check_in = parse_datetime(_field(booking, "check_in"))
        if check_in is None:
            continue
        key = period_key(check_in)
        entry = months.setdefault(key, {"name": key, "revenue": 0.0, "commission": 0.0, "profit": 0.0, "bookings": 0})
        revenue = _safe_float(_field(booking, "total"))
        commission = _safe_float(_field(booking, "commission"))
        entry["revenue"] += revenue
        entry["commission"] += commission
        entry["profit"] += revenue - commission
        entry["bookings"] += 1
    return [months[key] for key in sorted(months)]


def build_source_breakdown(bookings: List[Any]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = defaultdict(int)
    for booking in bookings:
        counts[source_group(_field(booking, "ref_by"))] += 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def build_agent_performance(bookings: List[Any], period: Optional[str] = None) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for booking in bookings:
        if not _in_period(parse_datetime(_field(booking, "check_in")), period):
            continue
        ref_by = _field(booking, "ref_by")
        key = ref_by if isinstance(ref_by, str) and ref_by.strip() else DIRECT_SOURCE
        entry = groups.setdefault(key, {"name": key, "revenue": 0.0, "commission": 0.0, "count": 0})
        entry["revenue"] += _safe_float(_field(booking, "total"))
        entry["commission"] += _safe_float(_field(booking, "commission"))
        entry["count"] += 1
    return sorted(groups.values(), key=lambda e: e["revenue"], reverse=True)


def build_occupancy(bookings: List[Any], period: Optional[str] = None) -> List[Dict[str, Any]]:
    rooms: Dict[str, Dict[str, Any]] = {}
    for booking in bookings:
        if not _in_period(parse_datetime(_field(booking, "check_in")), period):
            continue
        room = _field(booking, "room")
        key = unassigned_room_type(room) if isinstance(room, str) and room else "Unknown"
        entry = rooms.setdefault(key, {"room": key, "nights": 0, "revenue": 0.0})
        entry["nights"] += _safe_int(_field(booking, "days"))
        entry["revenue"] += _safe_float(_field(booking, "total"))
    return sorted(rooms.values(), key=lambda e: e["nights"], reverse=True)


def aggregate(bookings: Iterable[Any], period: Optional[str] = None) -> Dict[str, Any]:
    """
    Pliega la colección completa de reservas en las vistas del dashboard.

    Args:
        bookings: filas ORM, objetos simples o dicts
        period: "YYYY-MM" para limitar agentes y ocupación a ese mes

    Returns:
        {summary, monthlySeries, sourceBreakdown, agentPerformance, occupancy}
    """
    rows = list(bookings)
    return {
        "period": period,
        "summary": build_summary(rows),
        "monthlySeries": build_monthly_series(rows),
        "sourceBreakdown": build_source_breakdown(rows),
        "agentPerformance": build_agent_performance(rows, period),
        "occupancy": build_occupancy(rows, period),
    }
