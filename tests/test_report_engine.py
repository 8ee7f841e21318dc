"""
Tests for Report Engine
Agregación del dashboard sobre filas sanas y filas rotas
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import datetime
from decimal import Decimal

from utils.report_engine import _safe_float, aggregate, period_key, source_group


def _row(ref_by, total, check_in, commission=0, due=0, room="101", days=1):
    return {
        "ref_by": ref_by, "total": total, "commission": commission, "due": due,
        "check_in": check_in, "room": room, "days": days,
    }


@pytest.fixture
def bookings():
    return [
        _row("Walk-in", Decimal("6000"), datetime(2025, 3, 1, 12), due=Decimal("4000"), days=2),
        _row("OTA - Agoda", Decimal("15000"), datetime(2025, 3, 14, 14), commission=Decimal("1500"),
             room="Unassigned (Family Suite)", days=3),
        _row("Agent - Ramesh", Decimal("2000"), datetime(2025, 4, 2, 12), commission=200, due=-500),
        _row("OTA - Booking.com", 6400, "2025-04-10T12:00:00", room="Unassigned (Family Suite)", days=2),
    ]


class TestHelpers:

    def test_safe_float(self):
        assert _safe_float("12.5") == 12.5
        assert _safe_float("abc") == 0.0
        assert _safe_float(float("nan")) == 0.0
        assert _safe_float(None, 3.0) == 3.0

    def test_source_group(self):
        assert source_group("OTA - Agoda") == "OTA"
        assert source_group("Agent - Ramesh") == "Agent"
        assert source_group("Walk-in") == "Walk-in"
        assert source_group("OTA - ") == "OTA"
        assert source_group("") == "Direct"
        assert source_group(None) == "Direct"

    def test_period_key(self):
        assert period_key(datetime(2025, 3, 9)) == "2025-03"


class TestAggregate:

    def test_summary(self, bookings):
        summary = aggregate(bookings)["summary"]
        assert summary["totalBookings"] == 4
        assert summary["totalRevenue"] == pytest.approx(29400.0)
        assert summary["totalCommission"] == pytest.approx(1700.0)
        assert summary["netProfit"] == pytest.approx(27700.0)
        assert summary["totalDue"] == pytest.approx(3500.0)
        assert summary["overpaidCount"] == 1

    def test_monthly_series_sorted(self, bookings):
        series = aggregate(bookings)["monthlySeries"]
        assert [m["name"] for m in series] == ["2025-03", "2025-04"]
        assert series[0]["revenue"] == pytest.approx(21000.0)
        assert series[0]["profit"] == pytest.approx(19500.0)
        assert series[1]["bookings"] == 2

    def test_source_vs_agent_grouping(self, bookings):
        result = aggregate(bookings)
        sources = {s["name"]: s["value"] for s in result["sourceBreakdown"]}
        assert sources == {"Walk-in": 1, "OTA": 2, "Agent": 1}
        agents = [a["name"] for a in result["agentPerformance"]]
        assert "OTA - Agoda" in agents
        assert "OTA" not in agents
        assert agents[0] == "OTA - Agoda"

    def test_period_filters_agents_and_occupancy(self, bookings):
        result = aggregate(bookings, period="2025-04")
        assert {a["name"] for a in result["agentPerformance"]} == {"Agent - Ramesh", "OTA - Booking.com"}
        occupancy = {o["room"]: o["nights"] for o in result["occupancy"]}
        assert occupancy == {"Family Suite": 2, "101": 1}
        # el resumen siempre es sobre toda la colección
        assert result["summary"]["totalBookings"] == 4

    def test_malformed_rows_do_not_break(self):
        rows = [
            _row("Walk-in", "not a number", datetime(2025, 1, 1)),
            _row(None, None, None, commission="x"),
            _row("OTA - Agoda", 1000, "garbage"),
        ]
        result = aggregate(rows)
        assert result["summary"]["totalRevenue"] == pytest.approx(1000.0)
        assert result["summary"]["totalBookings"] == 3
        assert len(result["monthlySeries"]) == 1

    def test_empty_collection(self):
        result = aggregate([])
        assert result["summary"]["totalBookings"] == 0
        assert result["monthlySeries"] == []
        assert result["occupancy"] == []
