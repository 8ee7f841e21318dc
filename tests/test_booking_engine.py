"""
Tests for Booking Engine
Derivación de noches/totales, origen y choques de habitación (booking_engine.py)
"""

import sys
from pathlib import Path

# Agregar directorio raíz al PYTHONPATH para imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from utils.booking_engine import (
    BookingDraft,
    BookingSource,
    SourceKind,
    _safe_decimal,
    checkout_now,
    find_conflict,
    guest_profile,
    overlaps,
    parse_datetime,
    prepare_booking,
    stay_nights,
    unassigned_room,
    unassigned_room_type,
)
from utils.errors import BookingValidationError


def _booking(id, room, check_in, check_out, name="Guest", due=Decimal("0"), ref_by="Walk-in"):
    return SimpleNamespace(
        id=id, room=room, name=name, check_in=check_in, check_out=check_out,
        due=due, rent=Decimal("1000"), advance=Decimal("0"), commission=Decimal("0"),
        ref_by=ref_by, mobile=None, email=None, id_type=None, id_number=None,
        payment_mode="Cash", payment_ref=None, document_path="No File",
    )


class TestHelperFunctions:

    def test_safe_decimal(self):
        assert _safe_decimal("25.50") == Decimal("25.50")
        assert _safe_decimal(None) == Decimal("0")
        assert _safe_decimal("abc", Decimal("7")) == Decimal("7")

    def test_parse_datetime(self):
        assert parse_datetime("2025-03-01T12:00") == datetime(2025, 3, 1, 12, 0)
        assert parse_datetime("2025-03-01T12:00:00+05:30").tzinfo is None
        assert parse_datetime("not a date") is None
        assert parse_datetime(None) is None

    def test_stay_nights_rounds_up(self):
        start = datetime(2025, 1, 1, 12, 0)
        assert stay_nights(start, start + timedelta(days=2)) == 2
        assert stay_nights(start, start + timedelta(days=2, minutes=1)) == 3
        assert stay_nights(start, start + timedelta(hours=3)) == 1

    def test_unassigned_room(self):
        room = unassigned_room("Deluxe")
        assert room == "Unassigned (Deluxe)"
        assert unassigned_room_type(room) == "Deluxe"
        assert unassigned_room_type("101") == "101"


class TestBookingSource:

    def test_ref_by_strings(self):
        assert BookingSource.walk_in().to_ref_by() == "Walk-in"
        assert BookingSource.agent("Ramesh").to_ref_by() == "Agent - Ramesh"
        assert BookingSource.ota("Agoda").to_ref_by() == "OTA - Agoda"

    def test_empty_name_kept(self):
        assert BookingSource.ota("").to_ref_by() == "OTA - "

    def test_parse(self):
        assert BookingSource.parse("OTA - Agoda") == BookingSource(SourceKind.OTA, "Agoda")
        assert BookingSource.parse("Agent - Ramesh") == BookingSource(SourceKind.AGENT, "Ramesh")
        assert BookingSource.parse("OTA -").kind == SourceKind.OTA
        assert BookingSource.parse("Walk-in").kind == SourceKind.WALK_IN
        assert BookingSource.parse(None).kind == SourceKind.WALK_IN

    def test_from_selection_ignores_name_for_walk_in(self):
        assert BookingSource.from_selection("Walk-in", "Someone").to_ref_by() == "Walk-in"
        assert BookingSource.from_selection(SourceKind.AGENT, " Ravi ").name == "Ravi"


class TestPrepareBooking:

    def test_derivation_from_days(self):
        draft = BookingDraft(
            room="101", name="Asha", check_in=datetime(2025, 1, 1, 12, 0),
            days=3, rent=Decimal("2000"), advance=Decimal("1000"),
        )
        prepared = prepare_booking(draft, [])
        assert prepared.check_out == datetime(2025, 1, 4, 12, 0)
        assert prepared.total == Decimal("6000.00")
        assert prepared.due == Decimal("5000.00")
        assert prepared.days == 3
        assert not prepared.has_conflict

    def test_check_out_wins_over_days(self):
        draft = BookingDraft(
            room="101", name="Asha", check_in=datetime(2025, 1, 1, 12, 0),
            check_out=datetime(2025, 1, 3, 14, 0), days=10, rent=Decimal("1000"),
        )
        prepared = prepare_booking(draft, [])
        assert prepared.days == 3
        assert prepared.total == Decimal("3000.00")

    def test_days_defaults_to_one(self):
        draft = BookingDraft(room="101", name="Asha", check_in=datetime(2025, 1, 1, 12, 0), rent=Decimal("500"))
        prepared = prepare_booking(draft, [])
        assert prepared.days == 1
        assert prepared.check_out == datetime(2025, 1, 2, 12, 0)

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(hours=-1)])
    def test_check_out_not_after_check_in_rejected(self, offset):
        check_in = datetime(2025, 1, 1, 12, 0)
        draft = BookingDraft(room="101", name="Asha", check_in=check_in, check_out=check_in + offset)
        with pytest.raises(BookingValidationError) as exc:
            prepare_booking(draft, [])
        assert exc.value.message == BookingValidationError.INVALID_STAY
        assert exc.value.field == "checkOut"

    @pytest.mark.parametrize("days", [10**7, 10**12])
    def test_out_of_range_days_rejected(self, days):
        draft = BookingDraft(room="101", name="Asha", check_in=datetime(2025, 3, 1, 12), days=days, rent=Decimal("100"))
        with pytest.raises(BookingValidationError) as exc:
            prepare_booking(draft, [])
        assert exc.value.message == BookingValidationError.INVALID_STAY
        assert exc.value.field == "days"

    def test_zero_days_rejected(self):
        draft = BookingDraft(room="101", name="Asha", check_in=datetime(2025, 1, 1), days=0)
        with pytest.raises(BookingValidationError):
            prepare_booking(draft, [])

    @pytest.mark.parametrize("missing", ["room", "name", "check_in"])
    def test_required_fields(self, missing):
        values = {"room": "101", "name": "Asha", "check_in": datetime(2025, 1, 1)}
        values[missing] = None
        with pytest.raises(BookingValidationError) as exc:
            prepare_booking(BookingDraft(**values), [])
        assert exc.value.message == BookingValidationError.REQUIRED_FIELD

    def test_rent_from_rate_card(self):
        rate_card = {"201": SimpleNamespace(room_type="Family Suite", rate=5000)}
        draft = BookingDraft(room="201", name="Asha", check_in=datetime(2025, 1, 1), days=2)
        prepared = prepare_booking(draft, [], rate_card=rate_card)
        assert prepared.rent == Decimal("5000.00")
        assert prepared.total == Decimal("10000.00")

    def test_overpaid_is_warning_not_error(self):
        draft = BookingDraft(
            room="101", name="Asha", check_in=datetime(2025, 1, 1),
            rent=Decimal("1000"), advance=Decimal("1500"),
        )
        prepared = prepare_booking(draft, [])
        assert prepared.due == Decimal("-500.00")
        assert prepared.is_overpaid
        assert any("exceeds" in w for w in prepared.warnings)

    def test_unnamed_ota_source_warns(self):
        draft = BookingDraft(
            room="101", name="Asha", check_in=datetime(2025, 1, 1),
            source_type=SourceKind.OTA, source_name="",
        )
        prepared = prepare_booking(draft, [])
        assert prepared.ref_by == "OTA - "
        assert "OTA name not specified" in prepared.warnings

    def test_e2e_conflict_references_first_booking(self):
        first = prepare_booking(BookingDraft(
            room="101", name="Asha", check_in=datetime(2025, 3, 1, 12, 0),
            days=2, rent=Decimal("3000"), advance=Decimal("2000"),
        ), [])
        assert first.check_out == datetime(2025, 3, 3, 12, 0)
        assert first.total == Decimal("6000.00")
        assert first.due == Decimal("4000.00")

        stored = SimpleNamespace(id=1, **first.to_record())
        second = prepare_booking(BookingDraft(
            room="101", name="Vikram", check_in=datetime(2025, 3, 2, 10, 0), days=1,
        ), [stored])
        assert second.has_conflict
        assert second.conflict.booking_id == 1
        assert second.conflict.name == "Asha"
        assert "Asha" in second.warnings[0]


class TestConflicts:

    def test_half_open_intervals(self):
        jan = lambda d: datetime(2025, 1, d)
        assert not overlaps(jan(1), jan(3), jan(3), jan(5))
        assert overlaps(jan(1), jan(3), jan(2), jan(5))
        assert overlaps(jan(2), jan(5), jan(1), jan(3)) == overlaps(jan(1), jan(3), jan(2), jan(5))

    def test_adjacent_booking_no_conflict(self):
        existing = [_booking(1, "101", datetime(2025, 1, 1), datetime(2025, 1, 3), due=Decimal("100"))]
        assert find_conflict("101", datetime(2025, 1, 3), datetime(2025, 1, 5), existing) is None
        assert find_conflict("101", datetime(2025, 1, 2), datetime(2025, 1, 5), existing).booking_id == 1

    def test_other_room_and_unassigned_skipped(self):
        existing = [
            _booking(1, "102", datetime(2025, 1, 1), datetime(2025, 1, 3)),
            _booking(2, "Unassigned (Deluxe)", datetime(2025, 1, 1), datetime(2025, 1, 3)),
        ]
        assert find_conflict("101", datetime(2025, 1, 1), datetime(2025, 1, 3), existing) is None
        assert find_conflict("Unassigned (Deluxe)", datetime(2025, 1, 1), datetime(2025, 1, 3), existing) is None

    def test_editing_excludes_itself(self):
        existing = [_booking(7, "101", datetime(2025, 1, 1), datetime(2025, 1, 3), name="Asha")]
        draft = BookingDraft.from_record(existing[0])
        prepared = prepare_booking(draft, existing, editing_id=7)
        assert prepared.conflict is None

    def test_settled_past_booking_frees_room(self):
        existing = [_booking(1, "101", datetime(2025, 1, 1), datetime(2025, 1, 3), due=Decimal("0"))]
        now = datetime(2025, 1, 2)
        # sin saldo pero todavía no salió: sigue bloqueando
        assert find_conflict("101", datetime(2025, 1, 2), datetime(2025, 1, 4), existing, now=now) is not None
        now = datetime(2025, 1, 5)
        assert find_conflict("101", datetime(2025, 1, 2), datetime(2025, 1, 4), existing, now=now) is None

    def test_unparsable_dates_ignored(self):
        existing = [{"id": 1, "room": "101", "name": "X", "check_in": "??", "check_out": None, "due": 0}]
        assert find_conflict("101", datetime(2025, 1, 1), datetime(2025, 1, 2), existing) is None


class TestCheckoutNow:

    def test_recomputes_days_and_due(self):
        booking = _booking(3, "101", datetime(2025, 1, 1, 12), datetime(2025, 1, 6, 12), due=Decimal("5000"))
        prepared = checkout_now(booking, [booking], datetime(2025, 1, 3, 9))
        assert prepared.check_out == datetime(2025, 1, 3, 9)
        assert prepared.days == 2
        assert prepared.total == Decimal("2000.00")
        assert prepared.conflict is None

    def test_before_check_in_rejected(self):
        booking = _booking(3, "101", datetime(2025, 1, 1, 12), datetime(2025, 1, 6, 12))
        with pytest.raises(BookingValidationError):
            checkout_now(booking, [booking], datetime(2025, 1, 1, 11))


def test_guest_profile():
    booking = _booking(1, "101", datetime(2025, 1, 1), datetime(2025, 1, 2), name="Asha")
    booking.mobile = "9876543210"
    profile = guest_profile(booking)
    assert profile["name"] == "Asha"
    assert profile["mobile"] == "9876543210"
    assert profile["document_path"] == "No File"
