"""
Tests for BookingStore / RateStore sobre SQLite en memoria
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import datetime
from decimal import Decimal

from config import DEFAULT_RATES
from services.booking_store import BookingStore
from services.rate_store import RateStore, seed_default_rates
from utils.errors import StoreError


def _record(**overrides):
    record = {
        "room": "101",
        "name": "Asha Verma",
        "mobile": "9876543210",
        "check_in": datetime(2025, 3, 1, 12),
        "check_out": datetime(2025, 3, 3, 12),
        "days": 2,
        "rent": Decimal("3000"),
        "advance": Decimal("2000"),
        "total": Decimal("6000"),
        "due": Decimal("4000"),
        "commission": Decimal("0"),
        "ref_by": "Walk-in",
    }
    record.update(overrides)
    return record


class TestBookingStore:

    def test_insert_and_get(self, session):
        store = BookingStore(session)
        booking_id = store.insert(_record())
        booking = store.get(booking_id)
        assert booking.name == "Asha Verma"
        assert booking.document_path == "No File"
        assert booking.created_at is not None
        assert Decimal(booking.due) == Decimal("4000")

    def test_unknown_columns_ignored(self, session):
        store = BookingStore(session)
        booking_id = store.insert(_record(id=999, not_a_column="x"))
        assert booking_id != 999

    def test_update_keeps_created_at(self, session):
        store = BookingStore(session)
        booking_id = store.insert(_record())
        created = store.get(booking_id).created_at
        store.update(booking_id, _record(name="Asha V.", due=Decimal("0")))
        booking = store.get(booking_id)
        assert booking.name == "Asha V."
        assert booking.created_at == created

    def test_update_missing(self, session):
        with pytest.raises(StoreError):
            BookingStore(session).update(12345, _record())

    def test_delete(self, session):
        store = BookingStore(session)
        booking_id = store.insert(_record())
        store.delete(booking_id)
        assert store.get(booking_id) is None
        with pytest.raises(StoreError):
            store.delete(booking_id)

    def test_list_newest_first_and_search(self, session):
        store = BookingStore(session)
        first = store.insert(_record(name="Asha Verma"))
        second = store.insert(_record(name="Vikram Rao", room="202", mobile="9000000000"))
        assert [b.id for b in store.list_all()] == [second, first]
        assert [b.id for b in store.list_all(search="vikram")] == [second]
        assert [b.id for b in store.list_all(search="98765")] == [first]
        assert [b.id for b in store.list_all(search="202")] == [second]

    def test_find_by_field_returns_latest(self, session):
        store = BookingStore(session)
        store.insert(_record(email="old@example.com"))
        latest = store.insert(_record(email="new@example.com"))
        assert store.find_by_field("mobile", "9876543210").id == latest
        assert store.find_by_field("mobile", "0000") is None
        with pytest.raises(ValueError):
            store.find_by_field("rent", 1)

    def test_insert_many_is_all_or_nothing(self, session):
        store = BookingStore(session)
        with pytest.raises(StoreError):
            store.insert_many([_record(payment_ref="A"), _record(name=None, payment_ref="B")])
        assert store.list_all() == []
        assert len(store.insert_many([_record(payment_ref="A"), _record(payment_ref="B")])) == 2
        assert store.insert_many([]) == []


class TestRateStore:

    def test_default_rates_seeded(self, session):
        rates = RateStore(session)
        assert len(rates.list()) == len(DEFAULT_RATES)
        assert rates.rate_card()["201"].rate == 5000
        assert seed_default_rates(session) == 0

    def test_crud(self, session):
        rates = RateStore(session)
        rates.insert("301", "Penthouse", 9000)
        with pytest.raises(StoreError):
            rates.insert("301", "Penthouse", 9000)
        updated = rates.update("301", rate=9500)
        assert updated.rate == 9500
        assert updated.room_type == "Penthouse"
        rates.delete("301")
        assert rates.get("301") is None
