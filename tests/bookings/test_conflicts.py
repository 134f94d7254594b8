from datetime import date, time

import pytest

from bookings_service import models
from bookings_service.conflicts import (
    InvalidBookingRequest,
    bookings_on_date,
    has_conflict,
    slot_for_time,
)
from bookings_service.database import Base, SessionLocal, engine
from bookings_service.models import BookingSlot, BookingType

DAY = date(2030, 5, 14)
OTHER_DAY = date(2030, 5, 15)


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def add_booking(db, booking_type, slot=None, at=None, booking_date=DAY, user_id=1):
    booking = models.Booking(
        user_id=user_id,
        customer_name="Jane Doe",
        customer_email="jane@example.com",
        booking_date=booking_date,
        booking_type=booking_type,
        booking_slot=slot,
        booking_time=at,
    )
    db.add(booking)
    db.commit()
    return booking


# ---------- slot derivation ----------

@pytest.mark.parametrize(
    "at, expected",
    [
        (time(0, 0), BookingSlot.FIRST_HALF),
        (time(8, 0), BookingSlot.FIRST_HALF),
        (time(11, 59), BookingSlot.FIRST_HALF),
        (time(12, 0), BookingSlot.SECOND_HALF),
        (time(14, 0), BookingSlot.SECOND_HALF),
        (time(23, 59), BookingSlot.SECOND_HALF),
    ],
)
def test_slot_for_time_splits_on_noon(at, expected):
    assert slot_for_time(at) == expected


# ---------- empty date ----------

def test_empty_date_never_conflicts(db):
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is False
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.FIRST_HALF) is False
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.SECOND_HALF) is False
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="09:00") is False


def test_bookings_on_other_dates_are_ignored(db):
    add_booking(db, BookingType.FULL_DAY, booking_date=OTHER_DAY)
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is False
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="09:00") is False


# ---------- existing Full Day ----------

def test_full_day_blocks_everything(db):
    add_booking(db, BookingType.FULL_DAY)

    assert has_conflict(db, DAY, BookingType.FULL_DAY) is True
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.FIRST_HALF) is True
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.SECOND_HALF) is True
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="09:00") is True
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="18:45") is True


# ---------- existing Half Day ----------

def test_first_half_blocks_same_half_only(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.FIRST_HALF)

    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.FIRST_HALF) is True
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.SECOND_HALF) is False
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="08:00") is True
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="14:00") is False


def test_full_day_request_blocked_by_any_half_day(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.SECOND_HALF)
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is True


def test_custom_time_boundary_against_half_days(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.SECOND_HALF)

    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="11:59") is False
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="12:00") is True


# ---------- existing Custom ----------

def test_custom_blocks_exact_time_only(db):
    add_booking(db, BookingType.CUSTOM, at=time(10, 30))

    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="10:30") is True
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time=time(10, 30)) is True
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="10:31") is False
    assert has_conflict(db, DAY, BookingType.CUSTOM, booking_time="10:00") is False


def test_half_day_ignores_existing_custom_bookings(db):
    add_booking(db, BookingType.CUSTOM, at=time(10, 30))

    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.FIRST_HALF) is False
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.SECOND_HALF) is False


def test_full_day_request_blocked_by_custom(db):
    add_booking(db, BookingType.CUSTOM, at=time(16, 0))
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is True


def test_conflicts_span_all_users(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.FIRST_HALF, user_id=7)
    assert has_conflict(db, DAY, BookingType.HALF_DAY, BookingSlot.FIRST_HALF) is True


def test_deleting_a_booking_frees_its_slot(db):
    booking = add_booking(db, BookingType.FULL_DAY)
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is True

    db.delete(booking)
    db.commit()
    assert has_conflict(db, DAY, BookingType.FULL_DAY) is False


def test_string_discriminants_are_accepted(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.FIRST_HALF)
    assert has_conflict(db, DAY, "Half Day", "First Half") is True
    assert has_conflict(db, DAY, "Custom", booking_time="9:15") is True


def test_irrelevant_fields_are_ignored(db):
    add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.FIRST_HALF)
    # a Full Day candidate's stray slot/time must not narrow the check
    assert has_conflict(
        db, DAY, BookingType.FULL_DAY, BookingSlot.SECOND_HALF, "20:00"
    ) is True


# ---------- fail closed on malformed input ----------

def test_half_day_without_slot_is_rejected(db):
    with pytest.raises(InvalidBookingRequest):
        has_conflict(db, DAY, BookingType.HALF_DAY)


def test_custom_without_time_is_rejected(db):
    with pytest.raises(InvalidBookingRequest):
        has_conflict(db, DAY, BookingType.CUSTOM)


@pytest.mark.parametrize("bad_time", ["24:00", "12:60", "noon", "1230", ""])
def test_custom_with_malformed_time_is_rejected(db, bad_time):
    with pytest.raises(InvalidBookingRequest):
        has_conflict(db, DAY, BookingType.CUSTOM, booking_time=bad_time)


def test_unknown_type_or_slot_is_rejected(db):
    with pytest.raises(InvalidBookingRequest):
        has_conflict(db, DAY, "Weekly")
    with pytest.raises(InvalidBookingRequest):
        has_conflict(db, DAY, BookingType.HALF_DAY, "Third Half")


# ---------- storage lookup ----------

def test_bookings_on_date_returns_only_that_date(db):
    first = add_booking(db, BookingType.HALF_DAY, slot=BookingSlot.FIRST_HALF)
    second = add_booking(db, BookingType.CUSTOM, at=time(15, 0), user_id=2)
    add_booking(db, BookingType.FULL_DAY, booking_date=OTHER_DAY)

    found = bookings_on_date(db, DAY)
    assert [b.id for b in found] == [first.id, second.id]
