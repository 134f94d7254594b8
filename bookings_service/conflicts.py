import logging
from datetime import date, time
from typing import List, Optional, Union

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from . import models
from .models import BookingSlot, BookingType
from .schemas import parse_booking_time

logger = logging.getLogger(__name__)

NOON = 12


class InvalidBookingRequest(ValueError):
    """
    Raised when a conflict check is asked for a candidate whose
    discriminant fields are missing or malformed.
    """


def slot_for_time(booking_time: time) -> BookingSlot:
    """
    Map a Custom booking's time to the half of the day it falls in.

    The split is on the hour only: 11:59 is the first half and 12:00 the
    second, even though they are a minute apart.
    """
    if booking_time.hour < NOON:
        return BookingSlot.FIRST_HALF
    return BookingSlot.SECOND_HALF


def bookings_on_date(db: Session, booking_date: date) -> List[models.Booking]:
    """
    Return every booking stored for a date, across all users.
    """
    return (
        db.query(models.Booking)
        .filter(models.Booking.booking_date == booking_date)
        .order_by(models.Booking.created_at, models.Booking.id)
        .all()
    )


def _coerce_type(booking_type: Union[BookingType, str]) -> BookingType:
    try:
        return BookingType(booking_type)
    except ValueError:
        raise InvalidBookingRequest(f"Unknown booking type: {booking_type!r}")


def _coerce_slot(booking_slot: Union[BookingSlot, str, None]) -> BookingSlot:
    if booking_slot is None:
        raise InvalidBookingRequest("booking_slot is required for Half Day bookings")
    try:
        return BookingSlot(booking_slot)
    except ValueError:
        raise InvalidBookingRequest(f"Unknown booking slot: {booking_slot!r}")


def _coerce_time(booking_time: Union[time, str, None]) -> time:
    if booking_time is None:
        raise InvalidBookingRequest("booking_time is required for Custom bookings")
    try:
        return parse_booking_time(booking_time)
    except ValueError as exc:
        raise InvalidBookingRequest(str(exc))


def _conflict_clause(
    booking_type: BookingType,
    booking_slot: Optional[BookingSlot],
    booking_time: Optional[time],
):
    """
    Build the filter matching existing bookings that block the candidate.

    - Full Day is blocked by anything on the date.
    - Half Day is blocked by Full Day or the same half. Custom bookings are
      not consulted from this side.
    - Custom is blocked by Full Day, the half its time falls in, or a Custom
      booking at exactly the same time.
    """
    Booking = models.Booking
    full_day = Booking.booking_type == BookingType.FULL_DAY

    if booking_type == BookingType.FULL_DAY:
        return Booking.booking_type.in_(list(BookingType))

    if booking_type == BookingType.HALF_DAY:
        return or_(
            full_day,
            and_(
                Booking.booking_type == BookingType.HALF_DAY,
                Booking.booking_slot == booking_slot,
            ),
        )

    return or_(
        full_day,
        and_(
            Booking.booking_type == BookingType.HALF_DAY,
            Booking.booking_slot == slot_for_time(booking_time),
        ),
        and_(
            Booking.booking_type == BookingType.CUSTOM,
            Booking.booking_time == booking_time,
        ),
    )


def has_conflict(
    db: Session,
    booking_date: date,
    booking_type: Union[BookingType, str],
    booking_slot: Union[BookingSlot, str, None] = None,
    booking_time: Union[time, str, None] = None,
) -> bool:
    """
    Decide whether a candidate booking clashes with any stored booking
    on the same date.

    Parameters
    ----------
    db : Session
        Database session.
    booking_date : date
        Date of the candidate booking.
    booking_type : BookingType
        Granularity of the candidate.
    booking_slot : BookingSlot, optional
        Required for Half Day candidates, ignored otherwise.
    booking_time : time or str, optional
        Required for Custom candidates (``HH:MM``), ignored otherwise.

    Returns
    -------
    bool
        True if at least one existing booking blocks the candidate.

    Raises
    ------
    InvalidBookingRequest
        If the type is unknown or a required slot/time is missing or malformed.
    """
    booking_type = _coerce_type(booking_type)
    slot = None
    at = None
    if booking_type == BookingType.HALF_DAY:
        slot = _coerce_slot(booking_slot)
    elif booking_type == BookingType.CUSTOM:
        at = _coerce_time(booking_time)

    q = (
        db.query(models.Booking)
        .filter(models.Booking.booking_date == booking_date)
        .filter(_conflict_clause(booking_type, slot, at))
    )
    conflict = db.query(q.exists()).scalar()

    logger.debug(
        "Conflict check date=%s type=%s slot=%s time=%s -> %s",
        booking_date,
        booking_type.value,
        slot.value if slot else None,
        at.strftime("%H:%M") if at else None,
        "conflict" if conflict else "free",
    )
    return bool(conflict)
