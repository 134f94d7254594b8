from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import Column, Date, DateTime, Enum, Integer, String, Time

from .database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingType(str, PyEnum):
    """
    Granularity of a booking.

    Values
    ------
    Full Day
        Claims the whole date.
    Half Day
        Claims one of the two halves of the date (see BookingSlot).
    Custom
        Claims a single time-of-day point.
    """
    FULL_DAY = "Full Day"
    HALF_DAY = "Half Day"
    CUSTOM = "Custom"


class BookingSlot(str, PyEnum):
    """
    The two halves a Half Day booking may occupy.
    """
    FIRST_HALF = "First Half"
    SECOND_HALF = "Second Half"


class Booking(Base):
    """
    SQLAlchemy model representing a reservation.

    Attributes
    ----------
    id : int
        Primary key.
    user_id : int
        Account that created the booking. Used for listing only; conflicts
        are checked across all users.
    customer_name : str
        Display name of the customer.
    customer_email : str
        Contact email of the customer.
    booking_date : date
        Reserved calendar date, the partition key for conflict checks.
    booking_type : BookingType
        Granularity of the reservation.
    booking_slot : BookingSlot, optional
        Half of the day, set only for Half Day bookings.
    booking_time : time, optional
        Time of day, set only for Custom bookings.
    created_at : datetime
        Timestamp when the booking was created.
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True, nullable=False)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    booking_date = Column(Date, index=True, nullable=False)
    booking_type = Column(Enum(BookingType), nullable=False)
    booking_slot = Column(Enum(BookingSlot), nullable=True)
    booking_time = Column(Time, nullable=True)
    created_at = Column(DateTime, default=_utc_now)
