import re
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from .models import BookingSlot, BookingType

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_booking_time(value):
    """
    Parse a 24-hour ``H:MM`` / ``HH:MM`` string into a ``time``.

    ``time`` instances and None pass through untouched.

    Raises
    ------
    ValueError
        If the string does not match the 24-hour pattern.
    """
    if value is None or isinstance(value, time):
        return value
    match = TIME_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError("booking_time must be a 24-hour HH:MM value")
    return time(int(match.group(1)), int(match.group(2)))


class BookingCreate(BaseModel):
    """
    Schema for creating a new booking.

    The discriminant fields must agree with ``booking_type``:

    - Half Day requires ``booking_slot``.
    - Custom requires ``booking_time``.
    - Fields that do not apply to the type are dropped, so a Full Day
      booking never stores a slot or a time.
    """
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    booking_date: date
    booking_type: BookingType
    booking_slot: Optional[BookingSlot] = None
    booking_time: Optional[time] = None

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("customer_name must not be empty")
        return value

    @field_validator("booking_time", mode="before")
    @classmethod
    def parse_time(cls, value):
        return parse_booking_time(value)

    @model_validator(mode="after")
    def check_discriminants(self):
        if self.booking_type == BookingType.HALF_DAY:
            if self.booking_slot is None:
                raise ValueError("booking_slot is required for Half Day bookings")
            self.booking_time = None
        elif self.booking_type == BookingType.CUSTOM:
            if self.booking_time is None:
                raise ValueError("booking_time is required for Custom bookings")
            self.booking_slot = None
        else:
            self.booking_slot = None
            self.booking_time = None
        return self


class BookingRead(BaseModel):
    """
    Schema returned when reading booking information.
    """
    id: int
    user_id: int
    customer_name: str
    customer_email: str
    booking_date: date
    booking_type: BookingType
    booking_slot: Optional[BookingSlot] = None
    booking_time: Optional[time] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OccupiedSlot(BaseModel):
    """
    Public view of an existing booking on a date, without customer data.
    """
    booking_type: BookingType
    booking_slot: Optional[BookingSlot] = None
    booking_time: Optional[time] = None

    model_config = ConfigDict(from_attributes=True)


class DayOverview(BaseModel):
    booking_date: date
    bookings: List[OccupiedSlot]


class Availability(BaseModel):
    booking_date: date
    available: bool
