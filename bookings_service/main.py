import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from common.cache import delete_key, get_cached_json, set_cached_json
from common.logging_config import configure_logging

from . import models, schemas
from .auth import get_current_user_claims
from .conflicts import InvalidBookingRequest, bookings_on_date, has_conflict
from .database import Base, engine, get_db
from .rate_limiter import booking_rate_limiter

configure_logging()
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Bookings Service", version="1.0.0")
router_v1 = APIRouter(prefix="/api/v1")

SERVICE_NAME = "bookings"
CACHE_TTL_SECONDS = 60


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "service": SERVICE_NAME,
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "service": SERVICE_NAME,
            "path": request.url.path,
            "method": request.method,
            "status_code": 500,
            "detail": "Internal server error",
        },
    )


@app.get("/")
def root():
    """
    Health-check endpoint for the Bookings service.

    Returns
    -------
    dict
        A small JSON payload indicating that the service is running.
    """
    return {"service": SERVICE_NAME, "status": "running"}


def user_cache_key(user_id: int) -> str:
    return f"bookings:user:{user_id}"


def day_cache_key(booking_date: date) -> str:
    return f"bookings:day:{booking_date.isoformat()}"


def invalidate_caches(user_id: int, booking_date: date) -> None:
    delete_key(user_cache_key(user_id))
    delete_key(day_cache_key(booking_date))


# ---------- Check availability (dry run of the conflict check) ----------


@router_v1.get("/bookings/availability", response_model=schemas.Availability)
def check_availability(
    booking_date: date,
    booking_type: models.BookingType,
    booking_slot: Optional[models.BookingSlot] = None,
    booking_time: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Dict = Depends(get_current_user_claims),
):
    """
    Tell whether a booking with the given shape could be created.

    Parameters
    ----------
    booking_date : date
        Date to check.
    booking_type : BookingType
        Granularity of the would-be booking.
    booking_slot : BookingSlot, optional
        Required for Half Day.
    booking_time : str, optional
        ``HH:MM``, required for Custom.

    Returns
    -------
    Availability
        The date and whether it is free for that shape.

    Raises
    ------
    HTTPException
        400 if the slot or time required by the type is missing or malformed.
    """
    try:
        busy = has_conflict(db, booking_date, booking_type, booking_slot, booking_time)
    except InvalidBookingRequest as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"booking_date": booking_date, "available": not busy}


# ---------- Day overview ----------


@router_v1.get("/bookings/day/{booking_date}", response_model=schemas.DayOverview)
def get_day_overview(
    booking_date: date,
    db: Session = Depends(get_db),
    _: Dict = Depends(get_current_user_claims),
):
    """
    List what is already occupied on a date, across all users.

    Customer details are not exposed; only type, slot and time.
    """
    cache_key = day_cache_key(booking_date)
    cached = get_cached_json(cache_key)
    if cached is not None:
        return cached

    bookings = bookings_on_date(db, booking_date)
    data = schemas.DayOverview(
        booking_date=booking_date,
        bookings=[schemas.OccupiedSlot.model_validate(b) for b in bookings],
    ).model_dump(mode="json")
    set_cached_json(cache_key, data, ttl_seconds=CACHE_TTL_SECONDS)
    return data


# ---------- Create booking ----------


@router_v1.post(
    "/bookings",
    response_model=schemas.BookingRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_rate_limiter)],
)
def create_booking(
    booking_in: schemas.BookingCreate,
    db: Session = Depends(get_db),
    claims: Dict = Depends(get_current_user_claims),
):
    """
    Create a new booking for the authenticated user.

    Behavior
    --------
    - The request schema has already enforced the slot/time rules per type.
    - Rejects the booking if it conflicts with any booking on the same date,
      whoever owns it.
    - The check and the insert are two separate steps; two concurrent
      requests for the same slot can both pass the check.

    Parameters
    ----------
    booking_in : BookingCreate
        Customer and slot information for the new booking.
    db : Session
        Database session.
    claims : Dict
        Decoded JWT claims (email, user_id).

    Returns
    -------
    BookingRead
        The newly created booking.

    Raises
    ------
    HTTPException
        400 if the slot is already booked.
    """
    logger.info(
        "Creating booking for user %s on %s (%s)",
        claims["user_id"],
        booking_in.booking_date,
        booking_in.booking_type.value,
    )

    if has_conflict(
        db,
        booking_in.booking_date,
        booking_in.booking_type,
        booking_in.booking_slot,
        booking_in.booking_time,
    ):
        logger.info("Booking rejected: %s is already taken", booking_in.booking_date)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This time slot is already booked",
        )

    booking = models.Booking(
        user_id=claims["user_id"],
        customer_name=booking_in.customer_name,
        customer_email=str(booking_in.customer_email),
        booking_date=booking_in.booking_date,
        booking_type=booking_in.booking_type,
        booking_slot=booking_in.booking_slot,
        booking_time=booking_in.booking_time,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    invalidate_caches(booking.user_id, booking.booking_date)
    logger.info("Booking %s created", booking.id)
    return booking


# ---------- My bookings (current user) ----------


@router_v1.get("/bookings/me", response_model=List[schemas.BookingRead])
def list_my_bookings(
    db: Session = Depends(get_db),
    claims: Dict = Depends(get_current_user_claims),
):
    """
    List bookings that belong to the authenticated user.

    Returns
    -------
    List[BookingRead]
        Bookings for the current user, newest date first.
    """
    user_id = claims["user_id"]
    cache_key = user_cache_key(user_id)
    cached = get_cached_json(cache_key)
    if cached is not None:
        return cached

    bookings = (
        db.query(models.Booking)
        .filter(models.Booking.user_id == user_id)
        .order_by(models.Booking.booking_date.desc(), models.Booking.id.desc())
        .all()
    )
    data = [schemas.BookingRead.model_validate(b).model_dump(mode="json") for b in bookings]
    set_cached_json(cache_key, data, ttl_seconds=CACHE_TTL_SECONDS)
    return data


# ---------- Delete booking ----------


@router_v1.delete(
    "/bookings/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(booking_rate_limiter)],
)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    claims: Dict = Depends(get_current_user_claims),
):
    """
    Delete one of the caller's bookings, freeing its slot.

    Raises
    ------
    HTTPException
        404 if the booking does not exist, 403 if it belongs to someone else.
    """
    booking = db.query(models.Booking).filter(models.Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )

    if booking.user_id != claims["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to delete this booking",
        )

    user_id, booking_date = booking.user_id, booking.booking_date
    db.delete(booking)
    db.commit()
    invalidate_caches(user_id, booking_date)
    logger.info("Booking %s deleted by user %s", booking_id, user_id)
    return


app.include_router(router_v1)
