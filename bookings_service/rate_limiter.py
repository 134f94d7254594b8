# bookings_service/rate_limiter.py
from typing import Any, Dict

from fastapi import Depends, HTTPException, status

from common.rate_limit import SlidingWindowLimiter
from common.settings import get_settings

from .auth import get_current_user_claims

# create + delete calls per user per minute
booking_writes = SlidingWindowLimiter(max_requests=20, window_seconds=60)


def booking_rate_limiter(claims: Dict[str, Any] = Depends(get_current_user_claims)):
    """
    Rate limit booking writes (create/delete) per authenticated user.
    """
    if get_settings().testing:
        return
    if not booking_writes.hit(claims["user_id"]):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many booking operations in a short time",
        )
