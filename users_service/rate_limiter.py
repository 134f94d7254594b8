# users_service/rate_limiter.py
from fastapi import HTTPException, Request, status

from common.rate_limit import SlidingWindowLimiter
from common.settings import get_settings

# signup/login attempts per client IP and path per minute
auth_attempts = SlidingWindowLimiter(max_requests=10, window_seconds=60)


def ip_rate_limiter(request: Request):
    """
    Rate limit the unauthenticated auth endpoints by client IP + path.
    """
    if get_settings().testing:
        return
    client_ip = request.client.host if request.client else "unknown"
    if not auth_attempts.hit((client_ip, request.url.path)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests from this IP, please slow down",
        )
