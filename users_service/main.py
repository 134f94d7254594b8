import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from common.logging_config import configure_logging
from common.settings import get_settings

from . import models, schemas
from .auth import (
    authenticate_user,
    create_access_token,
    generate_verification_token,
    get_current_user,
    get_password_hash,
    get_user_by_email,
)
from .database import Base, engine, get_db
from .mailer import EmailDeliveryError, send_verification_email
from .rate_limiter import ip_rate_limiter

configure_logging()
logger = logging.getLogger(__name__)

# Create tables on startup
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Users Service", version="1.0.0")
SERVICE_NAME = "users"
router_v1 = APIRouter(prefix="/api/v1")


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
    return {"service": SERVICE_NAME, "status": "running"}


# ---------- Signup ----------

@router_v1.post(
    "/auth/signup",
    response_model=schemas.SignupResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(ip_rate_limiter)],
)
def signup(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    """
    Register a new account and send its verification email.

    Behavior:
    - Email must be unique.
    - A one-time verification token is stored and mailed to the user.
    - A failed email delivery is logged; the account is still created.
    - With AUTO_VERIFY_EMAILS enabled the account is verified immediately.

    Parameters
    ----------
    user_in : UserCreate
        Incoming signup data.
    db : Session
        Database session.

    Returns
    -------
    SignupResponse
        Confirmation message and the new user's id.

    Raises
    ------
    HTTPException
        If the email is already registered.
    """
    email = str(user_in.email)
    if get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    token = generate_verification_token()
    user = models.User(
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        email=email,
        hashed_password=get_password_hash(user_in.password),
        is_verified=False,
        verification_token=token,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent signup claimed the email between the check and the insert
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    db.refresh(user)
    logger.info("User %s created", user.id)

    if get_settings().auto_verify_emails:
        user.is_verified = True
        user.verification_token = None
        db.add(user)
        db.commit()
        logger.info("User %s auto-verified", user.id)
        return {
            "message": "User created successfully. Your account is verified.",
            "user_id": user.id,
        }

    try:
        send_verification_email(email, token)
    except EmailDeliveryError as exc:
        logger.warning("Could not send verification email to %s: %s", email, exc)

    return {
        "message": "User created successfully. Please check your email to verify your account.",
        "user_id": user.id,
    }


# ---------- Email verification ----------

@router_v1.get("/auth/verify-email", response_model=schemas.MessageResponse)
def verify_email(token: str, db: Session = Depends(get_db)):
    """
    Mark the account owning ``token`` as verified and consume the token.

    Raises
    ------
    HTTPException
        If no account holds this token.
    """
    user = (
        db.query(models.User)
        .filter(models.User.verification_token == token)
        .first()
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification token",
        )

    user.is_verified = True
    user.verification_token = None
    db.add(user)
    db.commit()
    logger.info("User %s verified their email", user.id)
    return {"message": "Email verified successfully"}


# ---------- Login (token) ----------

@router_v1.post("/auth/login", response_model=schemas.Token, dependencies=[Depends(ip_rate_limiter)])
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate a user and return a JWT access token.

    Parameters
    ----------
    credentials : UserLogin
        Email and password.
    db : Session
        Database session.

    Returns
    -------
    Token
        Access token with the user's email and id embedded, plus the profile.

    Raises
    ------
    HTTPException
        401 if authentication fails, 403 if the email is not verified yet.
    """
    user = authenticate_user(db, str(credentials.email), credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    if not user.is_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Email address has not been verified",
        )

    access_token = create_access_token(data={"sub": user.email, "user_id": user.id})
    logger.info("Login successful for user %s", user.id)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": schemas.UserRead.model_validate(user),
    }


# ---------- Current user profile ----------

@router_v1.get("/auth/me", response_model=schemas.UserRead)
def get_my_profile(current_user: models.User = Depends(get_current_user)):
    """
    Retrieve the authenticated user's own profile.
    """
    return current_user


app.include_router(router_v1)
