from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    SQLAlchemy model for application users.

    Attributes
    ----------
    id : int
        Primary key.
    first_name : str
        Given name.
    last_name : str
        Family name.
    email : str
        Unique email address, also the login identifier.
    hashed_password : str
        Bcrypt-hashed password.
    is_verified : bool
        Whether the email address has been confirmed.
    verification_token : str, optional
        One-time token sent by email; cleared once used.
    created_at : datetime
        Timestamp of user creation.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    verification_token = Column(String, unique=True, index=True, nullable=True)
    created_at = Column(DateTime, default=_utc_now)
