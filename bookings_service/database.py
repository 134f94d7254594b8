from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from common.settings import get_settings

DATABASE_URL = get_settings().database_url

engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    # TestClient runs handlers in worker threads
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if ":memory:" in DATABASE_URL or DATABASE_URL in ("sqlite://", "sqlite+pysqlite://"):
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Yield a SQLAlchemy database session for the Bookings service.

    This function is used as a FastAPI dependency, creating a scoped
    session per HTTP request and ensuring it is closed afterwards.

    Yields
    ------
    Session
        Active SQLAlchemy session bound to the bookings database engine.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
