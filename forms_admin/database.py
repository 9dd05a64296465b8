"""Database engine, session factory and declarative base"""
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from forms_admin.config import Settings, get_settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """Create the engine for ``DATABASE_URL``.

    The driver is picked here, once, from the URL scheme; repositories only ever
    see a ``Session`` and never branch on the backend.
    """
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_recycle=settings.DATABASE_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(get_settings())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
