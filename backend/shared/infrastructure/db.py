"""
Database configuration and session management.
Uses SQLAlchemy 2.0 patterns.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from shared.config.settings import DATABASE_URL, settings


# Create engine with connection pooling and timeouts
engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    pool_timeout=30,  # Wait max 30s for connection from pool
    pool_recycle=1800,  # Recycle connections after 30 minutes
    connect_args={"connect_timeout": 10},  # Connection establishment timeout
    echo=False,  # Set to True for SQL logging in development
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Usage:
        @app.post("/move")
        def move(db: Session = Depends(get_db)):
            ...

    The session is automatically closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Usage:
        with get_db_context() as db:
            move_table(db, payload)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    Run a unit of work as one transaction.

    Everything written inside the block is committed together when it exits
    normally. Any exception rolls the whole block back and is re-raised.

    Usage:
        with transaction(db):
            db.add(order)
            db.execute(update(Notification)...)
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
