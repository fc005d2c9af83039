from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from haro_pipeline.config import get_settings

settings = get_settings()

# Create engine with connection pooling
engine = create_engine(
    settings.database_url,
    echo=False,  # Set True for SQL debugging
    pool_pre_ping=True  # Verify connections before use
)

# Session factory for job-scoped sessions
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def get_db():
    """
    Yield a database session that is closed afterwards.

    Usage:
        for db in get_db():
            process_haro_email(db, ...)

    Yields:
        Session: Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that do not exist yet."""
    import haro_pipeline.models  # noqa: F401  registers the tables

    Base.metadata.create_all(bind=engine)
