"""Database session management with connection pooling"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from mining_ledger.config import settings


def _engine_kwargs(database_url: str) -> dict:
    """Pool options for PostgreSQL; SQLite (local runs and tests) shares one connection"""
    if database_url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
