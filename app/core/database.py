# ================================
# DATABASE CONNECTION (core/database.py)
# ================================

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from contextlib import contextmanager
from typing import Generator

from app.config import settings

def _engine_options(url: str) -> dict:
    """Pool-Optionen; SQLite (Tests, lokale Entwicklung) bekommt keine Pool-Größen"""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,  # Verify connections before use
    }

# Database Engine
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite erzwingt ON DELETE CASCADE / SET NULL nur mit PRAGMA foreign_keys"""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db() -> Generator[Session, None, None]:
    """Request-scoped Session für FastAPI Dependencies"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def get_db_session(session_factory=SessionLocal):
    """Database session mit automatischem cleanup"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        raise e
    finally:
        db.close()
