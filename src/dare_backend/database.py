import logging
import threading
from typing import Generator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, Session

from dare_backend.settings import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None
_lock = threading.Lock()


def _database_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 5,
        "pool_timeout": max(1, settings.RESOLVE_TIMEOUT_MS // 1000),
        "pool_recycle": 300,
    }


def _apply_statement_timeout(engine: Engine):
    """Bound every statement by the resolution timeout on PostgreSQL"""

    @event.listens_for(engine, "connect")
    def set_statement_timeout(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute(f"SET statement_timeout = {int(settings.RESOLVE_TIMEOUT_MS)}")
        finally:
            cursor.close()


def get_engine() -> Engine:
    global _engine, _SessionLocal

    if _engine is None:
        with _lock:
            if _engine is None:
                url = settings.database_url
                engine = create_engine(url, **_database_options(url))
                if engine.dialect.name == "postgresql":
                    _apply_statement_timeout(engine)
                _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
                _engine = engine

    return _engine


def get_session_factory() -> sessionmaker:
    get_engine()
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:

    db = get_session_factory()()

    try:
        yield db
    except OperationalError:
        logger.error("Database connection failed")
        db.rollback()
        raise
    finally:
        db.close()
