"""Database engine and session factory. SQLite by default, any SQLAlchemy URL works."""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from medbill.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Engine for the given URL.

    SQLite gets one connection per checkout (NullPool) and enforced foreign
    keys, so invoice lines can never point at a missing medicine. Server
    databases get a small pre-pinged QueuePool.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("poolclass", NullPool)
        engine = create_engine(database_url, connect_args={"check_same_thread": False}, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        **kwargs,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
