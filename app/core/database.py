"""Database configuration and session management for SQLite.

This module configures the SQLite database engine used as the event record
store: WAL mode so feed reads are not blocked while attendance writes are in
flight, and foreign key enforcement so attendee rows cannot outlive their
event.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Readers proceed while a writer holds the
      database. Feed requests keep working while joins and leaves commit.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled here so that
      deleting an Event cascades to its Attendee rows.

    - **check_same_thread=False**: FastAPI runs sync dependencies in a thread
      pool, so a connection may be used from a thread other than the one
      that opened it.
"""

from sqlalchemy import event as sa_event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Build an engine with the SQLite pragmas attached."""
    connect_args = {"check_same_thread": False}
    db_engine = create_engine(database_url, connect_args=connect_args, echo=echo, **kwargs)
    sa_event.listen(db_engine, "connect", set_sqlite_pragma)
    return db_engine


engine = create_db_engine(settings.database_url, echo=settings.debug)


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
