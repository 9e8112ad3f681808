"""Database configuration and session management for SQLite.

Check-in records and the safety notification outbox both live in a single
SQLite file. Two connection-level pragmas are applied:

    - **WAL (Write-Ahead Logging)**: the monitor sweep writes overdue marks
      and outbox rows while API requests read check-in state. WAL lets
      those readers proceed during writes.

    - **check_same_thread=False**: the manager saves from the event loop
      while FastAPI may run sync dependencies in a worker thread.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Import so the table models register with SQLModel.metadata
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
