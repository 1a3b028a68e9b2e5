"""
Engine, sessions and the declarative base for the students table.

DATABASE_URL picks the backend: a PostgreSQL URL gets a pooled engine,
anything sqlite gets a file (or in-memory) database with WAL enabled.
Routes receive their session through the `get_db` dependency.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.config import DATABASE_URL


def engine_options(url: str) -> dict:
    """Keyword arguments for create_engine, chosen by URL scheme."""
    options = {"echo": False}
    if url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    elif url.startswith("sqlite"):
        # Sync handlers share connections across threadpool workers
        options["connect_args"] = {"check_same_thread": False}
    return options


def _sqlite_on_connect(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))
if DATABASE_URL.startswith("sqlite"):
    event.listen(engine, "connect", _sqlite_on_connect)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    """Yield a session for one request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create missing tables in place. PostgreSQL deployments run Alembic instead."""
    Base.metadata.create_all(bind=engine)
