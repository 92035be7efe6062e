"""Database setup — SQLite with WAL mode via SQLModel/SQLAlchemy.

- SQLModel table classes double as Pydantic models for the stores
- SQLite WAL mode plus busy timeout for concurrent readers
- Foreign keys switched on per connection so project deletes cascade
- Alembic handles migrations (see backend/alembic)
"""

from __future__ import annotations

import os

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from projecthub.config import settings

# SQLite INTEGER is a signed 64-bit value
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def get_database_url() -> str:
    """Get database URL, ensuring the data directory exists."""
    url = settings.database_url
    if url.startswith("sqlite:///"):
        db_path = url.replace("sqlite:///", "")
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
    return url


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_connection, connection_record):
    """Enable WAL mode and foreign key enforcement for SQLite connections."""
    if type(dbapi_connection).__module__ != "sqlite3":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    cursor.execute("PRAGMA busy_timeout=5000")    # 5s wait on lock
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def fits_integer_key(value: int) -> bool:
    """True when value can be bound to an INTEGER key column without overflow."""
    return INTEGER_MIN <= value <= INTEGER_MAX


engine = create_engine(
    get_database_url(),
    echo=False,
    connect_args={"check_same_thread": False},
)


def create_db_and_tables(bind: Engine | None = None) -> None:
    """Create all tables defined by SQLModel metadata."""
    # Table classes must be imported so the metadata knows about them
    from projecthub.models.project import Project, ProjectMember  # noqa: F401
    from projecthub.models.task import Task  # noqa: F401
    from projecthub.models.user import User  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Dependency for FastAPI endpoints."""
    with Session(engine) as session:
        yield session
