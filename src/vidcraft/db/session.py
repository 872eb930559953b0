"""Engine and unit-of-work sessions.

Routes, jobs and the CLI all open a session with ``get_session_context()``;
each block is one transaction.
"""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from vidcraft.config import settings


def _engine_kwargs(url: str) -> dict[str, Any]:
    # SQLite (tests, local dev) has no pool sizing and is shared across threads
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

# Records are read after commit (responses, job results), so keep them loaded
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Commit when the block exits cleanly, roll back when it raises."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(create_tables: bool = False) -> None:
    """Verify connectivity, optionally creating tables (SQLite/dev only)."""
    if create_tables:
        from vidcraft.db.models import Base

        Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def check_database() -> bool:
    """Readiness probe: can a connection run a trivial query."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT 1")).scalar() == 1
