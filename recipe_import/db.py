"""Engine and session handling for the taxonomy database.

The engine is built lazily from `settings.database_url`. Call `init_engine`
again to point the app at another database.
"""

from __future__ import annotations

from typing import Iterator, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .settings import settings


class Base(DeclarativeBase):
    pass


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _connect_args(url: str) -> dict:
    # Resolver lookups run in worker threads
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


def init_engine(database_url: str | None = None, create_tables: bool = True) -> Engine:
    global _engine, _session_factory
    url = database_url or settings.database_url
    _engine = create_engine(url, pool_pre_ping=True, connect_args=_connect_args(url))
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    if create_tables:
        from . import models  # noqa: F401  registers tables
        Base.metadata.create_all(bind=_engine)
    return _engine


def session_factory() -> sessionmaker:
    if _session_factory is None:
        init_engine()
    return _session_factory


def table_names() -> list[str]:
    """Tables present in the configured database."""
    if _engine is None:
        init_engine()
    return sorted(inspect(_engine).get_table_names())


def get_db() -> Iterator[Session]:
    with session_factory()() as db:
        yield db
