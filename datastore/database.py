from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from settings import get_settings


class Base(DeclarativeBase):
    pass


def _ensure_sqlite_directory(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if not database or database == ":memory:":
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_database_engine(url: str) -> Engine:
    connect_args = {}
    if make_url(url).get_backend_name() == "sqlite":
        # TestClient and uvicorn's threadpool hand sessions across threads.
        connect_args["check_same_thread"] = False
        _ensure_sqlite_directory(url)
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


@lru_cache
def build_default_engine() -> Engine:
    return create_database_engine(get_settings().database_url)


@lru_cache
def build_default_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=build_default_engine(), expire_on_commit=False, autoflush=False)


def init_db(engine: Engine) -> None:
    """Create every mapped table that does not exist yet."""
    # Registers the mapped classes on Base.metadata.
    import models.tables  # noqa: F401

    Base.metadata.create_all(engine)
