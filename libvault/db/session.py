from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from libvault.core.config import get_settings

_SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL;",
    "PRAGMA synchronous=NORMAL;",
    # Shares and tokens rely on ON DELETE CASCADE.
    "PRAGMA foreign_keys=ON;",
)


class _DatabaseState:
    """Engine and session factory built lazily from the current settings."""

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.session_factory: sessionmaker[Session] | None = None

    def clear(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.session_factory = None


_state = _DatabaseState()


def _apply_sqlite_pragmas(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    try:
        for pragma in _SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def _build_engine(database_url: str) -> Engine:
    is_sqlite = database_url.startswith("sqlite")
    engine = create_engine(
        database_url,
        pool_pre_ping=True,
        # Request handlers run on the threadpool, not the thread that opened the connection.
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if is_sqlite:
        event.listen(engine, "connect", _apply_sqlite_pragmas)
    return engine


def get_engine() -> Engine:
    if _state.engine is None:
        _state.engine = _build_engine(get_settings().effective_database_url)
    return _state.engine


def get_session_factory() -> sessionmaker[Session]:
    if _state.session_factory is None:
        _state.session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _state.session_factory


@contextmanager
def session_scope() -> Iterator[Session]:
    """A short-lived session that is always closed, for one-off queries."""
    with get_session_factory()() as session:
        yield session


def reset_session_state() -> None:
    """Drop the engine so the next call picks up changed settings."""
    _state.clear()
