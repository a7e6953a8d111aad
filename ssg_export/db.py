"""Engine and session factory for the source WordPress database."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import DATABASE_URL


class Base(DeclarativeBase):
    """Declarative base for the WordPress tables."""


def _connect_args_for(url: URL) -> dict[str, object]:
    backend = url.get_backend_name()
    if backend == "sqlite":
        return {"check_same_thread": False}
    if backend in {"mysql", "mariadb"} and "charset" not in url.query:
        # WordPress stores emoji and other astral characters in utf8mb4 columns.
        return {"charset": "utf8mb4"}
    return {}


_database_url = make_url(DATABASE_URL)

engine = create_engine(
    _database_url,
    pool_pre_ping=True,
    connect_args=_connect_args_for(_database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def read_session() -> Iterator[Session]:
    """Yield a session that never commits; the source store is read-only."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
