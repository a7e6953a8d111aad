"""Shared FastAPI dependency helpers."""

from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy.orm import Session

from .db import read_session
from .services.exporter import ExportSettings


def get_db() -> Iterator[Session]:
    """Yield a read-only database session for request handlers."""

    with read_session() as session:
        yield session


def get_export_run_settings() -> ExportSettings:
    """Return settings for one export run, built fresh from configuration."""

    return ExportSettings.from_config()
