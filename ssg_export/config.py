"""Application configuration helpers."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache

from dotenv import find_dotenv, load_dotenv


load_dotenv(find_dotenv(), override=True)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ExportConfig:
    """Container for export run configuration values."""

    tmp_root: str
    include_comments: bool
    flush_every: int


@lru_cache
def get_database_url() -> str:
    """Return the configured database URL or fail fast when missing."""

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set")
    return database_url


@lru_cache
def get_table_prefix() -> str:
    """Return the table prefix used by the source WordPress schema."""

    return os.getenv("WP_TABLE_PREFIX") or "wp_"


@lru_cache
def get_site_base_url() -> str:
    """Return the fallback base URL when the options table has none."""

    base_url = os.getenv("SITE_BASE_URL") or "http://localhost"
    return base_url.rstrip("/")


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise RuntimeError(f"{name} must be a boolean flag")


@lru_cache
def get_export_settings() -> ExportConfig:
    """Return export configuration loaded from the environment."""

    flush_raw = os.getenv("EXPORT_FLUSH_EVERY")
    try:
        flush_every = int(flush_raw) if flush_raw else 250
    except ValueError as exc:  # pragma: no cover - guardrail for invalid configuration
        raise RuntimeError("EXPORT_FLUSH_EVERY must be numeric") from exc
    if flush_every < 1:
        raise RuntimeError("EXPORT_FLUSH_EVERY must be positive")

    tmp_root = os.getenv("EXPORT_TMP_DIR") or tempfile.gettempdir()
    logging.getLogger(__name__).debug("export tmp root resolved to %s", tmp_root)
    return ExportConfig(
        tmp_root=tmp_root,
        include_comments=_parse_bool(
            "EXPORT_INCLUDE_COMMENTS", os.getenv("EXPORT_INCLUDE_COMMENTS"), True
        ),
        flush_every=flush_every,
    )


DATABASE_URL = get_database_url()
