"""Two-part document format: JSON front-matter, a ``---`` line, then the body."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from . import DocumentSerializationError, ExportDirectoryError, ExportError

logger = logging.getLogger(__name__)


SEPARATOR = "\n---\n"


def dump_front_matter(meta: Mapping[str, Any]) -> str:
    """Serialize ``meta`` as pretty-printed JSON.

    Non-ASCII text and forward slashes are written as-is and integral floats
    keep their fraction. NaN and infinity are rejected.
    """

    try:
        return json.dumps(meta, indent=4, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise DocumentSerializationError(f"Failed to encode front-matter: {exc}") from exc


def render_document(meta: Mapping[str, Any], body: str | None) -> str:
    return f"{dump_front_matter(meta)}{SEPARATOR}{body or ''}"


def split_document(text: str) -> Tuple[Dict[str, Any], str]:
    """Parse a rendered document back into its front-matter and body."""

    header, separator, body = text.partition(SEPARATOR)
    if not separator:
        raise ValueError("document has no front-matter separator")
    meta = json.loads(header)
    if not isinstance(meta, dict):
        raise ValueError("front-matter must be a JSON object")
    return meta, body


def ensure_directory(directory: Path) -> Path:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportDirectoryError(
            f"Failed to create post output dir: {directory}", path=directory
        ) from exc
    return directory


def write_document(
    meta: Mapping[str, Any],
    body: str | None,
    directory: Path,
    filename: str,
) -> Path:
    """Render and write one document, creating ``directory`` when missing."""

    output = render_document(meta, body)
    ensure_directory(directory)
    path = directory / filename
    try:
        path.write_text(output, encoding="utf-8", newline="")
    except OSError as exc:
        raise ExportError(f"Failed to write document: {path}", path=path) from exc
    logger.debug("event=export.document_written path=%s bytes=%s", path, len(output))
    return path
