"""Services that turn WordPress records into a static-site export archive."""

from __future__ import annotations

from pathlib import Path


class ExportError(RuntimeError):
    """Raised when the export run cannot continue."""

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ExportDirectoryError(ExportError):
    """Raised when the working tree or a post directory cannot be created."""


class DocumentSerializationError(ExportError):
    """Raised when front-matter cannot be encoded as JSON."""


class ArchiveError(ExportError):
    """Raised when the destination archive cannot be created or written."""


__all__ = [
    "ArchiveError",
    "DocumentSerializationError",
    "ExportDirectoryError",
    "ExportError",
]
