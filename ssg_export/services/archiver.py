"""Incremental zip packing of the export tree."""

from __future__ import annotations

import logging
import os
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from . import ArchiveError

logger = logging.getLogger(__name__)


DEFAULT_FLUSH_EVERY = 250


@dataclass(frozen=True)
class ArchiveSummary:
    path: Path
    files: int
    flushes: int


class ArchiveWriter:
    """Zip writer that closes and reopens its handle every ``flush_every`` files.

    Reopening forces the central directory and buffered data to disk, which
    keeps memory flat on sites with tens of thousands of documents.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        flush_every: int = DEFAULT_FLUSH_EVERY,
        on_flush: Optional[Callable[[int], None]] = None,
    ) -> None:
        if flush_every < 1:
            raise ValueError("flush_every must be positive")
        self.path = Path(path)
        self.flush_every = flush_every
        self.files = 0
        self.flushes = 0
        self._on_flush = on_flush
        self._zip: zipfile.ZipFile | None = self._open("w")

    def _open(self, mode: str) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, mode, compression=zipfile.ZIP_DEFLATED)
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveError(f"Failed to create '{self.path}' err: {exc}", path=self.path) from exc

    def add(self, source: str | Path, arcname: str) -> None:
        if self._zip is None:
            raise ArchiveError(f"Archive '{self.path}' is closed", path=self.path)
        try:
            self._zip.write(source, arcname)
        except OSError as exc:
            raise ArchiveError(f"Failed to add '{source}' to '{self.path}': {exc}", path=source) from exc
        self.files += 1
        if self.files % self.flush_every == 0:
            self.flush()

    def flush(self) -> None:
        if self._zip is None:
            return
        self._zip.close()
        self._zip = self._open("a")
        self.flushes += 1
        logger.debug("event=archive.flush path=%s files=%s", self.path, self.files)
        if self._on_flush is not None:
            self._on_flush(self.files)

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _add_directory(directory: Path, root: Path, writer: ArchiveWriter) -> None:
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                _add_directory(Path(entry.path), root, writer)
                continue
            if entry.is_symlink() and entry.is_dir():
                logger.debug("event=archive.skip_symlink_dir path=%s", entry.path)
                continue
            if not entry.is_file():
                continue
            arcname = Path(entry.path).relative_to(root).as_posix()
            writer.add(entry.path, arcname)


def zip_tree(
    source_dir: str | Path,
    archive_path: str | Path,
    *,
    flush_every: int = DEFAULT_FLUSH_EVERY,
    on_flush: Optional[Callable[[int], None]] = None,
) -> ArchiveSummary:
    """Pack every file under ``source_dir`` into ``archive_path``.

    Entries are stored relative to ``source_dir``; directories only appear
    through the files they contain.
    """

    root = Path(source_dir)
    with ArchiveWriter(archive_path, flush_every=flush_every, on_flush=on_flush) as writer:
        _add_directory(root, root, writer)
    logger.info(
        "event=archive.done path=%s files=%s flushes=%s", writer.path, writer.files, writer.flushes
    )
    return ArchiveSummary(path=writer.path, files=writer.files, flushes=writer.flushes)
