"""Run a full export from the command line and write the zip to stdout.

Usage::

    $ python -m ssg_export.cli [TMP_DIR] > ssg-export.zip

``TMP_DIR`` replaces the configured working directory when it names an
existing directory; the literal ``null`` is ignored.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import BinaryIO, List

from .db import read_session
from .services import ExportError
from .services.exporter import ExportSettings, SSGExporter

logger = logging.getLogger(__name__)


def resolve_tmp_root(value: str | None) -> Path | None:
    if not value or value.lower() == "null":
        return None
    path = Path(value)
    if not path.is_dir():
        logger.warning("event=cli.tmp_dir_ignored path=%s", value)
        return None
    return path


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ssg-export",
        description="Export WordPress posts and comments as a static-site zip on stdout",
    )
    parser.add_argument(
        "tmp_dir",
        nargs="?",
        default=None,
        help="Alternate temporary working directory",
    )
    return parser.parse_args(argv)


def stream_archive(path: Path, stdout: BinaryIO) -> None:
    with path.open("rb") as archive:
        shutil.copyfileobj(archive, stdout)
    stdout.flush()


def main(argv: List[str] | None = None, *, stdout: BinaryIO | None = None) -> int:
    args = parse_args(argv)
    settings = ExportSettings.from_config(tmp_root=resolve_tmp_root(args.tmp_dir))
    output = stdout if stdout is not None else sys.stdout.buffer
    try:
        with read_session() as session:
            exporter = SSGExporter(session, settings)
            with exporter.export() as result:
                stream_archive(result.archive_path, output)
    except ExportError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def run() -> None:  # pragma: no cover - console script entry point
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    run()
