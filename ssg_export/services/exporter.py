"""Export orchestration: posts and comments to a directory tree, then a zip."""

from __future__ import annotations

import logging
import shutil
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Tuple
from urllib.parse import unquote_plus

from sqlalchemy.orm import Session

from ..config import ExportConfig, get_export_settings
from ..models import Post
from . import ExportDirectoryError, ExportError
from . import repository
from .archiver import DEFAULT_FLUSH_EVERY, zip_tree
from .comments import build_comment_metadata, comment_filename, parse_comment_ids
from .content import ContentRenderer, default_renderer
from .documents import write_document
from .post_metadata import OPENID_META_KEY, build_post_metadata, load_post_lookups, post_timestamp

logger = logging.getLogger(__name__)


INDEX_FILENAME = "index.md"
ARCHIVE_FILENAME = "wp-ssg.zip"
TREE_PREFIX = "wp-ssg-"
UNDATED = "UNDATED"


@dataclass
class ExportSettings:
    """Options for one export run."""

    tmp_root: Path
    include_comments: bool = True
    flush_every: int = DEFAULT_FLUSH_EVERY
    renderer: ContentRenderer = field(default_factory=default_renderer)

    @classmethod
    def from_config(
        cls,
        config: ExportConfig | None = None,
        *,
        tmp_root: str | Path | None = None,
    ) -> "ExportSettings":
        config = config or get_export_settings()
        return cls(
            tmp_root=Path(tmp_root or config.tmp_root),
            include_comments=config.include_comments,
            flush_every=config.flush_every,
        )


@dataclass(frozen=True)
class ExportResult:
    archive_path: Path
    tree_path: Path
    posts: int
    comments: int
    files: int


def post_directory_name(post: Post) -> str:
    """Return ``{YYYY-MM-DD|UNDATED}_{slug}`` for the post's output folder."""

    timestamp = post_timestamp(post)
    date = timestamp.strftime("%Y-%m-%d") if timestamp is not None else UNDATED
    # A decoded slug must not escape the export tree.
    slug = unquote_plus(post.post_name or "").replace("/", "-").replace("\\", "-")
    return f"{date}_{slug}"


class SSGExporter:
    """Run a full export against one database session.

    The working tree and the archive live under ``settings.tmp_root`` and
    are removed by :meth:`cleanup`, which :meth:`export` always calls.
    """

    def __init__(
        self,
        session: Session,
        settings: ExportSettings,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session = session
        self._settings = settings
        self._clock = clock
        self.tree_path: Path | None = None
        self.archive_path: Path | None = None

    def convert_posts(self, output_dir: Path) -> Tuple[int, int]:
        """Write every exportable post below ``output_dir``.

        Returns the number of posts and comment files written.
        """

        urls = repository.site_urls(self._session)
        structure = repository.get_option(self._session, "permalink_structure")
        post_count = 0
        comment_count = 0
        for post_id in repository.exportable_post_ids(self._session):
            post = repository.load_post(self._session, post_id)
            if post is None:
                logger.warning("event=export.post_vanished post_id=%s", post_id)
                continue
            lookups = load_post_lookups(self._session, post, urls, permalink_structure=structure)
            meta = build_post_metadata(post, lookups, urls)
            body = self._settings.renderer.render(post.post_content, post)
            post_dir = output_dir / post_directory_name(post)
            write_document(meta, body, post_dir, INDEX_FILENAME)
            post_count += 1
            logger.debug("event=export.post post_id=%s dir=%s", post.id, post_dir.name)

            if self._settings.include_comments:
                comment_count += self.convert_comments(post, post_dir)
        return post_count, comment_count

    def convert_comments(self, post: Post, post_dir: Path) -> int:
        """Write one file per comment next to the post's index document."""

        comments = repository.post_comments(self._session, post.id)
        if not comments:
            return 0
        verified_ids = parse_comment_ids(
            repository.post_meta_value(self._session, post.id, OPENID_META_KEY)
        )
        for comment in comments:
            meta = build_comment_metadata(comment, verified_ids)
            write_document(meta, comment.comment_content, post_dir, comment_filename(comment))
        return len(comments)

    def _create_tree(self) -> Path:
        root = self._settings.tmp_root
        tree = root / f"{TREE_PREFIX}{int(self._clock())}"
        try:
            tree.mkdir()
        except OSError as exc:
            raise ExportDirectoryError(f"Failed to create export dir: {tree}", path=tree) from exc
        return tree

    def build(self) -> ExportResult:
        """Produce the tree and the archive, cleaning up if any step fails."""

        started = time.monotonic()
        self.tree_path = self._create_tree()
        self.archive_path = self._settings.tmp_root / ARCHIVE_FILENAME
        logger.info("event=export.start tree=%s", self.tree_path)
        try:
            posts, comments = self.convert_posts(self.tree_path)
            summary = zip_tree(
                self.tree_path,
                self.archive_path,
                flush_every=self._settings.flush_every,
            )
        except BaseException:
            self.cleanup()
            raise
        logger.info(
            "event=export.done posts=%s comments=%s files=%s elapsed_ms=%s",
            posts,
            comments,
            summary.files,
            int((time.monotonic() - started) * 1000),
        )
        return ExportResult(
            archive_path=self.archive_path,
            tree_path=self.tree_path,
            posts=posts,
            comments=comments,
            files=summary.files,
        )

    @contextmanager
    def export(self) -> Iterator[ExportResult]:
        try:
            yield self.build()
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Remove the working tree and the archive; safe to call repeatedly."""

        try:
            if self.tree_path is not None and self.tree_path.exists():
                shutil.rmtree(self.tree_path)
            if self.archive_path is not None and self.archive_path.exists():
                self.archive_path.unlink()
        except OSError as exc:
            raise ExportError(f"Failed to remove export artifacts: {exc}", path=exc.filename) from exc
        logger.debug("event=export.cleanup tree=%s archive=%s", self.tree_path, self.archive_path)
