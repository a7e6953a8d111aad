import os
import sys
import zipfile
from pathlib import Path

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_ssg_export.db")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from ssg_export.db import Base, SessionLocal, engine  # noqa: E402
from ssg_export.seeds.sample_site import seed_sample_site  # noqa: E402
from ssg_export.services import ArchiveError, ExportDirectoryError  # noqa: E402
from ssg_export.services import exporter as exporter_module  # noqa: E402
from ssg_export.services import repository  # noqa: E402
from ssg_export.services.documents import split_document  # noqa: E402
from ssg_export.services.exporter import ExportSettings, SSGExporter  # noqa: E402


EXPECTED_DIRS = {
    "2020-01-02_hello-world",
    "2021-05-06_work-in-progress",
    "2021-03-04_secret",
    "UNDATED_café-notes",
}


@pytest.fixture(autouse=True)
def _seeded_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_sample_site(session)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def _read(path: Path):
    return split_document(path.read_text(encoding="utf-8"))


def test_export_writes_one_directory_per_exportable_post(tmp_path):
    settings = ExportSettings(tmp_root=tmp_path)
    with SessionLocal() as session:
        exporter = SSGExporter(session, settings, clock=lambda: 1700000000)
        with exporter.export() as result:
            assert result.tree_path == tmp_path / "wp-ssg-1700000000"
            assert {path.name for path in result.tree_path.iterdir()} == EXPECTED_DIRS
            assert result.posts == 4
            assert result.comments == 2
            assert result.files == 6


def test_published_post_document_matches_expected_front_matter(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with exporter.export() as result:
            meta, body = _read(result.tree_path / "2020-01-02_hello-world" / "index.md")

    assert meta == {
        "title": "Hello & Welcome",
        "id": 1,
        "author": "Ada Admin",
        "date": "2020-01-02T03:04:05+00:00",
        "excerpt": "A short teaser.",
        "url": "/2020/01/hello-world/",
        "featured_image": "/wp-content/uploads/2020/01/cover.jpg",
        "custom": {"color": ["blue"], "mood": ["happy", "calm"]},
        "format": "aside",
        "series": ["Travel Diaries"],
        "tags": ["News", "Updates"],
    }
    assert list(meta) == [
        "title",
        "id",
        "author",
        "date",
        "excerpt",
        "url",
        "featured_image",
        "custom",
        "format",
        "series",
        "tags",
    ]
    assert body == "<p>First paragraph.</p>\n<p>Second paragraph<br />\nwith a break.</p>\n"


def test_private_and_undated_posts(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with exporter.export() as result:
            private_meta, _ = _read(result.tree_path / "2021-03-04_secret" / "index.md")
            undated_meta, _ = _read(result.tree_path / "UNDATED_café-notes" / "index.md")
            draft_meta, _ = _read(result.tree_path / "2021-05-06_work-in-progress" / "index.md")

    assert private_meta["date"] == "2021-03-04T10:00:00+00:00"
    assert private_meta["draft"] is True
    assert private_meta["private"] is True
    assert private_meta["url"] == "/?p=3"
    assert "custom" not in private_meta

    assert "date" not in undated_meta
    assert undated_meta["author"] == "Émile Éditeur"
    assert undated_meta["url"] == "/?p=4"

    assert draft_meta["draft"] is True
    assert draft_meta["tags"] == ["Updates"]


def test_comments_are_written_next_to_the_post(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with exporter.export() as result:
            post_dir = result.tree_path / "2020-01-02_hello-world"
            names = sorted(path.name for path in post_dir.iterdir())
            comment_meta, comment_body = _read(post_dir / "comment_comment_1.md")
            pingback_meta, _ = _read(post_dir / "comment_pingback_2.md")
            undated_files = [path.name for path in (result.tree_path / "UNDATED_café-notes").iterdir()]

    assert names == ["comment_comment_1.md", "comment_pingback_2.md", "index.md"]
    assert comment_meta == {
        "id": 1,
        "type": "comment",
        "date": "2020-01-03T09:00:00+00:00",
        "author": "Reader One",
        "authorUrl": "https://reader.example.org",
    }
    assert comment_body == "Great post!"
    assert pingback_meta["type"] == "pingback"
    assert pingback_meta["openID"] is True
    assert undated_files == ["index.md"]


def test_comments_can_be_disabled(tmp_path):
    settings = ExportSettings(tmp_root=tmp_path, include_comments=False)
    with SessionLocal() as session:
        exporter = SSGExporter(session, settings)
        with exporter.export() as result:
            post_dir = result.tree_path / "2020-01-02_hello-world"
            assert [path.name for path in post_dir.iterdir()] == ["index.md"]
            assert result.comments == 0


def test_archive_mirrors_the_tree(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with exporter.export() as result:
            assert result.archive_path == tmp_path / "wp-ssg.zip"
            with zipfile.ZipFile(result.archive_path) as zf:
                names = set(zf.namelist())

    assert names == {
        "2020-01-02_hello-world/index.md",
        "2020-01-02_hello-world/comment_comment_1.md",
        "2020-01-02_hello-world/comment_pingback_2.md",
        "2021-05-06_work-in-progress/index.md",
        "2021-03-04_secret/index.md",
        "UNDATED_café-notes/index.md",
    }


def test_artifacts_are_removed_after_success(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with exporter.export() as result:
            tree, archive = result.tree_path, result.archive_path
            assert tree.exists() and archive.exists()

    assert not tree.exists()
    assert not archive.exists()
    assert list(tmp_path.iterdir()) == []


def test_artifacts_are_removed_when_archiving_fails(tmp_path, monkeypatch):
    def broken_zip_tree(source_dir, archive_path, **kwargs):
        Path(archive_path).write_bytes(b"partial")
        raise ArchiveError(f"Failed to create '{archive_path}'", path=archive_path)

    monkeypatch.setattr(exporter_module, "zip_tree", broken_zip_tree)

    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with pytest.raises(ArchiveError):
            with exporter.export():
                pass  # pragma: no cover - build raises first

    assert exporter.tree_path is not None and not exporter.tree_path.exists()
    assert exporter.archive_path is not None and not exporter.archive_path.exists()
    assert list(tmp_path.iterdir()) == []


def test_missing_tmp_root_aborts_the_run(tmp_path):
    settings = ExportSettings(tmp_root=tmp_path / "does-not-exist")
    with SessionLocal() as session:
        exporter = SSGExporter(session, settings)
        with pytest.raises(ExportDirectoryError) as excinfo:
            exporter.build()

    assert "Failed to create export dir" in str(excinfo.value)
    assert excinfo.value.path.startswith(str(tmp_path))


def test_unwritable_post_directory_aborts_the_run(tmp_path, monkeypatch):
    real_mkdir = Path.mkdir

    def refusing_mkdir(self, *args, **kwargs):
        if self.name == "2020-01-02_hello-world":
            raise PermissionError(13, "Permission denied", str(self))
        return real_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", refusing_mkdir)

    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        with pytest.raises(ExportDirectoryError) as excinfo:
            with exporter.export():
                pass  # pragma: no cover - build raises first

    assert "Failed to create post output dir" in str(excinfo.value)
    assert excinfo.value.path.endswith("2020-01-02_hello-world")
    assert list(tmp_path.iterdir()) == []


def test_author_login_feeds_author_permalinks():
    with SessionLocal() as session:
        post = repository.load_post(session, 1)
        assert repository.author_login(session, post) == "admin"
        assert repository.author_display_name(session, post) == "Ada Admin"


def test_cleanup_is_idempotent(tmp_path):
    with SessionLocal() as session:
        exporter = SSGExporter(session, ExportSettings(tmp_root=tmp_path))
        exporter.build()
        exporter.cleanup()
        exporter.cleanup()

    assert list(tmp_path.iterdir()) == []
