import os
import sys
import zipfile
from pathlib import Path

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_ssg_export.db")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from ssg_export.services import ArchiveError  # noqa: E402
from ssg_export.services.archiver import ArchiveWriter, zip_tree  # noqa: E402


def _make_tree(root: Path, files: int) -> set[str]:
    expected = set()
    for index in range(files):
        folder = root / f"post-{index // 10:03d}"
        if index % 10 == 0:
            folder.mkdir(parents=True)
        name = "index.md" if index % 10 == 0 else f"comment_comment_{index}.md"
        (folder / name).write_text(f"file {index}", encoding="utf-8")
        expected.add(f"{folder.name}/{name}")
    return expected


def test_zip_tree_flushes_every_250_files_and_keeps_relative_paths(tmp_path):
    tree = tmp_path / "tree"
    expected = _make_tree(tree, 600)
    archive = tmp_path / "export.zip"
    flushed_at = []

    summary = zip_tree(tree, archive, on_flush=flushed_at.append)

    assert summary.files == 600
    assert summary.flushes == 2
    assert flushed_at == [250, 500]
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        assert len(names) == 600
        assert set(names) == expected
        assert zf.read("post-000/index.md") == b"file 0"


def test_directories_are_not_stored_as_entries(tmp_path):
    tree = tmp_path / "tree"
    (tree / "empty").mkdir(parents=True)
    (tree / "nested" / "deeper").mkdir(parents=True)
    (tree / "nested" / "deeper" / "index.md").write_text("x", encoding="utf-8")

    summary = zip_tree(tree, tmp_path / "out.zip")

    with zipfile.ZipFile(tmp_path / "out.zip") as zf:
        assert zf.namelist() == ["nested/deeper/index.md"]
    assert summary.flushes == 0


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_directories_are_not_traversed(tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.md").write_text("nope", encoding="utf-8")
    tree = tmp_path / "tree"
    tree.mkdir()
    (tree / "index.md").write_text("yes", encoding="utf-8")
    os.symlink(outside, tree / "linked", target_is_directory=True)

    zip_tree(tree, tmp_path / "out.zip")

    with zipfile.ZipFile(tmp_path / "out.zip") as zf:
        assert zf.namelist() == ["index.md"]


def test_writer_flush_cadence_is_configurable(tmp_path):
    source = tmp_path / "a.md"
    source.write_text("a", encoding="utf-8")

    with ArchiveWriter(tmp_path / "small.zip", flush_every=2) as writer:
        for index in range(5):
            writer.add(source, f"a{index}.md")

    assert writer.files == 5
    assert writer.flushes == 2
    with zipfile.ZipFile(tmp_path / "small.zip") as zf:
        assert len(zf.namelist()) == 5


def test_unwritable_destination_is_fatal(tmp_path):
    with pytest.raises(ArchiveError) as excinfo:
        ArchiveWriter(tmp_path / "missing" / "out.zip")

    assert "missing" in str(excinfo.value)
