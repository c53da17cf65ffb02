"""Unit tests for core/loader.py"""

import json

import pytest

from contentidx.core.errors import ContentLoadError
from contentidx.core.loader import discover_files, load_content_dir
from contentidx.core.models import ContentKind, RawDocument


KIND_DIRS = {"team-member": "team", "product": "products", "document": "blog"}


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path):
    """A content tree: one JSON file per member, a product list, two posts."""
    (tmp_path / "team").mkdir()
    (tmp_path / "team" / "b.json").write_text(json.dumps({"id": "b", "name": "B", "role": "R"}))
    (tmp_path / "team" / "a.json").write_text(json.dumps({"id": "a", "name": "A", "role": "R"}))
    (tmp_path / "products").mkdir()
    (tmp_path / "products" / "products.json").write_text(json.dumps([{"id": "p1"}, {"id": "p2"}]))
    (tmp_path / "blog").mkdir()
    (tmp_path / "blog" / "intro.md").write_text("---\ntitle: Intro\n---\nBody\n")
    (tmp_path / "blog" / "notes.txt").write_text("ignored")
    return tmp_path


def test_load_content_dir_reads_each_kind(content_dir):
    raw = load_content_dir(content_dir, KIND_DIRS)
    assert [r["id"] for r in raw[ContentKind.team_member]] == ["a", "b"]
    assert [r["id"] for r in raw[ContentKind.product]] == ["p1", "p2"]
    assert raw[ContentKind.document] == [RawDocument(source="intro", text="---\ntitle: Intro\n---\nBody\n")]


def test_load_content_dir_missing_subdir_is_empty(content_dir):
    raw = load_content_dir(content_dir, {**KIND_DIRS, "product": "nothing-here"})
    assert raw[ContentKind.product] == []


def test_load_content_dir_missing_root(tmp_path):
    with pytest.raises(ContentLoadError, match="not found"):
        load_content_dir(tmp_path / "missing", KIND_DIRS)


def test_load_content_dir_invalid_json(content_dir):
    (content_dir / "team" / "broken.json").write_text("{not json")
    with pytest.raises(ContentLoadError, match="broken.json"):
        load_content_dir(content_dir, KIND_DIRS)


def test_discover_files_single(tmp_path):
    f = tmp_path / "post.md"
    f.write_text("# Hello")
    assert discover_files(f, {".md"}) == [f]


def test_discover_files_recursive_sorted(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b.mdx").write_text("b")
    (tmp_path / "a.md").write_text("a")
    assert discover_files(tmp_path, {".md", ".mdx"}) == [tmp_path / "a.md", sub / "b.mdx"]
