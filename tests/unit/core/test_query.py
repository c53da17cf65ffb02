"""Unit tests for core/query.py"""

import pytest

from contentidx.core.errors import UnknownKindError
from contentidx.core.models import Document


@pytest.fixture(name="query")
def query_fixture(engine, content):
    report = engine.rebuild(content)
    assert report.published
    return engine.query


# --- get_by_id ---

def test_get_by_id_found(query):
    record = query.get_by_id("team-member", "ada")
    assert record is not None
    assert record.fields["name"] == "Ada"


def test_get_by_id_missing_returns_none(query):
    assert query.get_by_id("team-member", "nobody") is None


def test_get_by_id_unknown_kind_raises(query):
    with pytest.raises(UnknownKindError):
        query.get_by_id("video", "x")


# --- list_by_order ---

def test_list_by_order(query):
    """Products come back sorted by their order field."""
    assert [r.id for r in query.list_by_order("product")] == ["quiz", "algo-viz", "tutor"]


def test_list_by_order_unordered_last(query):
    assert [r.id for r in query.list_by_order("team-member")] == ["ada", "grace", "linus"]


@pytest.mark.parametrize("offset,limit,expected", [
    (0, 2, ["quiz", "algo-viz"]),
    (1, 1, ["algo-viz"]),
    (2, 10, ["tutor"]),
    (5, 2, []),
    (-3, 1, ["quiz"]),
    (0, -1, []),
    (0, None, ["quiz", "algo-viz", "tutor"]),
])
def test_list_by_order_clamps(query, offset, limit, expected):
    """offset/limit clamp to the collection bounds instead of raising."""
    assert [r.id for r in query.list_by_order("product", offset, limit)] == expected


def test_list_by_order_is_stable(query):
    assert query.list_by_order("product", 0, 2) == query.list_by_order("product", 0, 2)


# --- filters ---

def test_filter_by_tag(query):
    assert [r.id for r in query.filter_by_tag("product", "education")] == ["algo-viz", "quiz"]


def test_filter_by_tag_unknown_tag_is_empty(query):
    assert query.filter_by_tag("product", "nope") == ()


def test_filter_by_tag_documents(query):
    assert [r.id for r in query.filter_by_tag("document", "python")] == ["intro-to-python", "graph-search"]


def test_filter_by_difficulty(query):
    assert [r.id for r in query.filter_by_difficulty("document", "advanced")] == ["dynamic-programming"]


def test_filter_by_difficulty_unknown_is_empty(query):
    assert query.filter_by_difficulty("document", "expert") == ()
    assert query.filter_by_difficulty("product", "beginner") == ()


# --- get_document_by_slug ---

def test_get_document_by_slug(query):
    doc = query.get_document_by_slug("graph-search")
    assert isinstance(doc, Document)
    assert doc.front_matter["difficulty"] == "intermediate"


def test_get_document_by_slug_missing(query):
    assert query.get_document_by_slug("nope") is None


def test_query_reads_latest_snapshot(engine, query, content):
    """Queries reflect the newest publish without re-creating the service."""
    content["team-member"].append({"id": "new", "name": "New", "role": "Intern"})
    engine.rebuild(content)
    assert query.get_by_id("team-member", "new") is not None
