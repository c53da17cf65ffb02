"""Unit tests for core/index.py"""

from types import MappingProxyType

import pytest

from contentidx.core.errors import DuplicateIdError, DuplicateSlugError
from contentidx.core.index import build, empty_collection
from contentidx.core.models import ContentKind, Document, Record


def _record(rid, order=None, kind=ContentKind.product, **fields) -> Record:
    return Record(kind=kind, id=rid, order=order, fields=MappingProxyType(fields))


def _doc(rid, slug=None, order=None, tags=(), difficulty="beginner") -> Document:
    return Document(
        kind=ContentKind.document,
        id=rid,
        order=order,
        fields=MappingProxyType({"title": rid, "tags": tuple(tags), "difficulty": difficulty}),
        slug=slug or rid,
        body="",
    )


# --- duplicates ---

def test_build_duplicate_id_keeps_one_and_reports():
    """Ids a, b, b: build keeps two records and reports one DuplicateIdError for b."""
    records = [_record("a", kind=ContentKind.team_member), _record("b", kind=ContentKind.team_member),
               _record("b", kind=ContentKind.team_member)]
    result = build(ContentKind.team_member, records)
    assert [r.id for r in result.collection.records] == ["a", "b"]
    assert len(result.errors) == 1
    assert isinstance(result.errors[0], DuplicateIdError)
    assert result.errors[0].record_id == "b"


def test_build_duplicate_id_lowest_order_wins():
    """Among duplicates the lowest order wins, regardless of submission position."""
    first = _record("x", order=5, name="first")
    second = _record("x", order=1, name="second")
    result = build(ContentKind.product, [first, second])
    assert result.collection.index.by_id["x"] is second


def test_build_duplicate_id_submission_order_breaks_ties():
    first = _record("x", order=2, name="first")
    second = _record("x", order=2, name="second")
    result = build(ContentKind.product, [first, second])
    assert result.collection.index.by_id["x"] is first


def test_build_duplicate_id_ordered_beats_unordered():
    unordered = _record("x", name="unordered")
    ordered = _record("x", order=10, name="ordered")
    result = build(ContentKind.product, [unordered, ordered])
    assert result.collection.index.by_id["x"] is ordered


def test_build_duplicate_slug_across_documents():
    """Two documents with different ids but the same slug keep only one."""
    docs = [_doc("one", slug="same"), _doc("two", slug="same")]
    result = build(ContentKind.document, docs)
    assert [d.id for d in result.collection.records] == ["one"]
    assert [type(e) for e in result.errors] == [DuplicateSlugError]
    assert result.errors[0].record_id == "two"


# --- indices ---

def test_build_by_order_sorted_with_id_tiebreak():
    """by_order sorts by order, ties by id ascending, unordered records last."""
    records = [
        _record("c", order=2), _record("a", order=2), _record("z"), _record("b", order=1), _record("m"),
    ]
    result = build(ContentKind.product, records)
    assert result.collection.index.by_order == ("b", "a", "c", "m", "z")


def test_build_by_tag_follows_source_order():
    """Ids inside a tag bucket follow submission order, not lexicographic order."""
    records = [
        _record("zeta", tags=("edu",)),
        _record("alpha", tags=("edu", "viz")),
        _record("mid"),
    ]
    index = build(ContentKind.product, records).collection.index
    assert index.by_tag == {"edu": ("zeta", "alpha"), "viz": ("alpha",)}
    assert list(index.by_tag) == ["edu", "viz"]


def test_build_by_tag_multiplicity_matches_usages():
    """The bucket sizes sum to the number of tag usages across surviving documents."""
    docs = [_doc("a", tags=["x", "y"]), _doc("b", tags=["y"]), _doc("c", tags=["x", "y", "z"])]
    index = build(ContentKind.document, docs).collection.index
    assert sum(len(ids) for ids in index.by_tag.values()) == 6


def test_build_by_difficulty_documents_only():
    docs = [_doc("a", difficulty="advanced"), _doc("b"), _doc("c")]
    index = build(ContentKind.document, docs).collection.index
    assert index.by_difficulty == {"advanced": ("a",), "beginner": ("b", "c")}
    products = build(ContentKind.product, [_record("p", difficulty="beginner")]).collection.index
    assert products.by_difficulty == {}


def test_build_by_slug():
    docs = [_doc("a", slug="alpha"), _doc("b", slug="beta")]
    index = build(ContentKind.document, docs).collection.index
    assert index.by_slug == {"alpha": "a", "beta": "b"}


def test_build_is_deterministic():
    """Building the same input twice yields identical index contents."""
    records = [_record("b", order=1, tags=("t",)), _record("a", order=1, tags=("t", "u")), _record("b")]
    first = build(ContentKind.product, records)
    second = build(ContentKind.product, list(records))
    assert first.collection == second.collection
    assert first.errors == second.errors


def test_build_index_is_read_only():
    index = build(ContentKind.product, [_record("a")]).collection.index
    with pytest.raises(TypeError):
        index.by_id["b"] = None


def test_build_rejects_foreign_kind():
    with pytest.raises(ValueError, match="not of kind"):
        build(ContentKind.product, [_record("a", kind=ContentKind.team_member)])


def test_empty_collection():
    collection = empty_collection(ContentKind.document)
    assert collection.records == ()
    assert collection.index.by_order == ()
    assert collection.index.by_id == {}
