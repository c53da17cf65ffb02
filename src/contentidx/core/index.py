"""Index builder: deduplicate validated records and derive lookup/filter indices

Given the same validated input, build() always yields identical index
contents: duplicates resolve by (order, submission position), buckets follow
submission order, and index keys are emitted sorted.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Hashable, Iterable, Sequence, Type

from contentidx.core.errors import DuplicateIdError, DuplicateSlugError, IndexBuildError
from contentidx.core.models import Collection, ContentKind, Index, Record


logger = logging.getLogger(__name__)

TAG_FIELD = "tags"
DIFFICULTY_FIELD = "difficulty"


@dataclass(frozen=True)
class BuildResult:
    collection: Collection
    errors: tuple[IndexBuildError, ...] = ()


def _rank(position: int, record: Record) -> tuple:
    """Winner ordering among duplicates: lowest order first (unordered last), then earliest submitted."""
    return (record.order is None, record.order or 0, position)


def _order_key(record: Record) -> tuple:
    """by_order sort key: order ascending (unordered last), ties by id ascending."""
    return (record.order is None, record.order or 0, record.id)


def _dedupe(
    records: Sequence[Record],
    key: Callable[[Record], Hashable],
    error_cls: Type[IndexBuildError],
    label: str,
    ) -> tuple[list[Record], list[IndexBuildError]]:
    """Keep one record per key; returns (survivors in submission order, one error per dropped record)."""
    groups: dict[Hashable, list[int]] = {}
    for position, record in enumerate(records):
        groups.setdefault(key(record), []).append(position)

    keep: set[int] = set()
    errors: list[IndexBuildError] = []
    for value, positions in groups.items():
        ranked = sorted(positions, key=lambda p: _rank(p, records[p]))
        winner = ranked[0]
        keep.add(winner)
        for loser in ranked[1:]:
            dropped = records[loser]
            errors.append(error_cls(
                f"duplicate {label} {value!r}: record #{loser} dropped, record #{winner} kept",
                kind=dropped.kind.value,
                record_id=dropped.id,
                field=label,
            ))
    return [r for p, r in enumerate(records) if p in keep], errors


def _invert(records: Iterable[Record], values: Callable[[Record], Iterable[str]]) -> MappingProxyType:
    """Map each value to the ids carrying it, ids in submission order, keys sorted."""
    buckets: dict[str, list[str]] = {}
    for record in records:
        for value in values(record):
            bucket = buckets.setdefault(value, [])
            if record.id not in bucket:
                bucket.append(record.id)
    return MappingProxyType({k: tuple(buckets[k]) for k in sorted(buckets)})


def _tags(record: Record) -> tuple[str, ...]:
    return tuple(record.fields.get(TAG_FIELD) or ())


def _difficulty(record: Record) -> tuple[str, ...]:
    value = record.fields.get(DIFFICULTY_FIELD)
    return (value,) if value else ()


def build(kind: ContentKind, records: Iterable[Record]) -> BuildResult:
    """Deduplicate records of one kind and construct its Collection and Index.

    Duplicate ids (and, for documents, duplicate slugs) drop every record but
    the winner and report one error per dropped record; the build continues.
    """
    records = list(records)
    foreign = [r.id for r in records if r.kind != kind]
    if foreign:
        raise ValueError(f"records {foreign} are not of kind {kind.value!r}")

    survivors, errors = _dedupe(records, lambda r: r.id, DuplicateIdError, "id")
    is_document = kind == ContentKind.document
    if is_document:
        survivors, slug_errors = _dedupe(survivors, lambda r: r.slug, DuplicateSlugError, "slug")
        errors.extend(slug_errors)

    index = Index(
        by_id=MappingProxyType({r.id: r for r in survivors}),
        by_tag=_invert(survivors, _tags),
        by_difficulty=_invert(survivors, _difficulty) if is_document else MappingProxyType({}),
        by_order=tuple(r.id for r in sorted(survivors, key=_order_key)),
        by_slug=MappingProxyType(
            {r.slug: r.id for r in sorted(survivors, key=lambda d: d.slug)} if is_document else {}
        ),
    )
    if errors:
        logger.warning("Dropped %d duplicate %s record(s)", len(errors), kind.value)
    return BuildResult(
        collection=Collection(kind=kind, records=tuple(survivors), index=index),
        errors=tuple(errors),
    )


def empty_collection(kind: ContentKind) -> Collection:
    return build(kind, ()).collection
