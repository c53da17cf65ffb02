"""Read-only queries over the currently published snapshot"""

from typing import Optional, Union

from contentidx.core.models import Collection, ContentKind, Document, Record
from contentidx.core.schemas import resolve_kind
from contentidx.core.store import SnapshotStore


class QueryService:
    """Each call borrows the snapshot current at call time and never blocks on a build.

    Misses (absent id, unknown tag) return None or an empty tuple; only an
    undeclared kind raises (UnknownKindError).
    """

    def __init__(self, store: SnapshotStore):
        self._store = store

    def _collection(self, kind: Union[ContentKind, str]) -> Optional[Collection]:
        return self._store.current().collection(resolve_kind(kind))

    def get_by_id(self, kind: Union[ContentKind, str], record_id: str) -> Optional[Record]:
        collection = self._collection(kind)
        return collection.index.by_id.get(record_id) if collection else None

    def list_by_order(
        self,
        kind: Union[ContentKind, str],
        offset: int = 0,
        limit: Optional[int] = None,
        ) -> tuple[Record, ...]:
        """Page through records by (order, id). offset/limit clamp to the collection bounds."""
        collection = self._collection(kind)
        if collection is None:
            return ()
        ids = collection.index.by_order
        start = min(max(offset, 0), len(ids))
        end = len(ids) if limit is None else min(start + max(limit, 0), len(ids))
        return tuple(collection.index.by_id[i] for i in ids[start:end])

    def filter_by_tag(self, kind: Union[ContentKind, str], tag: str) -> tuple[Record, ...]:
        collection = self._collection(kind)
        if collection is None:
            return ()
        return tuple(collection.index.by_id[i] for i in collection.index.by_tag.get(tag, ()))

    def filter_by_difficulty(self, kind: Union[ContentKind, str], difficulty: str) -> tuple[Record, ...]:
        collection = self._collection(kind)
        if collection is None:
            return ()
        return tuple(collection.index.by_id[i] for i in collection.index.by_difficulty.get(difficulty, ()))

    def get_document_by_slug(self, slug: str) -> Optional[Document]:
        collection = self._collection(ContentKind.document)
        if collection is None:
            return None
        record_id = collection.index.by_slug.get(slug)
        return collection.index.by_id[record_id] if record_id is not None else None
