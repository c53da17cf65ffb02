"""Snapshot store: owns the current published snapshot and swaps it atomically"""

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from contentidx.core.errors import IncompletePublishError
from contentidx.core.index import empty_collection
from contentidx.core.models import Collection, ContentKind, Snapshot
from contentidx.core.utils.hashing import canonical_digest


logger = logging.getLogger(__name__)


def snapshot_digest(collections: Mapping[ContentKind, Collection]) -> str:
    """Content digest over every kind's records; equal for identical content."""
    return canonical_digest({
        kind.value: [r.to_dict() for r in collections[kind].records]
        for kind in sorted(collections, key=lambda k: k.value)
    })


def make_snapshot(
    collections: Mapping[ContentKind, Collection],
    built_at: Optional[datetime] = None,
    ) -> Snapshot:
    return Snapshot(
        built_at=built_at or datetime.now(timezone.utc),
        collections=MappingProxyType(dict(collections)),
        digest=snapshot_digest(collections),
    )


class SnapshotStore:
    """Single owner of the current Snapshot pointer.

    Readers call current() without locking; a publish replaces the pointer in
    one assignment, so a reader holds either the old or the new snapshot.
    Writers are serialized by the engine's build lock, not here.
    """

    def __init__(self, kinds: Iterable[ContentKind]):
        self.kinds: tuple[ContentKind, ...] = tuple(kinds)
        self._current = make_snapshot({k: empty_collection(k) for k in self.kinds})

    def current(self) -> Snapshot:
        return self._current

    def publish(
        self,
        collections: Mapping[ContentKind, Collection],
        built_at: Optional[datetime] = None,
        ) -> Snapshot:
        """Publish a snapshot covering every registered kind, or raise and keep the current one."""
        missing = [k.value for k in self.kinds if k not in collections]
        if missing:
            raise IncompletePublishError(f"refusing partial publish; missing kinds: {missing}")
        extra = [k.value if isinstance(k, ContentKind) else str(k) for k in collections if k not in self.kinds]
        if extra:
            raise IncompletePublishError(f"refusing publish with unregistered kinds: {extra}")

        snapshot = make_snapshot({k: collections[k] for k in self.kinds}, built_at)
        self._current = snapshot
        logger.info(
            "Published snapshot %s (%s)", snapshot.digest[:12],
            ", ".join(f"{k.value}={len(c.records)}" for k, c in snapshot.collections.items()),
        )
        return snapshot
