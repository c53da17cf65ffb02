"""Rebuild entry point: validate, index, and publish every content kind as one snapshot"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from contentidx.core.errors import (
    BuildInProgressError,
    ContentError,
    PublishAbortedError,
    PublishError,
    UnknownKindError,
)
from contentidx.core.index import build
from contentidx.core.models import Collection, ContentKind, Snapshot
from contentidx.core.query import QueryService
from contentidx.core.schemas import SchemaRegistry, default_registry, resolve_kind
from contentidx.core.store import SnapshotStore
from contentidx.core.validate import validate


logger = logging.getLogger(__name__)

CONFLICT_POLICIES = ("wait", "reject")


@dataclass(frozen=True)
class BuildReport:
    """Outcome of one rebuild: per-record errors, fatal errors, and whether it published."""
    started_at: datetime
    finished_at: datetime
    published: bool
    snapshot: Optional[Snapshot] = None
    record_errors: tuple[ContentError, ...] = ()
    fatal_errors: tuple[ContentError, ...] = ()
    accepted: Mapping[str, int] = field(default_factory=dict)
    rejected: Mapping[str, int] = field(default_factory=dict)

    @property
    def digest(self) -> Optional[str]:
        return self.snapshot.digest if self.snapshot else None

    def errors_for(self, kind: Union[ContentKind, str]) -> tuple[ContentError, ...]:
        value = kind.value if isinstance(kind, ContentKind) else kind
        return tuple(e for e in self.record_errors if e.kind == value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "published": self.published,
            "digest": self.digest,
            "accepted": dict(self.accepted),
            "rejected": dict(self.rejected),
            "record_errors": [e.to_dict() for e in self.record_errors],
            "fatal_errors": [e.to_dict() for e in self.fatal_errors],
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ContentEngine:
    """Single-writer rebuild pipeline plus the read-only QueryService over its store.

    Builds are serialized: with conflict_policy='wait' a second rebuild queues
    on the build lock; with 'reject' it returns a report carrying
    BuildInProgressError. Readers never take the build lock.
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        store: Optional[SnapshotStore] = None,
        conflict_policy: str = "wait",
        ):
        if conflict_policy not in CONFLICT_POLICIES:
            raise ValueError(f"conflict_policy must be one of {CONFLICT_POLICIES}, got {conflict_policy!r}")
        self.registry = registry or default_registry()
        self.store = store or SnapshotStore(self.registry.kinds())
        self.query = QueryService(self.store)
        self.conflict_policy = conflict_policy
        self._build_lock = threading.Lock()

    def rebuild(self, raw_content_by_kind: Mapping[Union[ContentKind, str], Iterable[Any]]) -> BuildReport:
        """Validate and index all raw content, then publish it as one snapshot (or nothing)."""
        started_at = _now()
        if not self._build_lock.acquire(blocking=self.conflict_policy == "wait"):
            logger.warning("Rejected rebuild: another build is in progress")
            return BuildReport(
                started_at=started_at,
                finished_at=_now(),
                published=False,
                fatal_errors=(BuildInProgressError("another build is in progress"),),
            )
        try:
            return self._rebuild(raw_content_by_kind, started_at)
        finally:
            self._build_lock.release()

    def _group_raw(self, raw_content_by_kind, fatal: list) -> dict[ContentKind, list]:
        grouped: dict[ContentKind, list] = {}
        for kind, raws in raw_content_by_kind.items():
            try:
                resolved = resolve_kind(kind)
            except UnknownKindError as e:
                fatal.append(e)
                continue
            grouped.setdefault(resolved, []).extend(raws)
        return grouped

    def _build_kind(self, kind: ContentKind, raws: list, record_errors: list) -> tuple[Collection, int]:
        """Validate and index one kind; returns (collection, number of rejected records)."""
        valid = []
        for raw in raws:
            result = validate(kind, raw, self.registry)
            if result.ok:
                valid.append(result.record)
            else:
                record_errors.extend(result.errors)
        built = build(kind, valid)
        record_errors.extend(built.errors)
        rejected = len(raws) - len(built.collection.records)
        if rejected:
            logger.warning("Rejected %d of %d %s record(s)", rejected, len(raws), kind.value)
        return built.collection, rejected

    def _rebuild(self, raw_content_by_kind, started_at: datetime) -> BuildReport:
        record_errors: list[ContentError] = []
        fatal: list[ContentError] = []
        grouped = self._group_raw(raw_content_by_kind, fatal)

        collections: dict[ContentKind, Collection] = {}
        accepted: dict[str, int] = {}
        rejected: dict[str, int] = {}
        for kind in (k for k in ContentKind if k in self.store.kinds or k in grouped):
            try:
                self.registry.get_schema(kind)
            except UnknownKindError as e:
                fatal.append(e)
                continue
            if kind not in grouped:
                logger.warning("No raw content supplied for %s; publishing an empty collection", kind.value)
            collection, dropped = self._build_kind(kind, grouped.get(kind, []), record_errors)
            collections[kind] = collection
            accepted[kind.value] = len(collection.records)
            rejected[kind.value] = dropped

        snapshot = None
        if not fatal:
            try:
                snapshot = self.store.publish(collections, built_at=started_at)
            except PublishError as e:
                fatal.append(e)
        if fatal:
            fatal.append(PublishAbortedError(
                f"build aborted with {len(fatal)} fatal error(s); previous snapshot remains current",
            ))
            logger.error("Build aborted: %s", "; ".join(str(e) for e in fatal))

        return BuildReport(
            started_at=started_at,
            finished_at=_now(),
            published=snapshot is not None,
            snapshot=snapshot,
            record_errors=tuple(record_errors),
            fatal_errors=tuple(fatal),
            accepted=accepted,
            rejected=rejected,
        )
