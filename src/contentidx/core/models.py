"""Content kinds, schema declarations, and the immutable record/index/snapshot types"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, model_validator


class ContentKind(str, Enum):
    team_member = "team-member"
    product = "product"
    document = "document"


class FieldType(str, Enum):
    string = "string"
    number = "number"
    enum = "enum"
    url = "url"
    string_list = "list<string>"


class FieldSpec(BaseModel):
    """Constraints for a single declared field."""
    model_config = {"frozen": True}

    type: FieldType
    required: bool = False
    max_length: Optional[int] = Field(default=None, ge=1, description="Max chars for strings/urls and each list item")
    max_items: Optional[int] = Field(default=None, ge=0, description="Max entries for list<string>")
    allowed_values: Optional[frozenset[str]] = None

    @model_validator(mode="after")
    def _check_enum_values(self) -> "FieldSpec":
        if self.type == FieldType.enum and not self.allowed_values:
            raise ValueError("enum fields must declare allowed_values")
        if self.type != FieldType.enum and self.allowed_values is not None:
            raise ValueError(f"allowed_values only applies to enum fields, not {self.type.value}")
        if self.max_items is not None and self.type != FieldType.string_list:
            raise ValueError("max_items only applies to list<string> fields")
        return self


class Schema(BaseModel):
    """Field table for one content kind. `id` and `order` are reserved and never declared."""
    model_config = {"frozen": True}

    kind: ContentKind
    fields: dict[str, FieldSpec]

    @model_validator(mode="after")
    def _check_reserved(self) -> "Schema":
        reserved = {"id", "order"} & set(self.fields)
        if reserved:
            raise ValueError(f"reserved field names declared in {self.kind.value} schema: {sorted(reserved)}")
        return self


class RawDocument(BaseModel):
    """Raw markdown text plus an optional source name (usually the file stem)."""
    source: Optional[str] = None
    text: str


@dataclass(frozen=True)
class Record:
    """A validated content record. `fields` is a read-only mapping; list values are tuples."""
    kind: ContentKind
    id: str
    order: Optional[int]
    fields: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "order": self.order,
            "fields": {k: list(v) if isinstance(v, tuple) else v for k, v in self.fields.items()},
        }


@dataclass(frozen=True)
class Document(Record):
    """A validated markdown document. `fields` holds the declared front matter."""
    slug: str
    body: str

    @property
    def front_matter(self) -> Mapping[str, Any]:
        return self.fields

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["slug"] = self.slug
        data["body"] = self.body
        return data


def _frozen(mapping: Optional[Mapping] = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Index:
    """Derived lookup structures over a single collection."""
    by_id: Mapping[str, Record] = field(default_factory=_frozen)
    by_tag: Mapping[str, tuple[str, ...]] = field(default_factory=_frozen)
    by_difficulty: Mapping[str, tuple[str, ...]] = field(default_factory=_frozen)
    by_order: tuple[str, ...] = ()
    by_slug: Mapping[str, str] = field(default_factory=_frozen)


@dataclass(frozen=True)
class Collection:
    """Surviving records of one kind (in submission order) and their index."""
    kind: ContentKind
    records: tuple[Record, ...]
    index: Index


@dataclass(frozen=True)
class Snapshot:
    """A published, immutable view of every content kind."""
    built_at: datetime
    collections: Mapping[ContentKind, Collection]
    digest: str

    def collection(self, kind: ContentKind) -> Optional[Collection]:
        return self.collections.get(kind)
