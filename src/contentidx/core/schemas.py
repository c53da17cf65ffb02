"""Schema registry: the static field table for every content kind"""

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from contentidx.core.errors import UnknownKindError
from contentidx.core.models import ContentKind, Schema


DEFAULT_SCHEMAS: dict[str, dict[str, dict[str, Any]]] = {
    "team-member": {
        "name":     {"type": "string", "required": True, "max_length": 80},
        "role":     {"type": "string", "required": True, "max_length": 80},
        "bio":      {"type": "string", "max_length": 600},
        "avatar":   {"type": "url"},
        "linkedin": {"type": "url"},
        "github":   {"type": "url"},
        "twitter":  {"type": "url"},
        "skills":   {"type": "list<string>", "max_items": 12, "max_length": 40},
    },
    "product": {
        "name":        {"type": "string", "required": True, "max_length": 80},
        "tagline":     {"type": "string", "max_length": 140},
        "description": {"type": "string", "required": True, "max_length": 1000},
        "status":      {"type": "enum", "required": True, "allowed_values": ["active", "coming-soon", "beta"]},
        "url":         {"type": "url"},
        "image":       {"type": "url"},
        "features":    {"type": "list<string>", "max_items": 12, "max_length": 200},
        "tags":        {"type": "list<string>", "max_items": 10, "max_length": 40},
    },
    "document": {
        "title":       {"type": "string", "required": True, "max_length": 120},
        "description": {"type": "string", "required": True, "max_length": 300},
        "date":        {"type": "string", "required": True, "max_length": 32},
        "author":      {"type": "string", "required": True, "max_length": 80},
        "tags":        {"type": "list<string>", "max_items": 10, "max_length": 40},
        "difficulty":  {"type": "enum", "required": True, "allowed_values": ["beginner", "intermediate", "advanced"]},
        "youtube":     {"type": "url"},
        "slug":        {"type": "string", "max_length": 120},
        "image":       {"type": "url"},
    },
}


def resolve_kind(kind: Union[ContentKind, str]) -> ContentKind:
    """Coerce a kind tag to ContentKind, raising UnknownKindError for anything undeclared."""
    if isinstance(kind, ContentKind):
        return kind
    try:
        return ContentKind(kind)
    except ValueError:
        raise UnknownKindError(f"Unknown content kind: {kind!r}", kind=str(kind)) from None


class SchemaRegistry:
    """Read-only mapping of ContentKind -> Schema, fixed at construction."""

    def __init__(self, schemas: Iterable[Schema]):
        self._schemas: Mapping[ContentKind, Schema] = MappingProxyType({s.kind: s for s in schemas})

    def get_schema(self, kind: Union[ContentKind, str]) -> Schema:
        resolved = resolve_kind(kind)
        try:
            return self._schemas[resolved]
        except KeyError:
            raise UnknownKindError(f"No schema declared for kind {resolved.value!r}", kind=resolved.value) from None

    def kinds(self) -> tuple[ContentKind, ...]:
        """Declared kinds in ContentKind declaration order."""
        return tuple(k for k in ContentKind if k in self._schemas)

    def __contains__(self, kind) -> bool:
        try:
            return resolve_kind(kind) in self._schemas
        except UnknownKindError:
            return False


def registry_from_dict(data: Mapping[str, Mapping[str, Any]]) -> SchemaRegistry:
    """Build a registry from {kind: {field: spec}}. Raises ValueError on bad declarations."""
    schemas = []
    for kind, fields in data.items():
        try:
            schemas.append(Schema(kind=resolve_kind(kind), fields=fields or {}))
        except ValidationError as e:
            raise ValueError(f"Invalid schema for kind {kind!r}: {e}") from e
    return SchemaRegistry(schemas)


def load_registry(path: Optional[Path] = None) -> SchemaRegistry:
    """Return the registry from a YAML schema file, or the built-in defaults when path is None."""
    if path is None:
        return registry_from_dict(DEFAULT_SCHEMAS)
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid schema file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid schema file {path}: expected a mapping of kinds, got {type(data).__name__}")
    return registry_from_dict(data)


@lru_cache(maxsize=1)
def default_registry() -> SchemaRegistry:
    """Process-wide registry of the built-in schemas, loaded once."""
    return load_registry()
