"""Error taxonomy for schema lookup, record validation, indexing, and publishing

Record-scoped errors (validation, indexing) are collected as values and
reported; they are raised only by callers that want fail-fast behaviour.
Build-scoped errors (PublishError) abort a build.
"""

from typing import Any, Optional


class ContentError(Exception):
    """Base class for all contentidx errors."""
    code = "content_error"

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        record_id: Optional[str] = None,
        field: Optional[str] = None,
        ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.record_id = record_id
        self.field = field

    def __str__(self) -> str:
        where = "/".join(p for p in (self.kind, self.record_id, self.field) if p)
        return f"{where}: {self.message}" if where else self.message

    def __eq__(self, other) -> bool:
        if not isinstance(other, ContentError):
            return NotImplemented
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    __hash__ = Exception.__hash__

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "kind": self.kind,
            "record_id": self.record_id,
            "field": self.field,
            "message": self.message,
        }


# --- schema ---

class SchemaError(ContentError):
    code = "schema_error"


class UnknownKindError(SchemaError):
    code = "unknown_kind"


# --- validation ---

class RecordValidationError(ContentError):
    code = "validation_error"


class MissingFieldError(RecordValidationError):
    code = "missing_field"


class TypeMismatchError(RecordValidationError):
    code = "type_mismatch"


class ConstraintViolationError(RecordValidationError):
    code = "constraint_violation"


class InvalidEnumValueError(RecordValidationError):
    code = "invalid_enum_value"


class InvalidUrlError(RecordValidationError):
    code = "invalid_url"


class MalformedFrontMatterError(RecordValidationError):
    code = "malformed_front_matter"


# --- indexing ---

class IndexBuildError(ContentError):
    code = "index_error"


class DuplicateIdError(IndexBuildError):
    code = "duplicate_id"


class DuplicateSlugError(IndexBuildError):
    code = "duplicate_slug"


# --- publishing ---

class PublishError(ContentError):
    code = "publish_error"


class IncompletePublishError(PublishError):
    code = "incomplete_publish"


class PublishAbortedError(PublishError):
    code = "publish_aborted"


class BuildInProgressError(PublishError):
    code = "build_in_progress"


# --- loading (hosting side) ---

class ContentLoadError(ContentError):
    code = "content_load_error"
