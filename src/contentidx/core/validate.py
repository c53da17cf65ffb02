"""Record validation: check raw records and documents against their kind's schema

Validation is total. Every violation of a record is collected so one rejected
record reports all of its problems at once; a record with any violation is
never admitted.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pydantic import HttpUrl, TypeAdapter, ValidationError

from contentidx.core.errors import (
    ConstraintViolationError,
    InvalidEnumValueError,
    InvalidUrlError,
    MalformedFrontMatterError,
    MissingFieldError,
    RecordValidationError,
    TypeMismatchError,
)
from contentidx.core.frontmatter import split
from contentidx.core.models import ContentKind, Document, FieldSpec, FieldType, RawDocument, Record, Schema
from contentidx.core.schemas import SchemaRegistry, default_registry, resolve_kind
from contentidx.core.utils.slug import slugify


logger = logging.getLogger(__name__)

RESERVED_KEYS = ("id", "order")

_url_adapter = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class ValidationResult:
    """Either a validated record or the full list of its violations."""
    record: Optional[Record]
    errors: tuple[RecordValidationError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.record is not None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _type_name(value: Any) -> str:
    return type(value).__name__


def _check_string(value: Any, spec: FieldSpec, err: dict) -> tuple[Any, list]:
    if not isinstance(value, str):
        return None, [TypeMismatchError(f"expected string, got {_type_name(value)}", **err)]
    if spec.max_length is not None and len(value) > spec.max_length:
        return None, [ConstraintViolationError(f"length {len(value)} exceeds max_length {spec.max_length}", **err)]
    return value, []


def _check_number(value: Any, spec: FieldSpec, err: dict) -> tuple[Any, list]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None, [TypeMismatchError(f"expected number, got {_type_name(value)}", **err)]
    return value, []


def _check_enum(value: Any, spec: FieldSpec, err: dict) -> tuple[Any, list]:
    if not isinstance(value, str):
        return None, [TypeMismatchError(f"expected string enum value, got {_type_name(value)}", **err)]
    if value not in spec.allowed_values:
        allowed = ", ".join(sorted(spec.allowed_values))
        return None, [InvalidEnumValueError(f"{value!r} is not one of: {allowed}", **err)]
    return value, []


def _check_url(value: Any, spec: FieldSpec, err: dict) -> tuple[Any, list]:
    value, errors = _check_string(value, spec, err)
    if errors:
        return None, errors
    try:
        url = _url_adapter.validate_python(value)
    except ValidationError:
        return None, [InvalidUrlError(f"{value!r} is not an absolute URL", **err)]
    if url.scheme != "https":
        return None, [InvalidUrlError(f"{value!r} must use https, not {url.scheme}", **err)]
    return value, []


def _check_string_list(value: Any, spec: FieldSpec, err: dict) -> tuple[Any, list]:
    if not isinstance(value, (list, tuple)):
        return None, [TypeMismatchError(f"expected list of strings, got {_type_name(value)}", **err)]
    errors: list = []
    bad = [i for i, item in enumerate(value) if not isinstance(item, str)]
    if bad:
        errors.append(TypeMismatchError(f"list items at positions {bad} are not strings", **err))
    items = [item for item in value if isinstance(item, str)]
    if any(not item.strip() for item in items):
        errors.append(ConstraintViolationError("list items must not be blank", **err))
    if spec.max_length is not None:
        long_items = [item for item in items if len(item) > spec.max_length]
        if long_items:
            errors.append(ConstraintViolationError(
                f"{len(long_items)} item(s) exceed max_length {spec.max_length}", **err,
            ))
    # Lists are sets: duplicates collapse, first occurrence keeps its position.
    distinct = tuple(dict.fromkeys(items))
    if spec.max_items is not None and len(distinct) > spec.max_items:
        errors.append(ConstraintViolationError(
            f"{len(distinct)} items exceed max_items {spec.max_items}", **err,
        ))
    return (None, errors) if errors else (distinct, [])


_CHECKS = {
    FieldType.string: _check_string,
    FieldType.number: _check_number,
    FieldType.enum: _check_enum,
    FieldType.url: _check_url,
    FieldType.string_list: _check_string_list,
}


def _check_id(raw: Mapping[str, Any], kind: ContentKind) -> tuple[Optional[str], list]:
    rid = raw.get("id")
    err = {"kind": kind.value, "field": "id"}
    if _is_blank(rid):
        return None, [MissingFieldError("required field is missing", **err)]
    if not isinstance(rid, str):
        return None, [TypeMismatchError(f"expected string id, got {_type_name(rid)}", **err)]
    return rid.strip(), []


def _check_order(raw: Mapping[str, Any], kind: ContentKind, rid: Optional[str]) -> tuple[Optional[int], list]:
    order = raw.get("order")
    if order is None:
        return None, []
    if isinstance(order, bool) or not isinstance(order, int):
        return None, [TypeMismatchError(
            f"expected integer order, got {_type_name(order)}", kind=kind.value, record_id=rid, field="order",
        )]
    return order, []


def _check_fields(
    raw: Mapping[str, Any],
    schema: Schema,
    rid: Optional[str],
    ) -> tuple[dict[str, Any], list]:
    """Validate every declared field; returns (normalized fields, errors)."""
    fields: dict[str, Any] = {}
    errors: list = []
    for name, spec in schema.fields.items():
        err = {"kind": schema.kind.value, "record_id": rid, "field": name}
        value = raw.get(name)
        if _is_blank(value):
            if spec.required:
                errors.append(MissingFieldError("required field is missing", **err))
            continue
        normalized, field_errors = _CHECKS[spec.type](value, spec, err)
        if field_errors:
            errors.extend(field_errors)
        else:
            fields[name] = normalized

    # Raw keys need not all be strings.
    undeclared = sorted((k for k in raw if k not in schema.fields and k not in RESERVED_KEYS), key=str)
    if undeclared:
        logger.debug("Dropping undeclared fields from %s/%s: %s", schema.kind.value, rid, undeclared)
    return fields, errors


def _validate_mapping(raw: Any, schema: Schema) -> tuple[Optional[str], Optional[int], dict[str, Any], list]:
    kind = schema.kind
    if not isinstance(raw, Mapping):
        return None, None, {}, [TypeMismatchError(f"expected a mapping record, got {_type_name(raw)}", kind=kind.value)]
    rid, errors = _check_id(raw, kind)
    order, order_errors = _check_order(raw, kind, rid)
    fields, field_errors = _check_fields(raw, schema, rid)
    return rid, order, fields, errors + order_errors + field_errors


def validate(
    kind: Union[ContentKind, str],
    raw: Any,
    registry: Optional[SchemaRegistry] = None,
    ) -> ValidationResult:
    """Validate a raw record of the given kind, collecting every violation.

    Documents are routed through validate_document. Raises UnknownKindError
    for an undeclared kind.
    """
    registry = registry or default_registry()
    resolved = resolve_kind(kind)
    if resolved == ContentKind.document:
        return validate_document(raw, registry)

    schema = registry.get_schema(resolved)
    rid, order, fields, errors = _validate_mapping(raw, schema)
    if errors:
        return ValidationResult(record=None, errors=tuple(errors))
    return ValidationResult(record=Record(
        kind=resolved, id=rid, order=order, fields=MappingProxyType(fields),
    ))


def _document_id(front_matter: Mapping[str, Any], source: Optional[str]) -> Any:
    """Document id: explicit front matter id, else source stem, else slugified title.

    YAML types unquoted numbers itself, so an integer id (`id: 2024`) is taken as its text.
    """
    rid = front_matter.get("id")
    if isinstance(rid, int) and not isinstance(rid, bool):
        return str(rid)
    if not _is_blank(rid):
        return rid
    if source:
        return PurePosixPath(source).stem
    title = front_matter.get("title")
    if isinstance(title, str) and title.strip():
        return slugify(title)
    return None


def validate_document(
    raw: Union[RawDocument, str, Mapping[str, Any]],
    registry: Optional[SchemaRegistry] = None,
    ) -> ValidationResult:
    """Split a raw markdown document and validate its front matter against the document schema.

    Accepts raw text, a RawDocument, or a mapping with `text` (and optional `source`).
    """
    registry = registry or default_registry()
    schema = registry.get_schema(ContentKind.document)
    if isinstance(raw, str):
        raw = RawDocument(text=raw)
    elif not isinstance(raw, RawDocument):
        try:
            raw = RawDocument.model_validate(raw)
        except ValidationError:
            return ValidationResult(record=None, errors=(TypeMismatchError(
                f"expected raw document text, got {_type_name(raw)}", kind=ContentKind.document.value,
            ),))

    try:
        parts = split(raw.text)
    except MalformedFrontMatterError as e:
        e.kind, e.record_id = ContentKind.document.value, raw.source
        return ValidationResult(record=None, errors=(e,))

    record_input = dict(parts.front_matter)
    record_input["id"] = _document_id(parts.front_matter, raw.source)
    rid, order, fields, errors = _validate_mapping(record_input, schema)

    slug = ""
    if rid is not None:
        slug = slugify(fields.get("slug") or rid)
        if not slug:
            errors.append(ConstraintViolationError(
                "derived slug is empty", kind=ContentKind.document.value, record_id=rid, field="slug",
            ))
    if errors:
        return ValidationResult(record=None, errors=tuple(errors))
    return ValidationResult(record=Document(
        kind=ContentKind.document,
        id=rid,
        order=order,
        fields=MappingProxyType(fields),
        slug=slug,
        body=parts.body,
    ))
