"""Content directory discovery: read raw records per kind from disk for a rebuild

This is the hosting-side storage collaborator; the engine itself never reads files.
"""

import json
from pathlib import Path
from typing import Any, Mapping

from contentidx.core.errors import ContentLoadError
from contentidx.core.models import ContentKind, RawDocument
from contentidx.core.schemas import resolve_kind


JSON_EXTENSIONS = {'.json'}
MD_EXTENSIONS = {'.md', '.mdx'}


def discover_files(path: Path, extensions: set[str]) -> list[Path]:
    """Return sorted files with the given extensions under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in extensions else []
    if not path.is_dir():
        return []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in extensions)


def load_json_records(path: Path) -> list[Any]:
    """Read one JSON file holding a record or a list of records."""
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ContentLoadError(f"Failed to read {path}: {e}") from e
    return data if isinstance(data, list) else [data]


def load_document(path: Path) -> RawDocument:
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ContentLoadError(f"Failed to read {path}: {e}") from e
    return RawDocument(source=path.stem, text=text)


def load_content_dir(root: Path, kind_dirs: Mapping[str, str]) -> dict[ContentKind, list[Any]]:
    """Read every kind's sub-directory of root into raw records, in sorted path order.

    Documents come from .md/.mdx files; every other kind from .json files.
    A missing sub-directory yields an empty list for that kind.
    """
    if not root.is_dir():
        raise ContentLoadError(f"Content directory not found: {root}")
    raw: dict[ContentKind, list[Any]] = {}
    for kind_name, subdir in kind_dirs.items():
        kind = resolve_kind(kind_name)
        base = root / subdir
        if kind == ContentKind.document:
            raw[kind] = [load_document(p) for p in discover_files(base, MD_EXTENSIONS)]
        else:
            raw[kind] = [rec for p in discover_files(base, JSON_EXTENSIONS) for rec in load_json_records(p)]
    return raw
