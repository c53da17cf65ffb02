"""Front-matter extraction: split a markdown document into its YAML header and body"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import yaml

from contentidx.core.errors import MalformedFrontMatterError


FENCE = '---'
CLOSING_FENCES = {'---', '...'}


@dataclass(frozen=True)
class FrontMatter:
    front_matter: dict[str, Any]
    body: str


def _iso_dates(value: Any) -> Any:
    """Recursively convert YAML date/datetime values to ISO-8601 strings."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _iso_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_iso_dates(v) for v in value]
    return value


def split(text: str) -> FrontMatter:
    """Return (front_matter, body) for a document; the body is passed through untouched.

    Text without a leading `---` fence has no front matter. Raises
    MalformedFrontMatterError for an unterminated fence, unparseable YAML, or
    a header that is not a YAML mapping.
    """
    if text.startswith('\ufeff'):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FENCE:
        return FrontMatter(front_matter={}, body=text)

    end = next((i for i in range(1, len(lines)) if lines[i].rstrip() in CLOSING_FENCES), None)
    if end is None:
        raise MalformedFrontMatterError("front matter fence is never closed", field="front_matter")

    header = ''.join(lines[1:end])
    try:
        fm = yaml.safe_load(header) if header.strip() else {}
    except (yaml.YAMLError, ValueError) as e:
        # Out-of-range timestamps (2024-02-30) surface as ValueError from the constructor.
        raise MalformedFrontMatterError(f"invalid YAML front matter: {e}", field="front_matter") from e
    if fm is None:
        fm = {}
    if not isinstance(fm, dict):
        raise MalformedFrontMatterError(
            f"front matter must be a mapping, got {type(fm).__name__}", field="front_matter",
        )
    return FrontMatter(
        front_matter={str(k): _iso_dates(v) for k, v in fm.items()},
        body=''.join(lines[end + 1:]),
    )
