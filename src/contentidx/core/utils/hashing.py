"""SHA-256 digests for snapshot change detection"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def canonical_digest(data: Any) -> str:
    """Hash a JSON-serializable value independent of mapping key order."""
    return sha256(json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str))
