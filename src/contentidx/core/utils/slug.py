"""URL-safe slug derivation for documents"""

import re
import unicodedata


def slugify(text: str) -> str:
    """Convert text to a lowercase, ASCII, hyphen-separated URL-safe slug."""
    text = unicodedata.normalize('NFKD', str(text)).encode('ascii', 'ignore').decode('ascii')
    text = text.lower()
    text = re.sub(r'[^a-z0-9\s_-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')
