"""
Text helpers: tag parsing, note text extraction and vector similarity.
"""

import math
import re
import uuid
from typing import Iterable, List, Optional, Sequence, Union

_HTML_TAG_RE = re.compile(r"<[^>]*>")
_MARKDOWN_CHARS_RE = re.compile(r"[#*`_~\[\]()]")
_WHITESPACE_RE = re.compile(r"\s+")


def parse_tags(value: Union[None, str, Iterable[str]]) -> List[str]:
    """
    Normalize tags given as a list or a comma separated string.

    Each tag is trimmed and blanks are dropped. Order is preserved and
    duplicates are removed.
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    tags: List[str] = []
    for item in items:
        if item is None:
            continue
        tag = str(item).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def tags_overlap(tags: Optional[Sequence[str]], wanted: Sequence[str]) -> bool:
    if not wanted:
        return True
    return bool(set(tags or []) & set(wanted))


def extract_text_from_content(content: Optional[str]) -> str:
    """Strip HTML tags and markdown markup from note content and collapse whitespace."""
    if not content:
        return ""
    text = _HTML_TAG_RE.sub(" ", content)
    text = _MARKDOWN_CHARS_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 for empty, mismatched or zero vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def is_uuid(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def estimate_tokens(text: Optional[str]) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text or "") / 4)
