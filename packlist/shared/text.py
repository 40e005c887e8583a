"""Text folding helpers shared by extraction, season and product matching."""

import re
import unicodedata
from typing import Any, List

_LIST_SEPARATORS = re.compile(r"[,;|/]+")


def fold(value: Any) -> str:
    """Lower-case, strip combining marks and surrounding whitespace."""
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFKD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


def tokenize_list(value: Any) -> List[str]:
    """Split a delimited cell ("hiking; city/Beach") into folded tokens."""
    if not value:
        return []
    return [tok for tok in (fold(part) for part in _LIST_SEPARATORS.split(str(value))) if tok]


def split_comma_list(value: Any) -> List[str]:
    """Split a plain comma list, keeping original case."""
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


def dedupe(items, key=None) -> list:
    """Keep the first occurrence of every key, preserving order."""
    seen = set()
    out = []
    for item in items:
        k = key(item) if key else item
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return out
