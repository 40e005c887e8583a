"""
Deterministic extraction tier.

Pattern tables over case- and diacritic-folded text. Every finder returns
None (or an empty list) when nothing matches, so absence of a match leaves
the corresponding context field unknown.
"""

import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from packlist.shared.text import fold
from packlist.shared.vocabulary import (
    ACTIVITY_SYNONYMS,
    COUNTRY_SYNONYMS,
    MONTH_SYNONYMS,
    compile_vocabulary,
)

logger = logging.getLogger(__name__)

_COUNTRY_PATTERNS = compile_vocabulary(COUNTRY_SYNONYMS)
_ACTIVITY_PATTERNS = compile_vocabulary(ACTIVITY_SYNONYMS, allow_suffix=True)

# Month forms that are also ordinary words or names ("may", "Jan", "mar")
_AMBIGUOUS_MONTH_FORMS = frozenset({"may", "jan", "mar"})
_MONTH_CUES = r"(?:in|during|early|late|mid|begin|eind|half|around|rond|of|until|tot|from|vanaf|next)"

_MONTH_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = []
for _abbrev, _forms in MONTH_SYNONYMS.items():
    _plain = sorted({f for f in _forms if f not in _AMBIGUOUS_MONTH_FORMS}, key=len, reverse=True)
    _guarded = sorted({f for f in _forms if f in _AMBIGUOUS_MONTH_FORMS}, key=len, reverse=True)
    _alternatives = [rf"\b{re.escape(f)}\b" for f in _plain]
    _alternatives += [rf"\b{_MONTH_CUES}\s+{re.escape(f)}\b" for f in _guarded]
    _MONTH_PATTERNS.append((_abbrev, re.compile("|".join(_alternatives))))

_DAYS_RE = re.compile(r"(\d{1,3})\s*(?:dagen|dag|dgn|days?|d)\b")
_WEEKS_RE = re.compile(r"(\d{1,2})\s*(?:weken|week|weeks|wk|w)\b")
_MONTHS_RE = re.compile(r"(\d{1,2})\s*(?:maanden|maand|months?|mnd)\b")

_DATE_RANGE_RE = re.compile(
    r"(\d{1,2})[-/.](\d{1,2})[-/.](\d{2,4}).{0,30}?(\d{1,2})[-/.](\d{1,2})[-/.](\d{2,4})"
)

_VAGUE_WEEKS_RE = re.compile(
    r"\b(?:a\s+)?(?:couple\s+(?:of\s+)?|few\s+)weeks\b|\bpaar\s+(?:weken|weekjes)\b"
)
_VAGUE_MONTHS_RE = re.compile(
    r"\b(?:a\s+)?(?:couple\s+(?:of\s+)?|few\s+)months\b|\bpaar\s+maanden\b"
)

VAGUE_WEEKS_DAYS = 14


def _scan_vocabulary(text: str, patterns) -> List[str]:
    """Every canonical value mentioned in ``text``, ordered by first position."""
    hits: List[Tuple[int, str]] = []
    for canonical, pattern in patterns:
        match = pattern.search(text)
        if match:
            hits.append((match.start(), canonical))
    hits.sort(key=lambda hit: hit[0])
    return [canonical for _, canonical in hits]


def find_countries(text: str) -> List[str]:
    """Canonical English names of every country mentioned, in order of appearance."""
    return _scan_vocabulary(fold(text), _COUNTRY_PATTERNS)


def find_activities(text: str) -> List[str]:
    """Canonical activity tags mentioned, in order of appearance."""
    return _scan_vocabulary(fold(text), _ACTIVITY_PATTERNS)


def find_month(text: str) -> Optional[str]:
    """Abbreviation of the first month mentioned ("Jul"), or None."""
    months = _scan_vocabulary(fold(text), _MONTH_PATTERNS)
    return months[0] if months else None


def find_duration_days(text: str, vague_months_days: int = 60) -> Optional[int]:
    """
    Trip length in days from explicit counts or vague phrases.

    Explicit counts win over vague phrases; days over weeks over months.

    Args:
        text: Free text
        vague_months_days: Day count used for "a couple of months"

    Returns:
        Day count >= 1, or None
    """
    m = fold(text)

    explicit = _DAYS_RE.search(m)
    if explicit:
        days = int(explicit.group(1))
    else:
        weeks = _WEEKS_RE.search(m)
        months = _MONTHS_RE.search(m)
        if weeks:
            days = int(weeks.group(1)) * 7
        elif months:
            days = int(months.group(1)) * 30
        elif _VAGUE_WEEKS_RE.search(m):
            days = VAGUE_WEEKS_DAYS
        elif _VAGUE_MONTHS_RE.search(m):
            days = vague_months_days
        else:
            return None
    return days if days >= 1 else None


def to_iso(year: str, month: str, day: str) -> Optional[str]:
    """ISO date from d-m-y parts; two-digit years are read as 20yy."""
    y = int(year)
    if len(year) <= 2:
        y += 2000
    try:
        return date(y, int(month), int(day)).isoformat()
    except ValueError:
        return None


def find_date_range(text: str) -> Optional[Tuple[str, str]]:
    """First explicit "d-m-y ... d-m-y" pair as ISO dates, or None."""
    match = _DATE_RANGE_RE.search(fold(text))
    if not match:
        return None
    d1, m1, y1, d2, m2, y2 = match.groups()
    start = to_iso(y1, m1, d1)
    end = to_iso(y2, m2, d2)
    if start is None or end is None:
        logger.debug(f"Ignoring invalid date range: {match.group(0)!r}")
        return None
    return start, end


def scan_utterance(utterance: str, vague_months_days: int = 60) -> Dict[str, Any]:
    """
    Run every deterministic finder over one utterance.

    Args:
        utterance: Free text in English or Dutch
        vague_months_days: Day count used for "a couple of months"

    Returns:
        Partial context payload containing only the keys that matched
    """
    payload: Dict[str, Any] = {}
    if not utterance or not utterance.strip():
        return payload

    countries = find_countries(utterance)
    if countries:
        payload["destinations"] = [{"country": c, "region": None} for c in countries]

    days = find_duration_days(utterance, vague_months_days)
    if days is not None:
        payload["durationDays"] = days

    date_range = find_date_range(utterance)
    if date_range is not None:
        payload["startDate"], payload["endDate"] = date_range

    month = find_month(utterance)
    if month is not None:
        payload["month"] = month

    activities = find_activities(utterance)
    if activities:
        payload["activities"] = activities

    return payload
