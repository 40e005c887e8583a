"""
Product scoring, ordering and quantity rules.

Pure functions over ProductRecords; the recommender wires them to the
cached catalog.
"""

from typing import Iterable, List, Optional, Set, Tuple

from packlist.recommendation.schemas import ProductRecord, ScoredProduct
from packlist.shared.text import fold, tokenize_list
from packlist.shared.vocabulary import GENERIC_ACTIVITY_TAGS, canonical_activities

ACTIVITY_MATCH_SCORE = 2
MISSING_WEIGHT = 999_999

CLOTHING_CATEGORIES = frozenset({"clothing", "kleding"})
SHORT_TRIP_MAX_DAYS = 15
MEDIUM_TRIP_MAX_DAYS = 30


def product_activities(record: ProductRecord) -> Set[str]:
    """Canonical activity tags of a catalog row."""
    return set(canonical_activities(tokenize_list(record.activities)))


def score_product(record: ProductRecord, context_activities: Set[str]) -> ScoredProduct:
    tags = product_activities(record)
    is_generic = not tags or bool(tags & GENERIC_ACTIVITY_TAGS)
    matches_activity = bool(context_activities) and bool(tags & context_activities)

    score = ACTIVITY_MATCH_SCORE if matches_activity else 0
    weight = record.weight_grams if record.weight_grams else MISSING_WEIGHT
    return ScoredProduct(
        row=record,
        score=score,
        is_generic=is_generic,
        matches_activity=matches_activity,
        weight=weight,
    )


def sort_key(scored: ScoredProduct) -> Tuple[int, float, str, str]:
    """Score descending, weight ascending, then name (case-insensitive, raw)."""
    name = scored.row.name or ""
    return -scored.score, scored.weight, name.casefold(), name


def select_and_rank(
    records: Iterable[ProductRecord],
    context_activities: Set[str],
) -> List[ScoredProduct]:
    """Keep generic and activity-matching rows, in deterministic order."""
    scored = [score_product(r, context_activities) for r in records]
    selected = [s for s in scored if s.is_generic or s.matches_activity]
    return sorted(selected, key=sort_key)


def compute_quantity(days: Optional[int], record: ProductRecord) -> Optional[int]:
    """
    Recommended count of a clothing item for a trip length.

    <=15 days: short band, 16-30: medium, 31+: long; a missing band falls
    back to the nearest available one. Non-clothing rows, unknown
    duration, or rows without any band yield None.
    """
    if not days or fold(record.category) not in CLOTHING_CATEGORIES:
        return None

    short, medium, long_ = record.qty_short, record.qty_medium, record.qty_long
    if days <= SHORT_TRIP_MAX_DAYS:
        preference = (short, medium, long_)
    elif days <= MEDIUM_TRIP_MAX_DAYS:
        preference = (medium, long_, short)
    else:
        preference = (long_, medium, short)
    return next((q for q in preference if q is not None), None)
