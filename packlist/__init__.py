"""
Packlist: trip context and packing-list recommendation engine.

Modules:
- context: Canonical TripContext, merge rules, normalization
- extraction: Deterministic + assisted slot extraction, form QA
- season: Season/climate lookups per itinerary leg
- recommendation: Product scoring, filtering and quantities
- composer: Deterministic rationale and follow-up text
- graph: LangGraph pipeline over the stages
- engine: TripEngine facade and module-level entry points
"""

from packlist.context import TripContext, Destination, normalize, merge, missing_required_slots
from packlist.engine import (
    TripEngine,
    resolve_context,
    extract_slots,
    resolve_season,
    recommend_products,
    compose_rationale,
)

__all__ = [
    "TripContext",
    "Destination",
    "normalize",
    "merge",
    "missing_required_slots",
    "TripEngine",
    "resolve_context",
    "extract_slots",
    "resolve_season",
    "recommend_products",
    "compose_rationale",
]
