"""
Deterministic explanation strings.

Built from the resolved context and season data only; no completion
service involved, so the same inputs always give the same text.
"""

from typing import Iterable, Optional

from packlist.context.normalize import SLOT_COUNTRY, SLOT_DURATION, SLOT_PERIOD
from packlist.context.schemas import TripContext
from packlist.season.schemas import SeasonInfo

UNKNOWN_COUNTRY = "unknown country"
UNKNOWN_DURATION = "an unspecified duration"

# (kind, key, clause) in output order
PRIORITY_CLAUSES = (
    ("flag", "rain", "rain protection"),
    ("flag", "mosquito", "mosquito prevention"),
    ("flag", "sun", "sun exposure"),
    ("tag", "humidity", "humidity & quick-dry fabrics"),
)

_SLOT_LABELS = {
    SLOT_COUNTRY: "your destination (country, optionally a region)",
    SLOT_DURATION: "how many days you will travel",
    SLOT_PERIOD: "when you travel (a month or exact dates)",
}


def list_countries(ctx: TripContext) -> str:
    """Distinct leg countries in itinerary order, comma separated."""
    return ", ".join(ctx.countries)


def compose_rationale(ctx: TripContext, season: Optional[SeasonInfo] = None) -> str:
    """
    One-paragraph explanation of why the list looks the way it does.

    Example:
        "Tailored for Vietnam during wet, for 14 days. We prioritized rain
        protection, humidity & quick-dry fabrics based on seasonal conditions."
    """
    season = season or SeasonInfo.empty()
    countries = list_countries(ctx) or UNKNOWN_COUNTRY
    days = f"{ctx.duration_days} days" if ctx.duration_days else UNKNOWN_DURATION
    season_bit = f" during {season.season}" if season.season else ""

    reasons = []
    for kind, key, clause in PRIORITY_CLAUSES:
        present = season.has_flag(key) if kind == "flag" else key in season.item_tags
        if present:
            reasons.append(clause)
    because = (
        f" We prioritized {', '.join(reasons)} based on seasonal conditions." if reasons else ""
    )
    return f"Tailored for {countries}{season_bit}, for {days}.{because}"


def compose_followup_question(missing: Iterable[str], ctx: TripContext) -> Optional[str]:
    """
    Question asking for the missing required slots, echoing known facts.

    Returns:
        The question, or None when nothing is missing
    """
    missing_set = set(missing)
    labels = [_SLOT_LABELS[slot] for slot in (SLOT_COUNTRY, SLOT_DURATION, SLOT_PERIOD) if slot in missing_set]
    if not labels:
        return None

    known = []
    if ctx.has_country():
        known.append(f"destination: {list_countries(ctx)}")
    if ctx.duration_days:
        known.append(f"duration: {ctx.duration_days} days")
    if ctx.month:
        known.append(f"month: {ctx.month}")
    if ctx.start_date and ctx.end_date:
        known.append(f"dates: {ctx.start_date} to {ctx.end_date}")
    hint = f" (known so far: {', '.join(known)})" if known else ""
    return f"Could you tell me {', '.join(labels)}?{hint}"
