"""
Context normalization and slot checks.

normalize() turns whatever the transport layer hands over into a
TripContext without ever raising; missing_required_slots() reports which
of the three required slots (country, duration, period) are still open.
"""

import json
import logging
from datetime import date, timedelta
from typing import Any, Dict, Mapping, Optional, Set

from packlist.context.merge import merge
from packlist.context.schemas import TripContext
from packlist.shared.vocabulary import month_abbrev, month_number

logger = logging.getLogger(__name__)

SLOT_COUNTRY = "country"
SLOT_DURATION = "duration_days"
SLOT_PERIOD = "period"

REQUIRED_SLOTS = (SLOT_COUNTRY, SLOT_DURATION, SLOT_PERIOD)


def _prepare_raw(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, TripContext):
        return raw.model_dump()
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw or "{}")
        except ValueError:
            return {}
    if not isinstance(raw, Mapping):
        return {}

    payload = dict(raw)
    # Legacy singular destination only seeds an empty itinerary
    legacy = payload.pop("destination", None)
    if legacy and not payload.get("destinations"):
        payload["destinations"] = [legacy]
    return payload


def normalize(raw: Any) -> TripContext:
    """
    Build a canonical TripContext from raw transport input.

    - every recognized field is present (unknown = None / empty collection)
    - a comma-separated activities string becomes a de-duplicated list
    - a singular ``destination`` is promoted into ``destinations`` when
      no itinerary was given
    - malformed input yields an empty context

    Normalizing an already normalized context returns an equal context.

    Args:
        raw: Dict, JSON string or TripContext

    Returns:
        A new TripContext
    """
    ctx = TripContext()
    try:
        merge(ctx, _prepare_raw(raw))
    except Exception as e:
        logger.warning(f"Malformed context input, using empty context: {e}")
        return TripContext()
    return ctx


def missing_required_slots(ctx: TripContext) -> Set[str]:
    """
    Report the required slots that are still unknown.

    - country: any leg has a country
    - duration_days: an explicit day count >= 1; a date range does NOT count
      (call infer_duration_from_range() first if that is wanted)
    - period: a month, or both start and end dates
    """
    missing: Set[str] = set()
    if not ctx.has_country():
        missing.add(SLOT_COUNTRY)
    if not ctx.duration_days or ctx.duration_days < 1:
        missing.add(SLOT_DURATION)
    if not ctx.has_period():
        missing.add(SLOT_PERIOD)
    return missing


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def infer_duration_from_range(ctx: TripContext) -> Optional[int]:
    """
    Inclusive day count of the context's date range.

    Returns None when either date is missing or the range is inverted.
    The context is not modified.
    """
    start = _parse_date(ctx.start_date)
    end = _parse_date(ctx.end_date)
    if start is None or end is None or end < start:
        return None
    return (end - start).days + 1


def complete_period(ctx: TripContext, today: Optional[date] = None) -> TripContext:
    """
    Derive missing period dates from what is known, in place.

    - start + duration -> end
    - end + duration -> start
    - month + duration -> range starting on the 1st of the next occurrence
      of that month (next year when the month is not later than this month)

    Args:
        ctx: Context to complete
        today: Reference date (defaults to date.today())

    Returns:
        The same context
    """
    days = ctx.duration_days
    if not days:
        return ctx

    start = _parse_date(ctx.start_date)
    end = _parse_date(ctx.end_date)
    span = timedelta(days=days - 1)

    if start and not end:
        ctx.set_date_range(None, (start + span).isoformat())
    elif end and not start:
        ctx.set_date_range((end - span).isoformat(), None)
    elif not start and not end and ctx.month:
        number = month_number(month_abbrev(ctx.month))
        if number:
            today = today or date.today()
            year = today.year + 1 if number <= today.month else today.year
            first = date(year, number, 1)
            ctx.set_date_range(first.isoformat(), (first + span).isoformat())
    return ctx
