"""
Data-driven merge of partial payloads into a TripContext.

Every recognized field declares one MergeRule. The merge walks the source
payload and dispatches on the rule instead of branching on value types:

- SCALAR: overwrite when the incoming value is non-null and valid
- PERIOD: like SCALAR, but month and the date pair clear each other
- UNION:  union with de-duplication (destinations, activities)
- NESTED: recursive dict merge; nested lists are replaced wholesale
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from packlist.context.schemas import Destination, TripContext
from packlist.shared.text import split_comma_list

logger = logging.getLogger(__name__)


class MergeRule(str, Enum):
    SCALAR = "scalar"
    PERIOD = "period"
    UNION = "union"
    NESTED = "nested"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Merge behavior of one TripContext field.

    Attributes:
        name: Attribute name on TripContext
        rule: How incoming values combine with existing ones
        coerce: Converts a raw payload value; returns None to reject it
        aliases: Extra payload keys that feed this field
    """

    name: str
    rule: MergeRule
    coerce: Callable[[Any], Any]
    aliases: tuple = ()


# =============================================================================
# Coercions (return None for values that must not overwrite anything)
# =============================================================================


def coerce_duration(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        days = int(float(str(value).strip()))
    except (TypeError, ValueError):
        return None
    return days if days >= 1 else None


def coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_iso_date(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = coerce_text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return None


def coerce_destination(value: Any) -> Optional[Destination]:
    if isinstance(value, Destination):
        return value if value.country else None
    if isinstance(value, str):
        country = coerce_text(value)
        return Destination(country=country) if country else None
    if isinstance(value, Mapping):
        country = coerce_text(value.get("country"))
        if not country:
            return None
        return Destination(country=country, region=coerce_text(value.get("region")))
    return None


def coerce_destinations(value: Any) -> Optional[List[Destination]]:
    if value is None:
        return None
    items = value if isinstance(value, (list, tuple)) else [value]
    legs = [leg for leg in (coerce_destination(item) for item in items) if leg is not None]
    return legs or None


def coerce_activities(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        items = split_comma_list(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v) for v in value if v is not None]
    else:
        return None
    tokens = [item.strip().lower() for item in items if item and item.strip()]
    return tokens or None


def coerce_mapping(value: Any) -> Optional[Dict[str, Any]]:
    return dict(value) if isinstance(value, Mapping) else None


# =============================================================================
# Field table
# =============================================================================

FIELD_DESCRIPTORS: tuple = (
    FieldDescriptor("destinations", MergeRule.UNION, coerce_destinations, ("destination",)),
    FieldDescriptor("activities", MergeRule.UNION, coerce_activities),
    FieldDescriptor("duration_days", MergeRule.SCALAR, coerce_duration, ("durationDays",)),
    FieldDescriptor("start_date", MergeRule.PERIOD, coerce_iso_date, ("startDate",)),
    FieldDescriptor("end_date", MergeRule.PERIOD, coerce_iso_date, ("endDate",)),
    FieldDescriptor("month", MergeRule.PERIOD, coerce_text),
    FieldDescriptor("preferences", MergeRule.NESTED, coerce_mapping),
    FieldDescriptor("profile", MergeRule.NESTED, coerce_mapping),
)

_KEY_TO_DESCRIPTOR: Dict[str, FieldDescriptor] = {}
for _descriptor in FIELD_DESCRIPTORS:
    _KEY_TO_DESCRIPTOR[_descriptor.name] = _descriptor
    for _alias in _descriptor.aliases:
        _KEY_TO_DESCRIPTOR[_alias] = _descriptor


def descriptor_for(key: str) -> Optional[FieldDescriptor]:
    return _KEY_TO_DESCRIPTOR.get(key)


# =============================================================================
# Merge primitives
# =============================================================================


def union_destinations(existing: List[Destination], incoming: List[Destination]) -> List[Destination]:
    """Append legs whose (country, region) key is not present yet."""
    merged = list(existing)
    seen = {leg.key() for leg in merged}
    for leg in incoming:
        k = leg.key()
        if k in seen:
            continue
        seen.add(k)
        merged.append(Destination(country=leg.country, region=leg.region))
    return merged


def union_activities(existing: List[str], incoming: List[str]) -> List[str]:
    """Append lowercase tokens not present yet, keeping first-seen order."""
    merged: List[str] = []
    for token in list(existing) + list(incoming):
        t = token.strip().lower()
        if t and t not in merged:
            merged.append(t)
    return merged


def deep_merge(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``source`` into ``target`` in place.

    Nested mappings merge key by key, lists are replaced wholesale, and
    scalars overwrite only when the incoming value is not None.
    """
    for key, value in source.items():
        if isinstance(value, Mapping):
            current = target.get(key)
            if not isinstance(current, dict):
                current = {}
                target[key] = current
            deep_merge(current, value)
        elif isinstance(value, (list, tuple)):
            target[key] = list(value)
        elif value is not None:
            target[key] = value
    return target


def _as_payload(source: Union[TripContext, Mapping[str, Any], None]) -> Dict[str, Any]:
    if source is None:
        return {}
    if isinstance(source, TripContext):
        return source.model_dump()
    if isinstance(source, Mapping):
        return dict(source)
    return {}


def merge(
    target: TripContext,
    source: Union[TripContext, Mapping[str, Any], None],
) -> TripContext:
    """
    Merge a partial payload into ``target`` in place.

    Args:
        target: Context to update
        source: Another TripContext or a partial dict (snake_case or camelCase keys)

    Returns:
        The updated target (same instance)
    """
    payload = _as_payload(source)
    if not payload:
        return target

    period: Dict[str, Any] = {}
    for key, raw_value in payload.items():
        descriptor = descriptor_for(key)
        if descriptor is None:
            logger.debug(f"Ignoring unknown context key: {key}")
            continue

        value = descriptor.coerce(raw_value)
        if value is None:
            continue

        if descriptor.rule is MergeRule.SCALAR:
            setattr(target, descriptor.name, value)
        elif descriptor.rule is MergeRule.PERIOD:
            period[descriptor.name] = value
        elif descriptor.rule is MergeRule.UNION:
            if descriptor.name == "destinations":
                target.destinations = union_destinations(target.destinations, value)
            else:
                target.activities = union_activities(target.activities, value)
        elif descriptor.rule is MergeRule.NESTED:
            deep_merge(getattr(target, descriptor.name), value)

    _apply_period(target, period)
    return target


def _apply_period(target: TripContext, period: Dict[str, Any]) -> None:
    # A month in the same payload wins over dates
    if "month" in period:
        target.set_month(period["month"])
    elif "start_date" in period or "end_date" in period:
        target.set_date_range(period.get("start_date"), period.get("end_date"))
