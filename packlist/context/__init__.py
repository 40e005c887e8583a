"""Canonical trip context model, merge rules and normalization."""

from packlist.context.schemas import Destination, TripContext
from packlist.context.merge import MergeRule, FIELD_DESCRIPTORS, merge, deep_merge
from packlist.context.normalize import (
    normalize,
    missing_required_slots,
    infer_duration_from_range,
    complete_period,
    REQUIRED_SLOTS,
)

__all__ = [
    "Destination",
    "TripContext",
    "MergeRule",
    "FIELD_DESCRIPTORS",
    "merge",
    "deep_merge",
    "normalize",
    "missing_required_slots",
    "infer_duration_from_range",
    "complete_period",
    "REQUIRED_SLOTS",
]
