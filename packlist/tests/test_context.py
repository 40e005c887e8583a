"""
Tests for the trip context model.

Tests normalization, the descriptor-driven merge, required-slot checks and
period completion.
"""

from datetime import date

import pytest

from packlist.context.merge import FIELD_DESCRIPTORS, MergeRule, deep_merge, merge
from packlist.context.normalize import (
    complete_period,
    infer_duration_from_range,
    missing_required_slots,
    normalize,
)
from packlist.context.schemas import Destination, TripContext


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_raw_context():
    """Raw transport payload using camelCase keys and a legacy destination."""
    return {
        "destination": {"country": "Vietnam", "region": "Hoi An"},
        "activities": "Surfing, hiking, surfing",
        "durationDays": 14,
        "month": "juli",
        "preferences": {"style": "backpacking"},
    }


# ============================================================================
# TestNormalize
# ============================================================================


class TestNormalize:
    """Tests for normalize()."""

    def test_fills_every_recognized_key(self):
        """An empty payload yields every key with an unknown value."""
        data = normalize({}).to_dict()
        assert data == {
            "destinations": [],
            "activities": [],
            "durationDays": None,
            "month": None,
            "startDate": None,
            "endDate": None,
            "preferences": {},
            "profile": {},
        }

    def test_promotes_legacy_destination(self):
        ctx = normalize(_make_raw_context())
        assert ctx.destinations == [Destination(country="Vietnam", region="Hoi An")]
        assert ctx.destination.country == "Vietnam"

    def test_legacy_destination_ignored_when_itinerary_present(self):
        raw = {
            "destination": {"country": "Laos"},
            "destinations": [{"country": "Vietnam"}, {"country": "Cambodia"}],
        }
        ctx = normalize(raw)
        assert [leg.country for leg in ctx.destinations] == ["Vietnam", "Cambodia"]

    def test_activities_string_split_and_deduplicated(self):
        ctx = normalize(_make_raw_context())
        assert ctx.activities == ["surfing", "hiking"]

    def test_accepts_snake_case_keys(self):
        ctx = normalize({"duration_days": "10", "start_date": "2025-07-01", "end_date": "2025-07-10"})
        assert ctx.duration_days == 10
        assert (ctx.start_date, ctx.end_date) == ("2025-07-01", "2025-07-10")

    def test_accepts_json_string(self):
        ctx = normalize('{"durationDays": 5, "destinations": [{"country": "Peru"}]}')
        assert ctx.duration_days == 5
        assert ctx.countries == ["Peru"]

    @pytest.mark.parametrize("raw", [None, 42, "not json", [1, 2], {"durationDays": "soon"}])
    def test_malformed_input_degrades(self, raw):
        """Malformed input never raises."""
        ctx = normalize(raw)
        assert isinstance(ctx, TripContext)
        assert ctx.duration_days is None

    def test_idempotent(self):
        once = normalize(_make_raw_context())
        twice = normalize(once)
        assert twice == once
        assert normalize(once.to_dict()) == once


# ============================================================================
# TestMerge
# ============================================================================


class TestMerge:
    """Tests for the descriptor-driven merge."""

    def test_every_field_has_a_rule(self):
        names = {d.name for d in FIELD_DESCRIPTORS}
        assert names == set(TripContext.model_fields.keys())
        assert all(isinstance(d.rule, MergeRule) for d in FIELD_DESCRIPTORS)

    def test_scalar_overwrites_only_when_valid(self):
        ctx = TripContext(duration_days=10)
        merge(ctx, {"durationDays": None})
        assert ctx.duration_days == 10
        merge(ctx, {"durationDays": 0})
        assert ctx.duration_days == 10
        merge(ctx, {"durationDays": 21})
        assert ctx.duration_days == 21

    def test_destinations_union_is_idempotent(self):
        ctx = TripContext()
        payload = {"destinations": [{"country": "Vietnam"}, {"country": "vietnam"}]}
        merge(ctx, payload)
        merge(ctx, payload)
        assert ctx.destinations == [Destination(country="Vietnam")]

    def test_destination_key_folds_country_synonyms(self):
        ctx = TripContext(destinations=[Destination(country="Indonesia")])
        merge(ctx, {"destination": {"country": "Indonesië"}})
        assert len(ctx.destinations) == 1

    def test_same_country_different_region_is_new_leg(self):
        ctx = TripContext(destinations=[Destination(country="Thailand")])
        merge(ctx, {"destinations": [{"country": "Thailand", "region": "Chiang Mai"}]})
        assert len(ctx.destinations) == 2

    def test_activities_union_lowercases(self):
        ctx = TripContext(activities=["hiking"])
        merge(ctx, {"activities": ["Hiking", "DIVING"]})
        merge(ctx, {"activities": ["Hiking", "DIVING"]})
        assert ctx.activities == ["hiking", "diving"]

    def test_month_clears_dates(self):
        ctx = TripContext(start_date="2025-07-01", end_date="2025-07-10")
        merge(ctx, {"month": "August"})
        assert ctx.month == "August"
        assert ctx.start_date is None and ctx.end_date is None

    def test_dates_clear_month(self):
        ctx = TripContext(month="July")
        merge(ctx, {"startDate": "2025-08-01", "endDate": "2025-08-20"})
        assert ctx.month is None
        assert ctx.start_date == "2025-08-01"

    def test_month_wins_over_dates_in_same_payload(self):
        ctx = TripContext()
        merge(ctx, {"month": "May", "startDate": "2025-08-01", "endDate": "2025-08-20"})
        assert ctx.month == "May"
        assert ctx.start_date is None

    def test_invalid_date_ignored(self):
        ctx = TripContext(month="May")
        merge(ctx, {"startDate": "next tuesday"})
        assert ctx.month == "May"

    def test_nested_preferences_merge(self):
        ctx = TripContext(preferences={"style": "luxury", "budget": {"max": 100, "tags": ["a"]}})
        merge(ctx, {"preferences": {"budget": {"tags": ["b"], "currency": None}, "pace": "slow"}})
        assert ctx.preferences == {
            "style": "luxury",
            "budget": {"max": 100, "tags": ["b"]},
            "pace": "slow",
        }

    def test_unknown_keys_ignored(self):
        ctx = TripContext()
        merge(ctx, {"weather": "sunny"})
        assert ctx == TripContext()

    def test_merge_from_context(self):
        ctx = TripContext(duration_days=7)
        merge(ctx, TripContext(destinations=[Destination(country="Japan")]))
        assert ctx.duration_days == 7
        assert ctx.countries == ["Japan"]


class TestDeepMerge:
    """Tests for deep_merge()."""

    def test_replaces_lists_and_skips_none(self):
        target = {"a": [1, 2], "b": 1}
        deep_merge(target, {"a": [3], "b": None})
        assert target == {"a": [3], "b": 1}

    def test_creates_missing_branches(self):
        target = {"x": 1}
        deep_merge(target, {"x": {"y": 2}})
        assert target == {"x": {"y": 2}}


# ============================================================================
# TestSlots
# ============================================================================


class TestMissingRequiredSlots:
    """Tests for missing_required_slots() and infer_duration_from_range()."""

    def test_all_missing(self):
        assert missing_required_slots(TripContext()) == {"country", "duration_days", "period"}

    def test_country_from_any_leg(self):
        ctx = TripContext(destinations=[Destination(region="Bali"), Destination(country="Indonesia")])
        assert "country" not in missing_required_slots(ctx)

    def test_single_date_is_not_a_period(self):
        ctx = TripContext(start_date="2025-07-01")
        assert "period" in missing_required_slots(ctx)

    def test_date_range_does_not_satisfy_duration(self):
        ctx = TripContext(
            destinations=[Destination(country="Peru")],
            start_date="2025-07-01",
            end_date="2025-07-14",
        )
        assert missing_required_slots(ctx) == {"duration_days"}

    def test_infer_duration_is_inclusive(self):
        ctx = TripContext(start_date="2025-07-01", end_date="2025-07-14")
        assert infer_duration_from_range(ctx) == 14
        assert ctx.duration_days is None

    def test_infer_duration_rejects_inverted_range(self):
        ctx = TripContext(start_date="2025-07-14", end_date="2025-07-01")
        assert infer_duration_from_range(ctx) is None


class TestCompletePeriod:
    """Tests for complete_period()."""

    def test_end_from_start(self):
        ctx = complete_period(TripContext(duration_days=10, start_date="2025-07-01"))
        assert ctx.end_date == "2025-07-10"

    def test_start_from_end(self):
        ctx = complete_period(TripContext(duration_days=3, end_date="2025-07-03"))
        assert ctx.start_date == "2025-07-01"

    def test_month_rolls_to_next_year(self):
        ctx = complete_period(TripContext(duration_days=7, month="maart"), today=date(2025, 6, 15))
        assert (ctx.start_date, ctx.end_date) == ("2026-03-01", "2026-03-07")
        assert ctx.month is None

    def test_month_later_this_year(self):
        ctx = complete_period(TripContext(duration_days=2, month="Dec"), today=date(2025, 6, 15))
        assert ctx.start_date == "2025-12-01"

    def test_no_duration_no_change(self):
        ctx = complete_period(TripContext(month="July"))
        assert ctx.month == "July" and ctx.start_date is None
