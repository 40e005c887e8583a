"""
Tests for rationale and follow-up question composition.
"""

from packlist.composer.rationale import compose_followup_question, compose_rationale
from packlist.context.normalize import REQUIRED_SLOTS, SLOT_DURATION, SLOT_PERIOD
from packlist.context.schemas import Destination, TripContext
from packlist.season.schemas import SeasonInfo


# ============================================================================
# TestComposeRationale
# ============================================================================


class TestComposeRationale:
    """Tests for compose_rationale()."""

    def test_full_sentence(self):
        ctx = TripContext(destinations=[Destination(country="Vietnam")], duration_days=14)
        season = SeasonInfo(
            season="wet",
            advice_flags=["mosquito", "rain"],
            item_tags=["humidity"],
        )
        assert compose_rationale(ctx, season) == (
            "Tailored for Vietnam during wet, for 14 days. We prioritized rain protection, "
            "mosquito prevention, humidity & quick-dry fabrics based on seasonal conditions."
        )

    def test_unknowns(self):
        assert compose_rationale(TripContext()) == (
            "Tailored for unknown country, for an unspecified duration."
        )

    def test_multi_leg_countries_distinct(self):
        ctx = TripContext(
            destinations=[
                Destination(country="Thailand"),
                Destination(country="Laos"),
                Destination(country="Thailand", region="Chiang Mai"),
            ],
            duration_days=30,
        )
        assert compose_rationale(ctx).startswith("Tailored for Thailand, Laos, for 30 days.")

    def test_unrelated_flags_ignored(self):
        ctx = TripContext(destinations=[Destination(country="Iceland")], duration_days=7)
        season = SeasonInfo(season="winter", item_tags=["layers", "thermal"])
        assert compose_rationale(ctx, season) == "Tailored for Iceland during winter, for 7 days."

    def test_deterministic(self):
        ctx = TripContext(destinations=[Destination(country="Peru")], duration_days=10)
        season = SeasonInfo(advice_flags=["sun"])
        assert compose_rationale(ctx, season) == compose_rationale(ctx, season)


# ============================================================================
# TestComposeFollowupQuestion
# ============================================================================


class TestComposeFollowupQuestion:
    """Tests for compose_followup_question()."""

    def test_nothing_missing(self):
        assert compose_followup_question(set(), TripContext()) is None

    def test_all_missing(self):
        question = compose_followup_question(REQUIRED_SLOTS, TripContext())
        assert question.startswith("Could you tell me your destination")
        assert "known so far" not in question

    def test_echoes_known_facts(self):
        ctx = TripContext(destinations=[Destination(country="Peru")], month="July")
        question = compose_followup_question({SLOT_DURATION}, ctx)
        assert question == (
            "Could you tell me how many days you will travel?"
            " (known so far: destination: Peru, month: July)"
        )

    def test_slot_order_is_stable(self):
        question = compose_followup_question([SLOT_PERIOD, SLOT_DURATION], TripContext())
        assert question.index("how many days") < question.index("when you travel")
