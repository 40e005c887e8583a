"""
Tests for slot extraction.

Tests the deterministic pattern tier, the response parser and the hybrid
extractor with a fake completion client.
"""

import httpx
import pytest
from openai import APIConnectionError

from packlist.context.schemas import Destination, TripContext
from packlist.extraction.extractor import extract_slots
from packlist.extraction.patterns import (
    find_activities,
    find_countries,
    find_date_range,
    find_duration_days,
    find_month,
    scan_utterance,
)
from packlist.extraction.response_parser import (
    ParseError,
    extract_json_from_response,
    parse_context_response,
)
from packlist.shared.config import EngineConfig
from packlist.shared.llm.client import call_llm
from packlist.tests.conftest import make_empty_reply_client, make_llm_client


# ============================================================================
# TestPatterns
# ============================================================================


class TestCountries:
    """Tests for country detection."""

    def test_every_mention_in_order(self):
        text = "Eerst naar Cambodja, daarna Vietnam en tot slot Laos"
        assert find_countries(text) == ["Cambodia", "Vietnam", "Laos"]

    def test_diacritics_and_case_insensitive(self):
        assert find_countries("Drie weken INDONESIË") == ["Indonesia"]

    def test_multiword_names(self):
        assert find_countries("backpacking in new  zealand") == ["New Zealand"]

    def test_no_partial_words(self):
        assert find_countries("we love perugia") == []


class TestMonths:
    """Tests for month detection."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("in juli naar Vietnam", "Jul"),
            ("during September", "Sep"),
            ("eind okt", "Oct"),
            ("late in Maart", "Mar"),
            ("in may we go", "May"),
            ("half mei", "May"),
        ],
    )
    def test_month_names(self, text, expected):
        assert find_month(text) == expected

    def test_may_as_verb_is_ignored(self):
        assert find_month("it may rain a lot") is None

    def test_first_month_wins(self):
        assert find_month("from August until October") == "Aug"


class TestDuration:
    """Tests for day/week/month counts and vague phrases."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("10 dagen", 10),
            ("21 days", 21),
            ("5d trip", 5),
            ("3 weken", 21),
            ("2 weeks", 14),
            ("2 maanden", 60),
            ("a couple of weeks", 14),
            ("een paar weekjes", 14),
            ("a few months", 60),
            ("paar maanden", 60),
        ],
    )
    def test_counts(self, text, expected):
        assert find_duration_days(text) == expected

    def test_days_win_over_weeks(self):
        assert find_duration_days("2 weeks, so 16 days") == 16

    def test_vague_months_uses_configured_value(self):
        assert find_duration_days("a couple of months", vague_months_days=75) == 75

    def test_zero_is_unknown(self):
        assert find_duration_days("0 days") is None

    def test_nothing(self):
        assert find_duration_days("somewhere warm") is None


class TestDateRange:
    """Tests for explicit date pairs."""

    def test_dutch_range(self):
        assert find_date_range("van 1-7-2025 t/m 14-07-2025") == ("2025-07-01", "2025-07-14")

    def test_two_digit_years_and_separators(self):
        assert find_date_range("03/08/25 until 17.08.25") == ("2025-08-03", "2025-08-17")

    def test_invalid_date_ignored(self):
        assert find_date_range("31-02-2025 - 05-03-2025") is None

    def test_too_far_apart(self):
        text = "1-7-2025" + " and then a very long story about nothing " + "14-7-2025"
        assert find_date_range(text) is None


class TestActivities:
    """Tests for activity keyword groups."""

    def test_canonical_tags_in_order(self):
        text = "We gaan duiken, surfen en wat wandelen"
        assert find_activities(text) == ["diving", "surfing", "hiking"]

    def test_inflected_forms(self):
        assert find_activities("kayaking and snorkelling") == ["boat", "diving"]

    def test_boots_are_not_boats(self):
        assert find_activities("new hiking boots") == ["hiking"]


class TestScanUtterance:
    """Tests for the combined deterministic tier."""

    def test_full_sentence(self):
        payload = scan_utterance("3 weken Vietnam en Laos in juli, vooral hiken en duiken")
        assert payload == {
            "destinations": [
                {"country": "Vietnam", "region": None},
                {"country": "Laos", "region": None},
            ],
            "durationDays": 21,
            "month": "Jul",
            "activities": ["hiking", "diving"],
        }

    def test_no_matches_leaves_fields_unknown(self):
        assert scan_utterance("hello there") == {}

    def test_blank(self):
        assert scan_utterance("   ") == {}


# ============================================================================
# TestResponseParser
# ============================================================================


class TestResponseParser:
    """Tests for JSON extraction from completion replies."""

    def test_fenced_block(self):
        raw = 'Sure!\n```json\n{"context": {"month": "May"}}\n```'
        assert parse_context_response(raw) == {"month": "May"}

    def test_trailing_prose(self):
        raw = '{"context": {"note": "a } brace"}} hope this helps'
        assert extract_json_from_response(raw) == '{"context": {"note": "a } brace"}}'

    def test_missing_context_key(self):
        with pytest.raises(ParseError):
            parse_context_response('{"month": "May"}')

    def test_context_not_object(self):
        with pytest.raises(ParseError):
            parse_context_response('{"context": ["May"]}')

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_context_response("not json at all")


# ============================================================================
# TestExtractSlots
# ============================================================================


class TestExtractSlots:
    """Tests for the hybrid extractor."""

    def test_deterministic_only_without_client(self):
        partial = extract_slots("2 weeks in Thailand in July", config=EngineConfig())
        assert partial.countries == ["Thailand"]
        assert partial.duration_days == 14
        assert partial.month == "Jul"

    def test_blank_utterance(self):
        assert extract_slots("", config=EngineConfig()) == TripContext()

    def test_assisted_tier_merges_on_baseline(self):
        client = make_llm_client(
            {
                "context": {
                    "destinations": [{"country": "Indonesië", "region": "Bali"}],
                    "activities": ["surfing"],
                    "durationDays": None,
                }
            }
        )
        partial = extract_slots(
            "2 weeks surfing on Bali, Indonesia", config=EngineConfig(), client=client
        )
        assert partial.destinations == [
            Destination(country="Indonesia"),
            Destination(country="Indonesia", region="Bali"),
        ]
        assert partial.activities == ["surfing"]
        assert partial.duration_days == 14
        client.chat.completions.create.assert_called_once()

    def test_malformed_reply_keeps_baseline(self):
        client = make_llm_client("I cannot help with that")
        partial = extract_slots("10 days in Peru", config=EngineConfig(), client=client)
        assert partial.countries == ["Peru"]
        assert partial.duration_days == 10

    def test_schema_mismatch_keeps_baseline(self):
        client = make_llm_client({"context": {"durationDays": "a while"}})
        partial = extract_slots("10 days in Peru", config=EngineConfig(), client=client)
        assert partial.duration_days == 10

    def test_network_failure_keeps_baseline(self, monkeypatch):
        monkeypatch.setattr(call_llm.retry, "sleep", lambda _: None)
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error = APIConnectionError(request=request)
        client = make_llm_client(error, error, error)
        partial = extract_slots("10 days in Peru", config=EngineConfig(), client=client)
        assert partial.countries == ["Peru"]

    def test_reply_without_choices_keeps_baseline(self):
        client = make_empty_reply_client()
        partial = extract_slots("3 weeks in Vietnam in July", config=EngineConfig(), client=client)
        assert partial.countries == ["Vietnam"]
        assert partial.duration_days == 21
        assert partial.month == "Jul"
        client.chat.completions.create.assert_called_once()
