"""
QA evaluation of the four-field travel form.

The completion service reads either one free utterance or the four form
answers (destination, duration, period, activities) and reports, per
field, whether usable information is present. Only fields flagged with
hasInfo are merged into the context.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from packlist.context.merge import merge
from packlist.context.schemas import TripContext
from packlist.extraction.prompts import (
    HOME_COUNTRY_SCHEMA,
    HOME_COUNTRY_SYSTEM_PROMPT,
    QA_FIELDS,
    QA_FORM_SYSTEM_PROMPT,
    QA_SCHEMA,
    QA_UTTERANCE_SYSTEM_PROMPT,
    build_home_country_prompt,
    build_qa_form_prompt,
    build_qa_utterance_prompt,
)
from packlist.extraction.response_parser import ParseError, parse_json_object
from packlist.shared.llm.client import DEFAULT_MODEL, call_llm_json

logger = logging.getLogger(__name__)


# =============================================================================
# QA result models
# =============================================================================


class _QAField(BaseModel):
    has_info: bool = Field(default=False, alias="hasInfo")
    evidence: Optional[str] = None

    class Config:
        populate_by_name = True


class QADestination(_QAField):
    country: Optional[str] = None
    region: Optional[str] = None


class QADuration(_QAField):
    duration_days: Optional[int] = Field(default=None, alias="durationDays")
    phrase: Optional[str] = None


class QAPeriod(_QAField):
    month: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    phrase: Optional[str] = None


class QAActivities(_QAField):
    items: List[str] = Field(default_factory=list, alias="list")


class QAResult(BaseModel):
    """Per-field evaluation of a travel form or utterance."""

    destination: QADestination = Field(default_factory=QADestination)
    duration: QADuration = Field(default_factory=QADuration)
    period: QAPeriod = Field(default_factory=QAPeriod)
    activities: QAActivities = Field(default_factory=QAActivities)


@dataclass(frozen=True)
class HomeCountry:
    country: Optional[str] = None
    iso2: Optional[str] = None


# =============================================================================
# Evaluation
# =============================================================================


def _evaluate(system_prompt: str, user_prompt: str, client: OpenAI, model: str) -> Optional[QAResult]:
    try:
        raw = call_llm_json(
            system_prompt, user_prompt, QA_SCHEMA, client=client, model=model, schema_name="qa"
        )
        return QAResult.model_validate(parse_json_object(raw))
    except (ParseError, ValidationError) as e:
        logger.warning(f"QA evaluation reply discarded: {e}")
    except OpenAIError as e:
        logger.warning(f"QA evaluation unavailable: {e}")
    return None


def evaluate_utterance(
    utterance: str,
    client: Optional[OpenAI],
    model: str = DEFAULT_MODEL,
) -> Optional[QAResult]:
    """
    Evaluate one free utterance against the four form fields.

    Returns:
        QAResult, or None when no client is configured, the utterance is
        blank, or the reply is unusable
    """
    if client is None or not isinstance(utterance, str) or not utterance.strip():
        return None
    return _evaluate(QA_UTTERANCE_SYSTEM_PROMPT, build_qa_utterance_prompt(utterance), client, model)


def evaluate_form(
    qa_input: Optional[Mapping[str, Any]],
    client: Optional[OpenAI],
    model: str = DEFAULT_MODEL,
) -> Optional[QAResult]:
    """
    Evaluate the four form answers.

    Args:
        qa_input: Mapping with destination/duration/period/activities strings
        client: Completion client (None disables evaluation)
        model: Model identifier

    Returns:
        QAResult, or None when nothing was filled in or evaluation failed
    """
    if client is None or not qa_input:
        return None
    answers = {
        field: str(qa_input.get(field) or "").strip() for field in QA_FIELDS
    }
    if not any(answers.values()):
        return None
    return _evaluate(QA_FORM_SYSTEM_PROMPT, build_qa_form_prompt(answers), client, model)


def merge_qa_into_context(ctx: TripContext, qa: Optional[QAResult]) -> TripContext:
    """
    Apply the fields flagged with hasInfo to the context, in place.

    - destination: unioned into the itinerary
    - duration: overwrites when >= 1
    - period: a month replaces dates; a complete date pair replaces the month
    - activities: unioned, lowercased
    """
    if qa is None:
        return ctx

    payload: Dict[str, Any] = {}
    if qa.destination.has_info and qa.destination.country:
        payload["destinations"] = [
            {"country": qa.destination.country, "region": qa.destination.region}
        ]
    if qa.duration.has_info and qa.duration.duration_days and qa.duration.duration_days >= 1:
        payload["duration_days"] = qa.duration.duration_days
    if qa.period.has_info:
        if qa.period.month:
            payload["month"] = qa.period.month
        elif qa.period.start_date and qa.period.end_date:
            payload["start_date"] = qa.period.start_date
            payload["end_date"] = qa.period.end_date
    if qa.activities.has_info and qa.activities.items:
        payload["activities"] = qa.activities.items

    return merge(ctx, payload)


def derive_hints_from_qa(qa: Optional[QAResult]) -> Dict[str, Any]:
    """Flat hint mapping (raw phrases included) for prompt authors downstream."""
    hints: Dict[str, Any] = {}
    if qa is None:
        return hints
    if qa.duration.has_info:
        if qa.duration.duration_days:
            hints["durationDays"] = qa.duration.duration_days
        if qa.duration.phrase:
            hints["durationPhrase"] = qa.duration.phrase
    if qa.period.has_info:
        for key, value in (
            ("month", qa.period.month),
            ("startDate", qa.period.start_date),
            ("endDate", qa.period.end_date),
            ("periodPhrase", qa.period.phrase),
        ):
            if value:
                hints[key] = value
    if qa.destination.has_info:
        if qa.destination.country:
            hints["country"] = qa.destination.country
        if qa.destination.region:
            hints["region"] = qa.destination.region
    if qa.activities.has_info and qa.activities.items:
        hints["activities"] = list(qa.activities.items)
    return hints


# =============================================================================
# Home country
# =============================================================================


def detect_home_country(
    text: Optional[str],
    client: Optional[OpenAI],
    model: str = DEFAULT_MODEL,
) -> HomeCountry:
    """
    Normalize a free-text home country answer to an English name + ISO2 code.

    Returns:
        HomeCountry with both fields None when unknown or unavailable
    """
    if client is None or not isinstance(text, str) or not text.strip():
        return HomeCountry()
    try:
        raw = call_llm_json(
            HOME_COUNTRY_SYSTEM_PROMPT,
            build_home_country_prompt(text),
            HOME_COUNTRY_SCHEMA,
            client=client,
            model=model,
            schema_name="home_country",
        )
        data = parse_json_object(raw)
    except ParseError as e:
        logger.warning(f"Home country reply discarded: {e}")
        return HomeCountry()
    except OpenAIError as e:
        logger.warning(f"Home country detection unavailable: {e}")
        return HomeCountry()

    country = data.get("country") or None
    iso2 = data.get("iso2")
    return HomeCountry(
        country=str(country) if country else None,
        iso2=str(iso2).upper() if iso2 else None,
    )


def market_for(iso2: Optional[str]) -> str:
    if iso2 == "NL":
        return "nl"
    if iso2 == "US":
        return "us"
    return "intl"


def apply_home_country(ctx: TripContext, home: HomeCountry) -> TripContext:
    """Store a detected home country in the profile bag, in place."""
    if not home.country and not home.iso2:
        return ctx
    ctx.profile["home_country_detected"] = home.country
    ctx.profile["home_country_code"] = home.iso2
    ctx.profile["market"] = market_for(home.iso2)
    return ctx


def raw_home_country(ctx: TripContext, qa_input: Optional[Mapping[str, Any]] = None) -> Optional[str]:
    """Free-text home country from the profile or the form, if any."""
    for candidate in (
        ctx.profile.get("home_country"),
        ctx.profile.get("homeCountry"),
        (qa_input or {}).get("home_country"),
        (qa_input or {}).get("homeCountry"),
    ):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None
