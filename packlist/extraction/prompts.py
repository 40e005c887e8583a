"""
Prompt templates and JSON schemas for assisted extraction.

Each call pairs a system prompt with a strict JSON schema; the schemas are
shared by the strict json_schema request and the json_object fallback.
"""

import json
from typing import Any, Dict, Mapping

# =============================================================================
# Slot enrichment
# =============================================================================

ENRICH_SYSTEM_PROMPT = (
    "You enrich a travel context with facts the user states explicitly. "
    "Only fill fields that are clearly present in the sentence; anything "
    "not mentioned stays null. Country names in English. Dates as YYYY-MM-DD. "
    "Return ONLY JSON."
)

ENRICH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {"context": {"type": "object"}},
    "required": ["context"],
    "additionalProperties": True,
}


def build_enrich_prompt(context: Mapping[str, Any], utterance: str) -> str:
    return (
        f"Current context: {json.dumps(dict(context), ensure_ascii=False)}\n"
        f'Sentence: "{utterance}"\n'
        "Add the fields mentioned in the sentence; unknown stays null. "
        'Answer as {"context": {...}} using the same keys '
        "(destinations, activities, durationDays, month, startDate, endDate)."
    )


# =============================================================================
# QA evaluation (four-field travel form)
# =============================================================================

QA_UTTERANCE_SYSTEM_PROMPT = (
    "Read one user utterance and decide whether it contains usable information "
    "for four travel input fields: destination, duration, period, activities. "
    "Normalize to compact, machine-readable values. Be strict: set hasInfo=false "
    "unless the information is explicit or very likely. Answer ONLY as JSON."
)

QA_FORM_SYSTEM_PROMPT = (
    "Read four user input strings (destination, duration, period, activities). "
    "For each field decide whether it contains usable information and extract "
    "normalized values. Answer ONLY as JSON following the schema."
)

QA_DEFINITIONS = (
    "Definitions:\n"
    "- destination: country and optionally region/area/city.\n"
    "- duration: total number of days (estimates allowed: 'a few weeks' ~ 14 days, "
    "'2-3 weeks' -> choose 21 when in doubt).\n"
    "- period: a month name or a concrete startDate/endDate (YYYY-MM-DD). "
    "'Around new year' ~ 20 Dec - 10 Jan.\n"
    "- activities: list of words (hiking, surfing, diving, citytrip, ...).\n"
    "Fill the 'phrase' fields when the raw wording is useful."
)

QA_FIELDS = ("destination", "duration", "period", "activities")

_NULLABLE_STRING = {"type": ["string", "null"]}

QA_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "destination": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "hasInfo": {"type": "boolean"},
                "country": _NULLABLE_STRING,
                "region": _NULLABLE_STRING,
                "evidence": _NULLABLE_STRING,
            },
            "required": ["hasInfo", "country", "region", "evidence"],
        },
        "duration": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "hasInfo": {"type": "boolean"},
                "durationDays": {"type": ["integer", "null"]},
                "phrase": _NULLABLE_STRING,
                "evidence": _NULLABLE_STRING,
            },
            "required": ["hasInfo", "durationDays", "phrase", "evidence"],
        },
        "period": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "hasInfo": {"type": "boolean"},
                "month": _NULLABLE_STRING,
                "startDate": _NULLABLE_STRING,
                "endDate": _NULLABLE_STRING,
                "phrase": _NULLABLE_STRING,
                "evidence": _NULLABLE_STRING,
            },
            "required": ["hasInfo", "month", "startDate", "endDate", "phrase", "evidence"],
        },
        "activities": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "hasInfo": {"type": "boolean"},
                "list": {"type": "array", "items": {"type": "string"}},
                "evidence": _NULLABLE_STRING,
            },
            "required": ["hasInfo", "list", "evidence"],
        },
    },
    "required": ["destination", "duration", "period", "activities"],
}


def build_qa_utterance_prompt(utterance: str) -> str:
    return f'Utterance: "{utterance}"\n{QA_DEFINITIONS}'


def build_qa_form_prompt(qa_input: Mapping[str, str]) -> str:
    lines = [f'{field}="{qa_input.get(field) or ""}"' for field in QA_FIELDS]
    return (
        "\n".join(lines)
        + "\nRules: duration in days, period as month or start/end date, activities as a list. "
        "Be strict with hasInfo; fill phrase and evidence where useful."
    )

# =============================================================================
# Home country
# =============================================================================

HOME_COUNTRY_SYSTEM_PROMPT = (
    "Read a free-form answer (any language) and decide which country the person "
    "lives in. Normalize the country name to English (e.g. 'Nederland' -> "
    "'Netherlands') and give the ISO 3166-1 alpha-2 code (e.g. 'NL'). If you are "
    "not reasonably sure, set both fields to null. Answer ONLY as JSON."
)

HOME_COUNTRY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {"country": _NULLABLE_STRING, "iso2": _NULLABLE_STRING},
    "required": ["country", "iso2"],
}


def build_home_country_prompt(answer: str) -> str:
    return (
        f"Answer to 'Where do you live / what's your home country?': \"{answer}\".\n"
        "Determine country (English name) and iso2."
    )


# =============================================================================
# Season label fallback
# =============================================================================

SEASON_SYSTEM_PROMPT = (
    "Determine, if possible, the season (winter/spring/summer/autumn or tropical "
    "wet/dry) from the country and month or dates. Short answer, only the field "
    "'season'. Return JSON."
)

SEASON_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {"season": _NULLABLE_STRING},
    "required": ["season"],
}


def build_season_prompt(context: Mapping[str, Any]) -> str:
    return f"Context: {json.dumps(dict(context), ensure_ascii=False)}."
