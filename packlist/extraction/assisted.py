"""
Assisted extraction tier.

Asks the completion service to enrich the current context with facts the
utterance states explicitly. The reply is parsed, shape-validated and
returned as a partial payload; any failure is logged and yields None so
the deterministic baseline stands.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from packlist.context.schemas import Destination, TripContext
from packlist.extraction.prompts import ENRICH_SCHEMA, ENRICH_SYSTEM_PROMPT, build_enrich_prompt
from packlist.extraction.response_parser import ParseError, parse_context_response
from packlist.shared.llm.client import DEFAULT_MODEL, call_llm_json

logger = logging.getLogger(__name__)


class EnrichedContext(BaseModel):
    """Accepted shape of an enrichment reply's ``context`` object."""

    destinations: Optional[List[Destination]] = None
    destination: Optional[Destination] = None
    activities: Optional[Union[List[str], str]] = None
    duration_days: Optional[int] = Field(default=None, alias="durationDays")
    month: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    preferences: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


def validate_enrichment(raw_context: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate an enrichment payload and drop unknown/null fields.

    Raises:
        ParseError: If a recognized field has the wrong shape
    """
    try:
        enriched = EnrichedContext.model_validate(raw_context)
    except ValidationError as e:
        raise ParseError(f"Enrichment context has an invalid shape: {e}")
    return enriched.model_dump(exclude_none=True)


def enrich_context(
    context: TripContext,
    utterance: str,
    client: OpenAI,
    model: str = DEFAULT_MODEL,
) -> Optional[Dict[str, Any]]:
    """
    Run the assisted tier for one utterance.

    Args:
        context: Current request context (sent for reference)
        utterance: The user's free text
        client: Completion client
        model: Model identifier

    Returns:
        Validated partial payload, or None when the call or parsing failed
    """
    if not utterance or not utterance.strip():
        return None

    try:
        raw = call_llm_json(
            ENRICH_SYSTEM_PROMPT,
            build_enrich_prompt(context.to_dict(), utterance),
            ENRICH_SCHEMA,
            client=client,
            model=model,
            schema_name="context_enrichment",
        )
        payload = validate_enrichment(parse_context_response(raw))
    except ParseError as e:
        logger.warning(f"Assisted extraction reply discarded: {e}")
        return None
    except OpenAIError as e:
        logger.warning(f"Assisted extraction unavailable: {e}")
        return None

    logger.debug(f"Assisted extraction fields: {sorted(payload.keys())}")
    return payload
