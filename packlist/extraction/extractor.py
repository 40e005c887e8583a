"""
Hybrid slot extractor.

Runs the deterministic tier first, then (when a completion client is
available) merges the assisted tier on top. The result is a partial
TripContext; the caller merges it into the request context.
"""

import logging
from typing import Optional

from openai import OpenAI

from packlist.context.merge import merge
from packlist.context.schemas import Destination, TripContext
from packlist.extraction.assisted import enrich_context
from packlist.extraction.patterns import scan_utterance
from packlist.shared.config import DEFAULT_CONFIG, EngineConfig
from packlist.shared.llm.client import resolve_client
from packlist.shared.vocabulary import canonical_country

logger = logging.getLogger(__name__)


def _canonicalize_legs(partial: TripContext) -> None:
    legs = []
    for leg in partial.destinations:
        legs.append(Destination(country=canonical_country(leg.country), region=leg.region))
    partial.destinations = []
    merge(partial, {"destinations": [leg.model_dump() for leg in legs]})


def extract_slots(
    utterance: str,
    context: Optional[TripContext] = None,
    config: EngineConfig = DEFAULT_CONFIG,
    client: Optional[OpenAI] = None,
) -> TripContext:
    """
    Extract structured trip fields from free text.

    Args:
        utterance: The user's free text
        context: Current request context (only read, for the assisted tier)
        config: Engine configuration
        client: Completion client override; defaults to the configured one

    Returns:
        Partial TripContext holding only what the utterance states
    """
    partial = TripContext()
    if not isinstance(utterance, str) or not utterance.strip():
        return partial

    baseline = scan_utterance(utterance, config.vague_months_days)
    merge(partial, baseline)
    logger.debug(f"Deterministic tier fields: {sorted(baseline.keys())}")

    llm = resolve_client(config, client)
    if llm is not None:
        enriched = enrich_context(context or TripContext(), utterance, llm, config.model_json)
        if enriched:
            merge(partial, enriched)

    _canonicalize_legs(partial)
    return partial
