"""
Season label fallback.

When the season table has no climate row for the trip, the completion
service may name the season (winter/spring/summer/autumn or tropical
wet/dry). The table result always wins when present.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from packlist.context.schemas import TripContext
from packlist.extraction.prompts import SEASON_SCHEMA, SEASON_SYSTEM_PROMPT, build_season_prompt
from packlist.extraction.response_parser import ParseError, parse_json_object
from packlist.season.schemas import SeasonInfo
from packlist.shared.llm.client import DEFAULT_MODEL, call_llm_json

logger = logging.getLogger(__name__)


def derive_season_label(
    ctx: TripContext,
    client: Optional[OpenAI],
    model: str = DEFAULT_MODEL,
) -> Optional[str]:
    """
    Ask the completion service for a season label.

    Returns:
        Short label, or None when unavailable, unknown or malformed
    """
    if client is None or not ctx.has_country() or not (ctx.month or ctx.start_date):
        return None
    try:
        raw = call_llm_json(
            SEASON_SYSTEM_PROMPT,
            build_season_prompt(ctx.to_dict()),
            SEASON_SCHEMA,
            client=client,
            model=model,
            schema_name="season",
        )
        data = parse_json_object(raw)
    except ParseError as e:
        logger.warning(f"Season label reply discarded: {e}")
        return None
    except OpenAIError as e:
        logger.warning(f"Season label unavailable: {e}")
        return None

    label = data.get("season")
    if not isinstance(label, str) or not label.strip():
        return None
    return label.strip()


def with_season_fallback(
    info: SeasonInfo,
    ctx: TripContext,
    client: Optional[OpenAI],
    model: str = DEFAULT_MODEL,
) -> SeasonInfo:
    """Fill a missing season label from the completion service."""
    if info.season:
        return info
    label = derive_season_label(ctx, client, model)
    if label is None:
        return info
    return info.model_copy(update={"season": label})
