"""
Engine facade.

TripEngine owns the injected table caches and the completion client and
exposes the core entry points. Module-level functions delegate to a
lazily built default engine configured from the environment.
"""

import logging
import time
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from openai import OpenAI

from packlist.composer.rationale import compose_rationale as _compose_rationale
from packlist.context.merge import merge
from packlist.context.normalize import complete_period, normalize
from packlist.context.schemas import TripContext
from packlist.extraction.extractor import extract_slots as _extract_slots
from packlist.extraction.qa import (
    QAResult,
    apply_home_country,
    detect_home_country,
    evaluate_form,
    evaluate_utterance,
    merge_qa_into_context,
    raw_home_country,
)
from packlist.recommendation.recommender import ProductRecommender
from packlist.season.fallback import with_season_fallback
from packlist.season.resolver import SeasonResolver
from packlist.season.schemas import SeasonInfo
from packlist.shared.config import EngineConfig, get_config
from packlist.shared.llm.client import resolve_client
from packlist.shared.result import LookupResult
from packlist.tables.cache import TableCache
from packlist.tables.loader import CsvTableLoader

logger = logging.getLogger(__name__)


def build_table_cache(
    location: Optional[str],
    ttl_seconds: float,
    name: str,
    config: EngineConfig,
    clock: Callable[[], float] = time.monotonic,
) -> TableCache:
    """TableCache over a CSV location; an unset location gives an unconfigured cache."""
    source = (
        CsvTableLoader(location, delimiter=config.csv_delimiter, timeout=config.http_timeout)
        if location
        else None
    )
    return TableCache(source, ttl_seconds=ttl_seconds, name=name, clock=clock)


class TripEngine:
    """
    Trip context and recommendation engine.

    Args:
        config: Engine configuration (defaults to environment values)
        season_cache: Cache over the season table (built from config if omitted)
        product_cache: Cache over the product catalog (built from config if omitted)
        client: Completion client override (built from config if omitted)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        season_cache: Optional[TableCache] = None,
        product_cache: Optional[TableCache] = None,
        client: Optional[OpenAI] = None,
    ):
        self.config = config or get_config()
        self.season_cache = season_cache or build_table_cache(
            self.config.seasons_csv_url, self.config.seasons_ttl_seconds, "seasons", self.config
        )
        self.product_cache = product_cache or build_table_cache(
            self.config.products_csv_url, self.config.products_ttl_seconds, "products", self.config
        )
        self._client = client
        self.season_resolver = SeasonResolver(self.season_cache)
        self.recommender = ProductRecommender(self.product_cache, self.config.max_products)

    @property
    def client(self) -> Optional[OpenAI]:
        return resolve_client(self.config, self._client)

    # =========================================================================
    # Core entry points
    # =========================================================================

    def resolve_context(self, raw: Any) -> TripContext:
        return normalize(raw)

    def extract_slots(self, utterance: str, context: Optional[TripContext] = None) -> TripContext:
        return _extract_slots(utterance, context, config=self.config, client=self.client)

    def lookup_season(self, context: TripContext) -> LookupResult:
        return self.season_resolver.lookup(context)

    def resolve_season(self, context: TripContext, use_fallback: bool = False) -> SeasonInfo:
        """
        Season data for the context, empty when there is none.

        Args:
            context: Resolved trip context
            use_fallback: Ask the completion service when no season label was found
        """
        info = self.season_resolver.resolve(context)
        if use_fallback:
            info = with_season_fallback(info, context, self.client, self.config.model_json)
        return info

    def recommend_products(self, context: TripContext) -> List[Dict[str, Any]]:
        return self.recommender.recommend(context)

    def compose_rationale(self, context: TripContext, season_info: Optional[SeasonInfo] = None) -> str:
        return _compose_rationale(context, season_info)

    # =========================================================================
    # Form QA
    # =========================================================================

    def evaluate_qa(
        self,
        context: TripContext,
        qa_input: Optional[Mapping[str, Any]] = None,
        utterance: Optional[str] = None,
    ) -> Optional[QAResult]:
        """
        Evaluate the form (or, without a form, the utterance) and merge the
        fields that carry information into ``context`` in place.
        """
        client = self.client
        qa = evaluate_form(qa_input, client, self.config.model_json)
        if qa is None and not qa_input:
            qa = evaluate_utterance(utterance, client, self.config.model_json)
        merge_qa_into_context(context, qa)
        return qa

    def detect_home_country(
        self,
        context: TripContext,
        qa_input: Optional[Mapping[str, Any]] = None,
    ) -> TripContext:
        text = raw_home_country(context, qa_input)
        if text is None:
            return context
        home = detect_home_country(text, self.client, self.config.model_json)
        return apply_home_country(context, home)

    def merge_slots(self, context: TripContext, utterance: str) -> TripContext:
        """Extract from ``utterance`` and merge the result into ``context`` in place."""
        return merge(context, self.extract_slots(utterance, context))

    def trip_dates(self, context: TripContext, today: Optional[date] = None) -> Dict[str, Optional[str]]:
        """
        Concrete start and end dates implied by the context.

        The context itself is left untouched; a month plus duration maps to a
        range starting on the 1st of the next occurrence of that month.
        """
        completed = complete_period(context.model_copy(deep=True), today)
        return {"start_date": completed.start_date, "end_date": completed.end_date}


# =============================================================================
# Module-level entry points
# =============================================================================

_default_engine: Optional[TripEngine] = None


def get_default_engine() -> TripEngine:
    """Engine configured from the environment, built on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TripEngine()
    return _default_engine


def resolve_context(raw: Any) -> TripContext:
    return normalize(raw)


def extract_slots(utterance: str, context: Optional[TripContext] = None) -> TripContext:
    return get_default_engine().extract_slots(utterance, context)


def resolve_season(context: TripContext) -> SeasonInfo:
    return get_default_engine().resolve_season(context)


def recommend_products(context: TripContext) -> List[Dict[str, Any]]:
    return get_default_engine().recommend_products(context)


def compose_rationale(context: TripContext, season_info: Optional[SeasonInfo] = None) -> str:
    return _compose_rationale(context, season_info)
