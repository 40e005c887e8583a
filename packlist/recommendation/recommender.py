"""
Product recommender.

Scores and filters the cached product catalog against the resolved
context, adds trip-length quantities to clothing, de-duplicates by
(category, name), caps the list and prefixes a diagnostic record.
"""

import logging
from typing import Any, Dict, List

from packlist.context.schemas import TripContext
from packlist.recommendation.schemas import ProductRecord, debug_record
from packlist.recommendation.scoring import compute_quantity, select_and_rank
from packlist.shared.result import Empty, Unavailable
from packlist.shared.text import dedupe
from packlist.shared.vocabulary import canonical_activities
from packlist.tables.cache import TableCache

logger = logging.getLogger(__name__)

DEFAULT_MAX_PRODUCTS = 72


class ProductRecommender:
    """
    Recommendations from a cached product catalog.

    Args:
        cache: TableCache over the product catalog
        max_products: Cap on the number of returned products
    """

    def __init__(self, cache: TableCache, max_products: int = DEFAULT_MAX_PRODUCTS):
        self.cache = cache
        self.max_products = max_products

    def recommend(self, ctx: TripContext) -> List[Dict[str, Any]]:
        """
        Build the product list for a context.

        Returns:
            A diagnostic record followed by at most ``max_products`` products;
            a single diagnostic record naming the error when the catalog
            cannot be loaded
        """
        location = self.cache.location
        result = self.cache.get()
        if isinstance(result, Unavailable):
            logger.warning(f"Product catalog unavailable: {result.reason}")
            return [debug_record(f"CSV load error: {result.reason}", location)]
        if isinstance(result, Empty):
            logger.warning(f"Product catalog empty @ {location}")
            return [debug_record(f"CSV load error: CSV parsed empty @ {location}", location)]

        rows = result.value
        context_activities = canonical_activities(ctx.activities)
        ranked = select_and_rank(
            (ProductRecord.from_csv(row) for row in rows),
            set(context_activities),
        )

        products: List[ProductRecord] = []
        for scored in ranked:
            quantity = compute_quantity(ctx.duration_days, scored.row)
            record = scored.row
            if quantity is not None:
                record = record.model_copy(update={"quantity": quantity})
            products.append(record)

        products = dedupe(products, key=lambda p: (p.category, p.name))[: self.max_products]

        debug = debug_record(
            f"csv={location} | total={len(rows)} | ctxActs={','.join(context_activities)} "
            f"| out={len(products)} (activity+generic)",
            location,
        )
        logger.info(
            f"Recommended products | total={len(rows)}, selected={len(ranked)}, "
            f"out={len(products)}, activities={context_activities}"
        )
        return [debug] + [p.as_dict() for p in products]
