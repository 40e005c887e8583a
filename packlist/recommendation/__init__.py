"""Product scoring, filtering and quantity rules."""

from packlist.recommendation.schemas import ProductRecord, ScoredProduct, DEBUG_CATEGORY
from packlist.recommendation.scoring import compute_quantity, select_and_rank, sort_key
from packlist.recommendation.recommender import ProductRecommender

__all__ = [
    "ProductRecord",
    "ScoredProduct",
    "DEBUG_CATEGORY",
    "compute_quantity",
    "select_and_rank",
    "sort_key",
    "ProductRecommender",
]
