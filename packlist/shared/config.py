"""
Engine configuration.

Centralizes tunable settings for the packlist engine (reference table
locations, cache lifetimes, completion model, ranking limits) so behavior
can be changed without touching the pipeline wiring.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Band allowed for "a couple of months" style phrases
VAGUE_MONTHS_MIN_DAYS = 60
VAGUE_MONTHS_MAX_DAYS = 90


@dataclass
class EngineConfig:
    """
    Configuration for the packlist engine.

    Attributes:
        openai_api_key: API key for the completion service; None disables
            every assisted feature
        model_json: Model used for structured (JSON) extraction calls
        products_csv_url: Location of the product catalog (URL or path)
        seasons_csv_url: Location of the season table (URL or path)
        csv_delimiter: Field delimiter of both reference tables
        seasons_ttl_seconds: Validity window of the cached season table
        products_ttl_seconds: Validity window of the cached product table
        max_products: Maximum number of recommended products
        vague_months_days: Day count used for "a couple of months"
        http_timeout: Timeout for reference table downloads (seconds)
    """

    # Completion service
    openai_api_key: Optional[str] = None
    model_json: str = "gpt-4o-mini"

    # Reference tables
    products_csv_url: Optional[str] = None
    seasons_csv_url: Optional[str] = None
    csv_delimiter: str = ","
    seasons_ttl_seconds: float = 6 * 60 * 60
    products_ttl_seconds: float = 10 * 60
    http_timeout: float = 15.0

    # Recommendation rules
    max_products: int = 72

    # Extraction rules
    vague_months_days: int = VAGUE_MONTHS_MIN_DAYS

    def __post_init__(self) -> None:
        clamped = min(max(self.vague_months_days, VAGUE_MONTHS_MIN_DAYS), VAGUE_MONTHS_MAX_DAYS)
        if clamped != self.vague_months_days:
            logger.warning(
                f"vague_months_days={self.vague_months_days} outside "
                f"{VAGUE_MONTHS_MIN_DAYS}-{VAGUE_MONTHS_MAX_DAYS}, using {clamped}"
            )
            self.vague_months_days = clamped

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _env_str(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def _env_number(name: str, default, cast=float):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def load_config_from_env() -> EngineConfig:
    """
    Build a configuration from environment variables (.env is loaded on import).

    Returns:
        EngineConfig populated from OPENAI_* / *_CSV_URL / PACKLIST_* variables
    """
    return EngineConfig(
        openai_api_key=_env_str("OPENAI_API_KEY"),
        model_json=_env_str("OPENAI_MODEL_JSON") or EngineConfig.model_json,
        products_csv_url=_env_str("PRODUCTS_CSV_URL"),
        seasons_csv_url=_env_str("SEASONS_CSV_URL"),
        csv_delimiter=_env_str("PACKLIST_CSV_DELIMITER") or EngineConfig.csv_delimiter,
        seasons_ttl_seconds=_env_number(
            "PACKLIST_SEASONS_TTL_SECONDS", EngineConfig.seasons_ttl_seconds
        ),
        products_ttl_seconds=_env_number(
            "PACKLIST_PRODUCTS_TTL_SECONDS", EngineConfig.products_ttl_seconds
        ),
        max_products=_env_number("PACKLIST_MAX_PRODUCTS", EngineConfig.max_products, int),
        vague_months_days=_env_number(
            "PACKLIST_VAGUE_MONTHS_DAYS", EngineConfig.vague_months_days, int
        ),
        http_timeout=_env_number("PACKLIST_HTTP_TIMEOUT", EngineConfig.http_timeout),
    )


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()


def get_config(
    openai_api_key: Optional[str] = None,
    model_json: Optional[str] = None,
    products_csv_url: Optional[str] = None,
    seasons_csv_url: Optional[str] = None,
    max_products: Optional[int] = None,
    vague_months_days: Optional[int] = None,
    from_env: bool = True,
) -> EngineConfig:
    """
    Create a configuration with optional overrides.

    Args:
        openai_api_key: Override for the completion service key
        model_json: Override for the extraction model
        products_csv_url: Override for the product catalog location
        seasons_csv_url: Override for the season table location
        max_products: Override for the recommendation cap
        vague_months_days: Override for the "couple of months" estimate
        from_env: Start from environment values instead of defaults

    Returns:
        EngineConfig with specified overrides applied
    """
    base = load_config_from_env() if from_env else DEFAULT_CONFIG
    return EngineConfig(
        openai_api_key=openai_api_key or base.openai_api_key,
        model_json=model_json or base.model_json,
        products_csv_url=products_csv_url or base.products_csv_url,
        seasons_csv_url=seasons_csv_url or base.seasons_csv_url,
        csv_delimiter=base.csv_delimiter,
        seasons_ttl_seconds=base.seasons_ttl_seconds,
        products_ttl_seconds=base.products_ttl_seconds,
        http_timeout=base.http_timeout,
        max_products=max_products or base.max_products,
        vague_months_days=vague_months_days or base.vague_months_days,
    )
