"""Season/climate lookups across multi-country itineraries."""

from packlist.season.schemas import SeasonRow, SeasonalRisk, SeasonInfo
from packlist.season.resolver import (
    SeasonResolver,
    in_season,
    month_abbrev_for,
    merge_season_infos,
)
from packlist.season.fallback import derive_season_label, with_season_fallback

__all__ = [
    "SeasonRow",
    "SeasonalRisk",
    "SeasonInfo",
    "SeasonResolver",
    "in_season",
    "month_abbrev_for",
    "merge_season_infos",
    "derive_season_label",
    "with_season_fallback",
]
