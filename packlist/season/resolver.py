"""
Season resolver.

Joins the trip context against the season/climate table once per
itinerary leg and combines the per-leg results:

- first non-null season wins (legs in itinerary order)
- risks are concatenated and de-duplicated by (type, level, note)
- advice flags and item tags are unioned in first-seen order
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from packlist.context.schemas import Destination, TripContext
from packlist.season.schemas import SeasonalRisk, SeasonInfo, SeasonRow
from packlist.shared.result import Empty, LookupResult, Ok, Unavailable
from packlist.shared.text import dedupe, fold
from packlist.shared.vocabulary import country_key, month_abbrev, month_number, MONTHS_EN
from packlist.tables.cache import TableCache

logger = logging.getLogger(__name__)

LegKey = Tuple[str, str, str]


def in_season(month: Optional[str], start: Optional[str], end: Optional[str]) -> bool:
    """
    Whether ``month`` lies in the inclusive range [start, end].

    Ranges whose start is after their end wrap the year boundary
    (Nov-Feb contains Dec and Jan).
    """
    m = month_number(month_abbrev(month))
    a = month_number(month_abbrev(start))
    b = month_number(month_abbrev(end))
    if not m or not a or not b:
        return False
    if a <= b:
        return a <= m <= b
    return m >= a or m <= b


def month_abbrev_for(ctx: TripContext) -> Optional[str]:
    """Month of the trip: the month field first, else the start date's month."""
    if ctx.month:
        return month_abbrev(ctx.month)
    if ctx.start_date:
        try:
            return MONTHS_EN[date.fromisoformat(ctx.start_date[:10]).month - 1]
        except ValueError:
            return None
    return None


def leg_key(leg: Destination, month: Optional[str]) -> Optional[LegKey]:
    """Lookup key of one leg, or None when country or month is unknown."""
    country = country_key(leg.country)
    if not country or not month:
        return None
    return country, fold(leg.region), month


def row_matches(row: SeasonRow, key: LegKey) -> bool:
    country, region, month = key
    if country_key(row.country) != country:
        return False
    row_region = fold(row.region)
    if row_region and row_region != region:
        return False
    return in_season(month, row.start_month, row.end_month)


def season_for_leg(rows: Iterable[SeasonRow], key: LegKey) -> SeasonInfo:
    """Season data of a single leg."""
    hits = [row for row in rows if row_matches(row, key)]

    season = next((row.label for row in hits if row.is_climate and row.label), None)
    risks = [
        SeasonalRisk(
            type=row.label.lower(),
            level=(row.level or "unknown").lower(),
            note=row.note or "",
        )
        for row in hits
        if row.is_risk
    ]
    flags = dedupe(flag for row in hits for flag in row.advice_flags)
    tags = dedupe(tag for row in hits for tag in row.item_tags)
    return SeasonInfo(season=season, seasonal_risks=risks, advice_flags=flags, item_tags=tags)


def merge_season_infos(infos: Sequence[SeasonInfo]) -> SeasonInfo:
    """Combine per-leg results in itinerary order."""
    season = next((info.season for info in infos if info.season), None)
    risks = dedupe(
        (risk for info in infos for risk in info.seasonal_risks),
        key=SeasonalRisk.key,
    )
    flags = dedupe(flag for info in infos for flag in info.advice_flags)
    tags = dedupe(tag for info in infos for tag in info.item_tags)
    return SeasonInfo(season=season, seasonal_risks=risks, advice_flags=flags, item_tags=tags)


class SeasonResolver:
    """
    Season lookups against a cached season table.

    Args:
        cache: TableCache over the season table
    """

    def __init__(self, cache: TableCache):
        self.cache = cache

    def rows(self) -> LookupResult:
        """Parsed season rows, or the cache's Empty/Unavailable outcome."""
        return self.cache.get().map(
            lambda raw: [SeasonRow.from_csv(r) for r in raw]
        )

    def lookup(self, ctx: TripContext) -> LookupResult:
        """
        Season data for every leg of the itinerary, combined.

        Returns:
            Ok(SeasonInfo) when at least one leg matched, Empty() when
            nothing matched (or no leg is resolvable), Unavailable(reason)
            when the table cannot be loaded
        """
        month = month_abbrev_for(ctx)
        keys: List[LegKey] = [
            k for k in (leg_key(leg, month) for leg in ctx.destinations) if k is not None
        ]
        if not keys:
            return Empty()

        table = self.rows()
        if not table.is_ok:
            return table

        infos = [season_for_leg(table.value, k) for k in keys]
        merged = merge_season_infos(infos)
        if merged.is_empty():
            return Empty()
        return Ok(merged)

    def resolve(self, ctx: TripContext) -> SeasonInfo:
        """Like lookup(), unwrapped; empty SeasonInfo when there is no data."""
        result = self.lookup(ctx)
        if isinstance(result, Unavailable):
            logger.warning(f"Season table unavailable: {result.reason}")
        return result.value_or(SeasonInfo.empty())
