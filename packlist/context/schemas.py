"""
Trip context schemas.

TripContext is the canonical, request-scoped state every pipeline stage
reads from. Field names are snake_case; the camelCase names used by the
transport layer (durationDays, startDate, endDate) are accepted as aliases
and produced by to_dict().
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from packlist.shared.text import fold
from packlist.shared.vocabulary import country_key


class Destination(BaseModel):
    """One itinerary leg."""

    country: Optional[str] = Field(default=None, description="Country name")
    region: Optional[str] = Field(default=None, description="Region, city or area")

    def key(self) -> Tuple[str, str]:
        """Identity used for de-duplication: folded (country, region)."""
        return country_key(self.country), fold(self.region)


class TripContext(BaseModel):
    """
    Canonical trip context.

    Invariants:
    - destinations is the only storage for country/region; `destination`
      is a read-only view of the first leg.
    - month and start_date/end_date are alternative period representations;
      set_month() and set_date_range() clear the other one.
    - unknown values are None, never missing keys.
    """

    destinations: List[Destination] = Field(
        default_factory=list, description="Itinerary legs in travel order"
    )
    activities: List[str] = Field(
        default_factory=list, description="Lowercase activity tags, no duplicates"
    )
    duration_days: Optional[int] = Field(
        default=None, alias="durationDays", description="Trip length in days (>= 1)"
    )
    month: Optional[str] = Field(default=None, description="Free-form month name")
    start_date: Optional[str] = Field(
        default=None, alias="startDate", description="ISO-8601 start date"
    )
    end_date: Optional[str] = Field(
        default=None, alias="endDate", description="ISO-8601 end date"
    )
    preferences: Dict[str, Any] = Field(
        default_factory=dict, description="Opaque preferences bag (style, budget, ...)"
    )
    profile: Dict[str, Any] = Field(
        default_factory=dict, description="Opaque traveller profile bag"
    )

    class Config:
        populate_by_name = True

    @property
    def destination(self) -> Optional[Destination]:
        return self.destinations[0] if self.destinations else None

    @property
    def countries(self) -> List[str]:
        """Distinct leg countries in itinerary order."""
        out: List[str] = []
        for leg in self.destinations:
            if leg.country and leg.country not in out:
                out.append(leg.country)
        return out

    def has_country(self) -> bool:
        return any(leg.country for leg in self.destinations)

    def has_period(self) -> bool:
        return bool(self.month) or bool(self.start_date and self.end_date)

    def set_month(self, month: str) -> None:
        self.month = month
        self.start_date = None
        self.end_date = None

    def set_date_range(self, start_date: Optional[str], end_date: Optional[str]) -> None:
        if start_date is not None:
            self.start_date = start_date
        if end_date is not None:
            self.end_date = end_date
        self.month = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with every key present, camelCase for the transport layer."""
        return self.model_dump(by_alias=True)
