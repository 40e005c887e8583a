"""
Season table schemas.

SeasonRow is one parsed line of the season/climate table; SeasonInfo is
the combined result for a whole itinerary.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from packlist.shared.text import split_comma_list


class SeasonRow(BaseModel):
    """One row of the season/climate reference table."""

    country: str = ""
    region: Optional[str] = None
    type: str = Field(default="", description="'climate' or 'risk'")
    label: str = ""
    level: Optional[str] = None
    note: str = ""
    start_month: str = Field(default="", description="3-letter English month")
    end_month: str = Field(default="", description="3-letter English month, may wrap")
    advice_flags: List[str] = Field(default_factory=list)
    item_tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_csv(cls, row: Mapping[str, Any]) -> "SeasonRow":
        """Build from a raw CSV row (header names are case-insensitive)."""
        lowered = {str(k).strip().lower(): v for k, v in row.items()}

        def cell(name: str) -> str:
            value = lowered.get(name)
            return str(value).strip() if value is not None else ""

        return cls(
            country=cell("country"),
            region=cell("region") or None,
            type=cell("type").lower(),
            label=cell("label"),
            level=cell("level") or None,
            note=cell("note"),
            start_month=cell("start_month"),
            end_month=cell("end_month"),
            advice_flags=split_comma_list(cell("advice_flags")),
            item_tags=split_comma_list(cell("item_tags")),
        )

    @property
    def is_climate(self) -> bool:
        return self.type == "climate"

    @property
    def is_risk(self) -> bool:
        return self.type == "risk"


class SeasonalRisk(BaseModel):
    type: str
    level: str = "unknown"
    note: str = ""

    def key(self) -> tuple:
        return self.type, self.level, self.note


class SeasonInfo(BaseModel):
    """
    Season data for a trip.

    advice_flags and item_tags keep first-seen order so output is
    deterministic across runs.
    """

    season: Optional[str] = None
    seasonal_risks: List[SeasonalRisk] = Field(default_factory=list)
    advice_flags: List[str] = Field(default_factory=list)
    item_tags: List[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "SeasonInfo":
        return cls()

    def is_empty(self) -> bool:
        return not (self.season or self.seasonal_risks or self.advice_flags or self.item_tags)

    def has_flag(self, flag: str) -> bool:
        return flag in self.advice_flags

    def to_dict(self) -> Dict[str, Any]:
        """Transport shape: flags as a {flag: true} mapping."""
        return {
            "season": self.season,
            "seasonalRisks": [risk.model_dump() for risk in self.seasonal_risks],
            "adviceFlags": {flag: True for flag in self.advice_flags},
            "itemTags": list(self.item_tags),
        }
