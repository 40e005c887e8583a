"""
Product catalog schemas.

ProductRecord is the normalized form of one catalog row. Recognized
columns are mapped (with their legacy synonyms) onto typed fields;
every other column passes through unchanged as an extra field.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

DEBUG_CATEGORY = "DEBUG"

PRIORITY_SYNONYMS = ("priority", "prio", "importance", "tier", "priority_level")
NOTES_SYNONYMS = ("notes", "note", "Notes")

# Columns consumed by from_csv(); anything else is passed through
RECOGNIZED_COLUMNS = frozenset(
    {
        "category", "name", "weight_grams", "weight", "activities", "seasons",
        "url", "url_us", "url_nl", "image",
        "must_have", "musthave", "should_have", "shouldhave", "nice_to_have", "nicetohave",
        "qty_short", "qty_medium", "qty_long", "quantity",
    }
    | set(PRIORITY_SYNONYMS)
    | set(NOTES_SYNONYMS)
)


def parse_number(value: Any) -> Optional[float]:
    """Parse "1,5" / "1.5" / 1.5; None for blanks and garbage."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", ".")
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_count(value: Any) -> Optional[int]:
    number = parse_number(value)
    return int(number) if number is not None else None


def _first(row: Mapping[str, Any], keys) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip() != "":
            return str(value)
    return ""


class ProductRecord(BaseModel):
    """One catalog product, ready for the response."""

    category: str = ""
    name: str = ""
    weight_grams: Optional[float] = None
    activities: str = ""
    seasons: str = ""
    url: str = ""
    url_us: str = ""
    url_nl: str = ""
    image: str = ""
    notes: str = ""
    priority: str = ""
    must_have: str = ""
    should_have: str = ""
    nice_to_have: str = ""
    qty_short: Optional[int] = None
    qty_medium: Optional[int] = None
    qty_long: Optional[int] = None
    quantity: Optional[int] = Field(default=None, description="Only set for clothing with a known trip length")

    class Config:
        extra = "allow"

    @classmethod
    def from_csv(cls, row: Mapping[str, Any]) -> "ProductRecord":
        url = row.get("url") or ""
        extras = {k: v for k, v in row.items() if k not in RECOGNIZED_COLUMNS}
        return cls(
            category=row.get("category") or "",
            name=row.get("name") or "",
            weight_grams=parse_number(_first(row, ("weight_grams", "weight"))),
            activities=row.get("activities") or "",
            seasons=row.get("seasons") or "",
            url=url,
            url_us=row.get("url_us") or url,
            url_nl=row.get("url_nl") or "",
            image=row.get("image") or "",
            notes=_first(row, NOTES_SYNONYMS),
            priority=_first(row, PRIORITY_SYNONYMS),
            must_have=_first(row, ("must_have", "musthave")),
            should_have=_first(row, ("should_have", "shouldhave")),
            nice_to_have=_first(row, ("nice_to_have", "nicetohave")),
            qty_short=parse_count(row.get("qty_short")),
            qty_medium=parse_count(row.get("qty_medium")),
            qty_long=parse_count(row.get("qty_long")),
            **extras,
        )

    def as_dict(self) -> Dict[str, Any]:
        """Response shape; ``quantity`` only appears when it was computed."""
        data = self.model_dump()
        if data.get("quantity") is None:
            data.pop("quantity", None)
        return data


@dataclass
class ScoredProduct:
    """Ranking wrapper around one catalog record."""

    row: ProductRecord
    score: int
    is_generic: bool
    matches_activity: bool
    weight: float


def debug_record(name: str, url: str) -> Dict[str, Any]:
    """Diagnostic entry placed in front of the product list."""
    return {
        "category": DEBUG_CATEGORY,
        "name": name,
        "weight_grams": None,
        "activities": "",
        "seasons": "",
        "url": url,
        "image": "",
    }
