"""Reference table loading and caching."""

from packlist.tables.loader import CsvTableLoader, TableLoadError, parse_csv, google_sheet_to_csv
from packlist.tables.cache import CacheEntry, TableCache

__all__ = [
    "CsvTableLoader",
    "TableLoadError",
    "parse_csv",
    "google_sheet_to_csv",
    "CacheEntry",
    "TableCache",
]
