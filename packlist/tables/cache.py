"""
Time-boxed cache for reference tables.

A TableCache holds one immutable CacheEntry (rows + fetch time). Refreshes
replace the entry in a single assignment, so concurrent readers see either
the old table or the new one, never a mix.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from packlist.shared.result import Empty, LookupResult, Ok, Unavailable
from packlist.tables.loader import TableLoadError

logger = logging.getLogger(__name__)

Row = Dict[str, str]


class TableSource(Protocol):
    """Anything that can load rows and report where they come from."""

    location: str

    def load(self) -> List[Row]:
        ...


@dataclass(frozen=True)
class CacheEntry:
    """Rows of one successful fetch and the clock value at fetch time."""

    rows: Tuple[Row, ...]
    fetched_at: float


class TableCache:
    """
    Cached access to one reference table.

    Args:
        source: Loader for the table; None means the table is not configured
        ttl_seconds: Validity window of a cached entry
        name: Label used in logs and diagnostics
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        source: Optional[TableSource],
        ttl_seconds: float,
        name: str = "table",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    @property
    def location(self) -> str:
        return self.source.location if self.source is not None else ""

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and (self._clock() - entry.fetched_at) < self.ttl_seconds

    def invalidate(self) -> None:
        self._entry = None

    def get(self, force: bool = False) -> LookupResult[Tuple[Row, ...]]:
        """
        Return the cached rows, refetching when expired.

        Args:
            force: Refetch even if the cached entry is still valid

        Returns:
            Ok(rows), Empty() for a table without data rows, or
            Unavailable(reason) when the table cannot be loaded
        """
        entry = self._entry
        if not force and entry is not None and self.is_fresh():
            return Ok(entry.rows)

        if self.source is None:
            return Unavailable(f"{self.name} table not configured")

        try:
            rows = self.source.load()
        except TableLoadError as e:
            logger.warning(f"[table={self.name}] Load failed: {e}")
            return Unavailable(str(e))

        if not rows:
            logger.warning(f"[table={self.name}] Parsed empty @ {self.location}")
            return Empty()

        new_entry = CacheEntry(rows=tuple(rows), fetched_at=self._clock())
        self._entry = new_entry
        logger.debug(f"[table={self.name}] Cached {len(new_entry.rows)} rows")
        return Ok(new_entry.rows)
