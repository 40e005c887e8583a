"""
Delimited reference table loading.

Fetches a tabular resource (HTTP URL, Google Sheets document or local
file) and parses it into row dictionaries keyed by the trimmed header row.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import httpx

logger = logging.getLogger(__name__)


class TableLoadError(Exception):
    """Raised when a reference table cannot be fetched or parsed."""

    pass


def google_sheet_to_csv(url: str) -> str:
    """
    Rewrite a Google Sheets document URL to its CSV export URL.

    Non-Sheets URLs are returned unchanged. The ``gid`` query parameter
    (selected tab) is carried over when present.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if "docs.google.com" not in (parsed.netloc or ""):
        return url
    if "/export" in parsed.path:
        return url

    parts = parsed.path.split("/")
    try:
        file_id = parts[parts.index("d") + 1]
    except (ValueError, IndexError):
        return url

    base = f"https://docs.google.com/spreadsheets/d/{file_id}/export?format=csv"
    gid = parse_qs(parsed.query).get("gid", [""])[0]
    if not gid and parsed.fragment.startswith("gid="):
        gid = parsed.fragment[len("gid="):]
    return f"{base}&gid={gid}" if gid else base


def parse_csv(text: str, delimiter: str = ",") -> List[Dict[str, str]]:
    """
    Parse delimited text with a header row into row dictionaries.

    Quoted fields may contain the delimiter and newlines; embedded quotes are
    escaped by doubling. Blank lines are skipped, headers and cells trimmed,
    and short rows padded with empty strings.

    Args:
        text: Raw table text
        delimiter: Single-character field delimiter

    Returns:
        List of rows keyed by header name
    """
    if not text:
        return []
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, quotechar='"')
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if not rows:
        return []

    headers = [h.strip() for h in rows[0]]
    out: List[Dict[str, str]] = []
    for cells in rows[1:]:
        row: Dict[str, str] = {}
        for idx, header in enumerate(headers):
            if not header:
                continue
            row[header] = cells[idx].strip() if idx < len(cells) else ""
        out.append(row)
    return out


class CsvTableLoader:
    """
    Loads one reference table from a URL or filesystem path.

    Attributes:
        location: Resolved location (Sheets URLs rewritten to CSV export)
        delimiter: Field delimiter
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        location: str,
        delimiter: str = ",",
        timeout: float = 15.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.location = google_sheet_to_csv(location.strip())
        self.delimiter = delimiter
        self.timeout = timeout
        self._http_client = http_client

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def fetch_text(self) -> str:
        """Download or read the raw table text."""
        if self.is_remote:
            return self._fetch_remote()
        return self._read_local()

    def _fetch_remote(self) -> str:
        try:
            if self._http_client is not None:
                response = self._http_client.get(self.location, timeout=self.timeout)
            else:
                with httpx.Client(follow_redirects=True) as client:
                    response = client.get(self.location, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TableLoadError(
                f"CSV fetch failed {e.response.status_code} @ {self.location}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TableLoadError(f"CSV fetch failed @ {self.location}: {e}") from e
        return response.text

    def _read_local(self) -> str:
        path = Path(self.location[len("file://"):] if self.location.startswith("file://") else self.location)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise TableLoadError(f"CSV read failed @ {path}: {e}") from e

    def load(self) -> List[Dict[str, str]]:
        """
        Fetch and parse the table.

        Returns:
            Parsed rows (possibly empty)

        Raises:
            TableLoadError: If the resource cannot be fetched or parsed
        """
        text = self.fetch_text()
        try:
            rows = parse_csv(text, delimiter=self.delimiter)
        except (csv.Error, TypeError) as e:
            raise TableLoadError(f"CSV parse failed @ {self.location}: {e}") from e
        logger.info(f"Loaded table | location={self.location}, rows={len(rows)}")
        return rows
