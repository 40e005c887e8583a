"""
Tests for reference table loading and caching.
"""

import httpx
import pytest

from packlist.shared.result import Empty, Ok, Unavailable
from packlist.tables.cache import TableCache
from packlist.tables.loader import CsvTableLoader, TableLoadError, google_sheet_to_csv, parse_csv
from packlist.tests.conftest import StaticSource


# ============================================================================
# TestParseCsv
# ============================================================================


class TestParseCsv:
    """Tests for parse_csv()."""

    def test_quoted_fields_and_escaped_quotes(self):
        text = 'name,notes\r\n"Tent, 2p","He said ""light"""\r\n'
        assert parse_csv(text) == [{"name": "Tent, 2p", "notes": 'He said "light"'}]

    def test_blank_lines_and_trimming(self):
        text = "\ufeff name , category \n\n Headlamp , Gear \n\n"
        assert parse_csv(text) == [{"name": "Headlamp", "category": "Gear"}]

    def test_short_rows_padded(self):
        assert parse_csv("a,b,c\n1\n") == [{"a": "1", "b": "", "c": ""}]

    def test_custom_delimiter(self):
        assert parse_csv("a;b\n1,5;2\n", delimiter=";") == [{"a": "1,5", "b": "2"}]

    def test_empty(self):
        assert parse_csv("") == []
        assert parse_csv("only,header\n") == []


class TestGoogleSheetToCsv:
    """Tests for Sheets URL rewriting."""

    def test_rewrites_edit_url_with_gid(self):
        url = "https://docs.google.com/spreadsheets/d/abc123/edit#gid=42"
        assert google_sheet_to_csv(url) == (
            "https://docs.google.com/spreadsheets/d/abc123/export?format=csv&gid=42"
        )

    def test_rewrites_query_gid(self):
        url = "https://docs.google.com/spreadsheets/d/abc123/edit?gid=7"
        assert google_sheet_to_csv(url).endswith("/abc123/export?format=csv&gid=7")

    def test_other_urls_unchanged(self):
        url = "https://example.com/products.csv"
        assert google_sheet_to_csv(url) == url


# ============================================================================
# TestCsvTableLoader
# ============================================================================


class TestCsvTableLoader:
    """Tests for CsvTableLoader with local files and a mocked transport."""

    def test_local_file(self, tmp_path):
        path = tmp_path / "seasons.csv"
        path.write_text("country,label\nVietnam,wet\n", encoding="utf-8")
        assert CsvTableLoader(str(path)).load() == [{"country": "Vietnam", "label": "wet"}]

    def test_missing_local_file(self, tmp_path):
        with pytest.raises(TableLoadError):
            CsvTableLoader(str(tmp_path / "missing.csv")).load()

    def test_undecodable_local_file(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_bytes(b"name,category\nCaf\xe9 mug,Gear\n")
        with pytest.raises(TableLoadError, match="read failed"):
            CsvTableLoader(str(path)).load()

    def test_bad_delimiter(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text("name;category\nMug;Gear\n", encoding="utf-8")
        with pytest.raises(TableLoadError, match="parse failed"):
            CsvTableLoader(str(path), delimiter=";;").load()

    def test_invalid_url(self):
        with pytest.raises(TableLoadError, match="fetch failed"):
            CsvTableLoader("http://[::1").load()

    def test_remote_fetch(self):
        def handler(request):
            assert request.url.path == "/products.csv"
            return httpx.Response(200, text="name,category\nHeadlamp,Gear\n")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        loader = CsvTableLoader("https://shop.example/products.csv", http_client=client)
        assert loader.is_remote
        assert loader.load() == [{"name": "Headlamp", "category": "Gear"}]

    def test_remote_http_error(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        loader = CsvTableLoader("https://shop.example/products.csv", http_client=client)
        with pytest.raises(TableLoadError, match="404"):
            loader.load()


# ============================================================================
# TestTableCache
# ============================================================================


class TestTableCache:
    """Tests for TTL behavior and result types."""

    def test_caches_within_ttl(self, clock):
        source = StaticSource("a\n1\n")
        cache = TableCache(source, ttl_seconds=60, clock=clock)

        first = cache.get()
        clock.advance(59)
        second = cache.get()

        assert first == Ok(({"a": "1"},))
        assert second == first
        assert source.loads == 1

    def test_refetches_after_ttl(self, clock):
        source = StaticSource("a\n1\n")
        cache = TableCache(source, ttl_seconds=60, clock=clock)
        cache.get()
        clock.advance(60)
        cache.get()
        assert source.loads == 2

    def test_force_and_invalidate(self, clock):
        source = StaticSource("a\n1\n")
        cache = TableCache(source, ttl_seconds=60, clock=clock)
        cache.get()
        cache.get(force=True)
        cache.invalidate()
        assert cache.entry is None
        cache.get()
        assert source.loads == 3

    def test_entry_swapped_whole(self, clock):
        source = StaticSource("a\n1\n")
        cache = TableCache(source, ttl_seconds=60, clock=clock)
        cache.get()
        before = cache.entry
        source.text = "a\n2\n"
        cache.get(force=True)
        assert before.rows == ({"a": "1"},)
        assert cache.entry.rows == ({"a": "2"},)

    def test_unconfigured_source(self):
        result = TableCache(None, ttl_seconds=60, name="seasons").get()
        assert isinstance(result, Unavailable)
        assert "not configured" in result.reason

    def test_load_error_is_unavailable(self, clock):
        cache = TableCache(StaticSource(error="boom"), ttl_seconds=60, clock=clock)
        result = cache.get()
        assert result == Unavailable("boom")
        assert cache.entry is None

    def test_empty_table_not_cached(self, clock):
        source = StaticSource("a,b\n")
        cache = TableCache(source, ttl_seconds=60, clock=clock)
        assert cache.get() == Empty()
        cache.get()
        assert source.loads == 2
