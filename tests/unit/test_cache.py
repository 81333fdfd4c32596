"""
Unit tests for the enrichment cache
"""

from core.cache import InMemoryCache
from schemas.poi import EnrichmentRecord


class TestInMemoryCache:
    """Test get/put/merge semantics"""

    def test_get_missing_returns_none(self):
        cache = InMemoryCache()

        assert cache.get("Q1") is None
        assert "Q1" not in cache
        assert len(cache) == 0

    def test_put_then_get(self):
        cache = InMemoryCache()
        record = EnrichmentRecord(wikidata_id="Q1", description="A place")

        cache.put("Q1", record)

        assert cache.get("Q1") == record
        assert "Q1" in cache
        assert len(cache) == 1

    def test_merge_never_overwrites_with_null(self):
        cache = InMemoryCache()
        cache.put("Q1", EnrichmentRecord(wikidata_id="Q1", description="A place", image_url="http://img"))

        merged = cache.merge_non_null("Q1", EnrichmentRecord(wikidata_id="Q1", wikipedia_url="http://wiki"))

        assert merged.description == "A place"
        assert merged.image_url == "http://img"
        assert merged.wikipedia_url == "http://wiki"
        assert cache.get("Q1") == merged

    def test_merge_replaces_non_null_values(self):
        cache = InMemoryCache()
        cache.put("Q1", EnrichmentRecord(wikidata_id="Q1", description="Old"))

        merged = cache.merge_non_null("Q1", EnrichmentRecord(wikidata_id="Q1", description="New"))

        assert merged.description == "New"

    def test_merge_into_empty_stores_value(self):
        cache = InMemoryCache()
        record = EnrichmentRecord(wikidata_id="Q2")

        assert cache.merge_non_null("Q2", record) == record
        assert cache.get("Q2") == record

    def test_clear(self):
        cache = InMemoryCache()
        cache.put("Q1", EnrichmentRecord(wikidata_id="Q1"))

        cache.clear()

        assert len(cache) == 0
