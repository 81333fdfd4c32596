"""
Unit tests for the Wikidata and Wikipedia enrichers
"""

import httpx
import pytest
from core.exceptions import ContentEnrichmentError
from schemas.poi import EnrichmentRecord
from ingestion.enrichers.wikipedia import language_order
from tests.conftest import FakeServices, json_response, make_wikidata, make_wikipedia


class TestWikidataEnricher:
    """Test batched metadata lookups"""

    @pytest.mark.asyncio
    async def test_enrich_batch_fills_known_and_nulls_unknown(self):
        services = FakeServices()
        enricher = make_wikidata(services)

        results = await enricher.enrich_batch(["Q19675", "q2981"])

        assert set(results) == {"Q19675", "Q2981"}
        louvre = results["Q19675"]
        assert louvre.description == "musée d'art à Paris"
        assert louvre.image_url.endswith("Louvre.jpg")
        assert louvre.wikipedia_url == "https://fr.wikipedia.org/wiki/Mus%C3%A9e_du_Louvre"
        assert results["Q2981"] == EnrichmentRecord(wikidata_id="Q2981")

    @pytest.mark.asyncio
    async def test_single_query_per_batch_with_values_clause(self):
        services = FakeServices()
        enricher = make_wikidata(services)

        await enricher.enrich_batch(["Q19675", "Q2981", "Q19675", ""])

        assert len(services.sparql_queries) == 1
        query = services.sparql_queries[0]
        assert "VALUES ?item { wd:Q19675 wd:Q2981 }" in query
        assert "wdt:P18" in query
        assert "<https://fr.wikipedia.org/>" in query

    @pytest.mark.asyncio
    async def test_batches_and_progress(self):
        services = FakeServices(bindings=[])
        enricher = make_wikidata(services, batch_size=2)
        progress = []

        results = await enricher.enrich_batch(
            ["Q1", "Q2", "Q3", "Q4", "Q5"],
            on_progress=lambda processed, total: progress.append((processed, total))
        )

        assert len(results) == 5
        assert len(services.sparql_queries) == 3
        assert progress == [(2, 5), (4, 5), (5, 5)]

    @pytest.mark.asyncio
    async def test_cached_ids_are_not_fetched_again(self):
        services = FakeServices()
        enricher = make_wikidata(services)

        await enricher.enrich_batch(["Q19675"])
        results = await enricher.enrich_batch(["Q19675"])

        assert len(services.sparql_queries) == 1
        assert results["Q19675"].description == "musée d'art à Paris"

    @pytest.mark.asyncio
    async def test_failed_batch_keeps_ids_with_null_fields(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(500)
            return json_response({"results": {"bindings": [
                {"item": {"value": "http://www.wikidata.org/entity/Q3"}, "description": {"value": "three"}},
            ]}})

        enricher = make_wikidata(handler, batch_size=2)
        results = await enricher.enrich_batch(["Q1", "Q2", "Q3"])

        assert results["Q1"] == EnrichmentRecord(wikidata_id="Q1")
        assert results["Q2"] == EnrichmentRecord(wikidata_id="Q2")
        assert results["Q3"].description == "three"
        # Failed ids are retried on the next call
        assert "Q1" not in enricher.cache

    @pytest.mark.asyncio
    async def test_first_binding_value_wins(self):
        services = FakeServices(bindings=[
            {"item": {"value": "http://www.wikidata.org/entity/Q7"}, "image": {"value": "first.jpg"}},
            {"item": {"value": "http://www.wikidata.org/entity/Q7"}, "image": {"value": "second.jpg"}},
        ])

        record = await make_wikidata(services).enrich("Q7")

        assert record.image_url == "first.jpg"

    @pytest.mark.asyncio
    async def test_malformed_bindings_are_ignored(self):
        bindings = [
            "not a binding",
            {"item": "Q19675"},
            {"item": {"value": "http://www.wikidata.org/entity/Q19675"}, "description": {"value": 42}, "image": {"value": "http://img"}},
        ]
        enricher = make_wikidata(FakeServices(bindings=bindings))

        results = await enricher.enrich_batch(["Q19675"])

        assert results["Q19675"] == EnrichmentRecord(wikidata_id="Q19675", image_url="http://img")

    @pytest.mark.asyncio
    async def test_bindings_not_a_list_leave_nulls(self):
        enricher = make_wikidata(lambda request: json_response({"results": {"bindings": {"Q1": 1}}}))

        results = await enricher.enrich_batch(["Q1"])

        assert results == {"Q1": EnrichmentRecord(wikidata_id="Q1")}

    @pytest.mark.asyncio
    async def test_empty_input(self):
        services = FakeServices()

        assert await make_wikidata(services).enrich_batch([]) == {}
        assert services.calls == []


class TestWikipediaEnricher:
    """Test title resolution and content fetch"""

    def test_language_order(self):
        assert language_order("fr") == ["fr", "en", "de", "es", "it"]
        assert language_order("en") == ["en", "de", "es", "it"]

    @pytest.mark.asyncio
    async def test_full_article_from_sections(self):
        enricher = make_wikipedia(FakeServices())

        content = await enricher.get_content("Q19675", "fr")

        assert content.title == "Musee du Louvre"
        assert content.language == "fr"
        assert content.content == "Le Louvre est un musée.\n\nHistoire\n\nAncien palais royal."
        assert content.extract == content.content[:500]
        assert content.url == "https://fr.wikipedia.org/wiki/Musee_du_Louvre"

    @pytest.mark.asyncio
    async def test_falls_back_to_other_language_and_summary(self):
        enricher = make_wikipedia(FakeServices())

        content = await enricher.get_content("Q2981", "fr")

        assert content.language == "en"
        assert content.content == "Notre-Dame is a cathedral."

    @pytest.mark.asyncio
    async def test_unknown_entity_is_absent(self):
        enricher = make_wikipedia(FakeServices())

        assert await enricher.get_content("Q999", "fr") is None

    @pytest.mark.asyncio
    async def test_unlisted_language_falls_back_to_english(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if "EntityData" in request.url.path:
                return json_response({"entities": {"Q5": {"sitelinks": {"enwiki": {"title": "Five"}}}}})
            if "summary" in request.url.path:
                return json_response({"extract": "Five."})
            return httpx.Response(404)

        enricher = make_wikipedia(handler)
        content = await enricher.get_content("Q5", "pt")

        assert content.language == "en"
        assert content.title == "Five"

    @pytest.mark.asyncio
    async def test_content_is_cached_per_id_and_language(self):
        services = FakeServices()
        enricher = make_wikipedia(services)

        await enricher.get_content("Q19675", "fr")
        calls = len(services.calls)
        await enricher.get_content("Q19675", "fr")

        assert len(services.calls) == calls
        assert "Q19675:fr" in enricher.cache

    @pytest.mark.asyncio
    async def test_server_error_raises_content_error(self):
        enricher = make_wikipedia(lambda request: httpx.Response(500))

        with pytest.raises(ContentEnrichmentError):
            await enricher.get_content("Q1", "fr")

    @pytest.mark.asyncio
    async def test_enrich_batch_tolerates_failures(self):
        def handler(request):
            if "Q1.json" in request.url.path:
                return httpx.Response(500)
            return FakeServices()(request)

        enricher = make_wikipedia(handler)
        progress = []

        results = await enricher.enrich_batch(
            ["Q1", "Q19675", "Q999"], "fr",
            on_progress=lambda processed, total: progress.append(processed)
        )

        assert list(results) == ["Q19675"]
        assert progress == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_malformed_entity_raises_content_error(self):
        enricher = make_wikipedia(lambda request: json_response({"entities": {"Q1": None}}))

        with pytest.raises(ContentEnrichmentError):
            await enricher.get_content("Q1", "fr")

    @pytest.mark.asyncio
    async def test_enrich_batch_skips_malformed_payloads(self):
        entities = {
            "Q1": None,
            "Q2": {"id": "Q2", "sitelinks": [{"site": "frwiki", "title": "Liste"}]},
            "Q3": {"id": "Q3", "sitelinks": {"frwiki": {"site": "frwiki", "title": "Sections"}}},
        }

        def handler(request):
            path = request.url.path
            qid = path.rsplit("/", 1)[-1].replace(".json", "")
            if qid in entities:
                return json_response({"entities": {qid: entities[qid]}})
            if path.endswith("/Sections"):
                return json_response({"lead": [{"text": "<p>x</p>"}]})
            return FakeServices()(request)

        enricher = make_wikipedia(handler)

        results = await enricher.enrich_batch(["Q1", "Q2", "Q3", "Q19675"], "fr")

        assert list(results) == ["Q19675"]
